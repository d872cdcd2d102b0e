import logging
from collections.abc import Callable
from typing import Any

from caseswitch.core.conditions import eval_condition, render_condition
from caseswitch.core.dispatch import Dispatcher
from caseswitch.core.trace import DispatchTrace, TraceStep
from caseswitch.rules.models import RuleTable, ValueType, default_var

logger = logging.getLogger(__name__)


def require_value_type(table: RuleTable, value: Any) -> Any:
    if table.value_type == ValueType.INT:
        if type(value) is not int:
            raise ValueError(
                f"value must be int, got {type(value).__name__}"
            )
    elif not isinstance(value, str):
        raise ValueError(f"value must be str, got {type(value).__name__}")
    return value


def build_dispatcher(
    table: RuleTable,
    value: Any,
    on_select: Callable[[str], object],
    *,
    on_check: Callable[[int, bool], object] | None = None,
) -> Dispatcher[Any]:
    """Translate a rule table into dispatcher calls.

    Each rule becomes one ``add_case`` in table order and the default label,
    when present, becomes the fallback. ``on_check`` observes every
    predicate result with the rule index.
    """
    value = require_value_type(table, value)
    dispatcher: Dispatcher[Any] = Dispatcher(value)
    for index, rule in enumerate(table.rules):
        dispatcher.add_case(
            _make_predicate(index, rule.condition, on_check),
            _make_action(rule.label, on_select),
        )
    if table.default_label is not None:
        dispatcher.set_fallback(_make_action(table.default_label, on_select))
    return dispatcher


def _make_predicate(
    index: int,
    condition: Any,
    on_check: Callable[[int, bool], object] | None,
) -> Callable[[Any], bool]:
    def predicate(value: Any) -> bool:
        matched = eval_condition(condition, value)
        if on_check is not None:
            on_check(index, matched)
        return matched

    return predicate


def _make_action(
    label: str, on_select: Callable[[str], object]
) -> Callable[[], None]:
    def action() -> None:
        on_select(label)

    return action


def eval_rules(table: RuleTable, value: Any) -> str | None:
    """Return the label of the first matching rule, else the default."""
    selected: list[str] = []
    build_dispatcher(table, value, selected.append).evaluate()
    label = selected[0] if selected else None
    logger.debug("value=%r selected label=%r", value, label)
    return label


def trace_rules(table: RuleTable, value: Any) -> DispatchTrace:
    trace = DispatchTrace(value=value)
    var = default_var(table.value_type)

    def on_check(index: int, matched: bool) -> None:
        trace.steps.append(
            TraceStep(
                index=index,
                condition=render_condition(table.rules[index].condition, var),
                matched=matched,
            )
        )

    def on_select(label: str) -> None:
        trace.label = label

    matched = build_dispatcher(
        table, value, on_select, on_check=on_check
    ).evaluate()
    trace.used_default = not matched and trace.label is not None
    logger.debug(
        "value=%r checked %d rule(s), label=%r",
        value,
        len(trace.steps),
        trace.label,
    )
    return trace
