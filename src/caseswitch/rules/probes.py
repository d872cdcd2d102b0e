from typing import Any

from caseswitch.core.conditions import (
    ConditionAnd,
    ConditionNot,
    ConditionOr,
    is_int_condition,
)
from caseswitch.core.predicates import predicate_anchors
from caseswitch.core.string_predicates import string_predicate_anchors
from caseswitch.rules.models import RuleTable, ValueType

DEFAULT_INT_PROBE_RANGE: tuple[int, int] = (-100, 100)
MAX_INT_PROBE_SPAN = 1_000_000
_BASE_STRING_PROBES: tuple[str, ...] = (
    "",
    "a",
    "abc",
    "ABC",
    "Abc",
    "123",
    "a1",
    "hello world",
    "HELLO WORLD",
)


def _anchors(cond: Any) -> list[Any]:
    match cond:
        case ConditionNot(operand=op):
            return _anchors(op)
        case ConditionAnd(operands=ops) | ConditionOr(operands=ops):
            return [a for op in ops for a in _anchors(op)]
    if is_int_condition(cond):
        return predicate_anchors(cond)
    return string_predicate_anchors(cond)


def generate_probe_values(
    table: RuleTable,
    value_range: tuple[int, int] = DEFAULT_INT_PROBE_RANGE,
) -> list[Any]:
    """Values that exercise every rule boundary of ``table``.

    Integer tables get every value in ``value_range`` plus each condition
    anchor and its neighbours; the range may span at most
    ``MAX_INT_PROBE_SPAN`` values. String tables get a fixed base set plus
    strings built from the condition arguments. Order is stable and
    duplicates are removed.
    """
    probes: list[Any] = []
    if table.value_type == ValueType.INT:
        lo, hi = value_range
        if lo > hi:
            raise ValueError(f"value_range: low ({lo}) must be <= high ({hi})")
        if hi - lo + 1 > MAX_INT_PROBE_SPAN:
            raise ValueError(
                f"value_range: spans {hi - lo + 1} values, "
                f"at most {MAX_INT_PROBE_SPAN} allowed"
            )
        probes.extend(range(lo, hi + 1))
        for rule in table.rules:
            for anchor in _anchors(rule.condition):
                probes.extend((anchor - 1, anchor, anchor + 1))
    else:
        probes.extend(_BASE_STRING_PROBES)
        for rule in table.rules:
            probes.extend(_anchors(rule.condition))
    return list(dict.fromkeys(probes))
