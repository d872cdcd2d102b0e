import logging
from collections.abc import Callable, Sequence
from typing import Any, cast

from caseswitch.core.conditions import eval_condition
from caseswitch.core.validate import Issue, Severity
from caseswitch.rules.eval import eval_rules, require_value_type
from caseswitch.rules.models import RuleTable
from caseswitch.rules.probes import generate_probe_values
from caseswitch.rules.render import render_rules

logger = logging.getLogger(__name__)

CODE_EMPTY_TABLE = "EMPTY_TABLE"
CODE_DUPLICATE_CONDITION = "DUPLICATE_CONDITION"
CODE_SHADOWED_RULE = "SHADOWED_RULE"
CODE_NEVER_MATCHES = "NEVER_MATCHES"
CODE_PROBE_TYPE = "PROBE_TYPE"
CODE_CODE_EXEC_ERROR = "CODE_EXEC_ERROR"
CODE_RENDER_MISMATCH = "RENDER_MISMATCH"
CODE_RENDER_ISSUES_CAPPED = "RENDER_ISSUES_CAPPED"
_ALLOWED_BUILTINS = {"len": len, "int": int, "str": str}
MAX_RENDER_ISSUES = 10


def _validate_duplicates(table: RuleTable) -> tuple[list[Issue], set[int]]:
    issues: list[Issue] = []
    duplicates: set[int] = set()
    for i, rule in enumerate(table.rules):
        for j in range(i):
            if table.rules[j].condition == rule.condition:
                duplicates.add(i)
                issues.append(
                    Issue(
                        code=CODE_DUPLICATE_CONDITION,
                        severity=Severity.WARNING,
                        message=(
                            f"Condition repeats rules[{j}]; rule "
                            f"'{rule.label}' can never be selected"
                        ),
                        location=f"rules[{i}].condition",
                    )
                )
                break
    return issues, duplicates


def _validate_reachability(
    table: RuleTable, probes: Sequence[Any], skip: set[int]
) -> list[Issue]:
    n_rules = len(table.rules)
    ever_true = [False] * n_rules
    ever_selected = [False] * n_rules
    for value in probes:
        selected_seen = False
        for i, rule in enumerate(table.rules):
            if not eval_condition(rule.condition, value):
                continue
            ever_true[i] = True
            if not selected_seen:
                ever_selected[i] = True
                selected_seen = True

    issues: list[Issue] = []
    for i, rule in enumerate(table.rules):
        if i in skip:
            continue
        if not ever_true[i]:
            issues.append(
                Issue(
                    code=CODE_NEVER_MATCHES,
                    severity=Severity.WARNING,
                    message=(
                        f"Rule '{rule.label}' matched none of "
                        f"{len(probes)} probe values"
                    ),
                    location=f"rules[{i}].condition",
                )
            )
        elif not ever_selected[i]:
            issues.append(
                Issue(
                    code=CODE_SHADOWED_RULE,
                    severity=Severity.WARNING,
                    message=(
                        f"Rule '{rule.label}' only matched probe values "
                        "already claimed by an earlier rule"
                    ),
                    location=f"rules[{i}].condition",
                )
            )
    return issues


def _compile_rendered(
    code: str, func_name: str
) -> tuple[list[Issue], Callable[[Any], Any] | None]:
    namespace: dict[str, Any] = {}
    try:
        exec(code, {"__builtins__": _ALLOWED_BUILTINS}, namespace)  # noqa: S102
    except Exception as e:
        return [
            Issue(
                code=CODE_CODE_EXEC_ERROR,
                severity=Severity.ERROR,
                message=f"Failed to execute rendered code: {e}",
                location="code",
            )
        ], None
    func = namespace.get(func_name)
    if not callable(func):
        return [
            Issue(
                code=CODE_CODE_EXEC_ERROR,
                severity=Severity.ERROR,
                message=f"Function '{func_name}' not found in rendered code",
                location="code",
            )
        ], None
    return [], cast(Callable[[Any], Any], func)


def _validate_render_parity(
    table: RuleTable, probes: Sequence[Any]
) -> list[Issue]:
    issues, func = _compile_rendered(render_rules(table), "f")
    if func is None:
        return issues

    mismatches = 0
    for value in probes:
        expected = eval_rules(table, value)
        try:
            actual = func(value)
        except Exception as e:
            actual = f"<raised {type(e).__name__}>"
        if actual == expected:
            continue
        mismatches += 1
        if mismatches > MAX_RENDER_ISSUES:
            continue
        issues.append(
            Issue(
                code=CODE_RENDER_MISMATCH,
                severity=Severity.ERROR,
                message=(
                    f"f({value!r}) = {actual!r}, expected {expected!r}"
                ),
                location="code",
            )
        )
    if mismatches > MAX_RENDER_ISSUES:
        issues.append(
            Issue(
                code=CODE_RENDER_ISSUES_CAPPED,
                severity=Severity.WARNING,
                message=(
                    f"{mismatches - MAX_RENDER_ISSUES} further render "
                    "mismatches not reported"
                ),
                location="code",
            )
        )
    return issues


def _validate_probe_types(
    table: RuleTable, probes: Sequence[Any]
) -> list[Issue]:
    issues: list[Issue] = []
    for i, value in enumerate(probes):
        try:
            require_value_type(table, value)
        except ValueError as e:
            issues.append(
                Issue(
                    code=CODE_PROBE_TYPE,
                    severity=Severity.ERROR,
                    message=str(e),
                    location=f"probes[{i}]",
                )
            )
    return issues


def validate_rule_table(
    table: RuleTable,
    probe_values: Sequence[Any] | None = None,
    *,
    check_render: bool = True,
) -> list[Issue]:
    """Lint a rule table.

    Tables are never rejected for being empty or lacking a default; those
    produce warnings at most. Reachability is judged on ``probe_values``
    (generated from the table when omitted), so a SHADOWED_RULE or
    NEVER_MATCHES warning only holds for the probed values.
    """
    if probe_values is None:
        probe_values = generate_probe_values(table)

    issues = _validate_probe_types(table, probe_values)
    if issues:
        return issues

    if not table.rules:
        issues.append(
            Issue(
                code=CODE_EMPTY_TABLE,
                severity=Severity.WARNING,
                message="Table has no rules; only the default can apply",
                location="rules",
            )
        )

    duplicate_issues, duplicates = _validate_duplicates(table)
    issues.extend(duplicate_issues)
    issues.extend(_validate_reachability(table, probe_values, duplicates))
    if check_render:
        issues.extend(_validate_render_parity(table, probe_values))

    logger.debug(
        "validated %d rule(s) on %d probe(s): %d issue(s)",
        len(table.rules),
        len(probe_values),
        len(issues),
    )
    return issues
