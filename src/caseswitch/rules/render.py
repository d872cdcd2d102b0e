from caseswitch.core.conditions import render_condition
from caseswitch.rules.models import RuleTable, ValueType, default_var


def render_rules(
    table: RuleTable,
    func_name: str = "f",
    var: str | None = None,
) -> str:
    """Render a rule table as an equivalent if/elif/else function."""
    if var is None:
        var = default_var(table.value_type)
    annotation = "int" if table.value_type == ValueType.INT else "str"
    lines = [f"def {func_name}({var}: {annotation}) -> str | None:"]

    for i, rule in enumerate(table.rules):
        keyword = "if" if i == 0 else "elif"
        cond = render_condition(rule.condition, var)
        lines.append(f"    {keyword} {cond}:")
        lines.append(f"        return {rule.label!r}")

    default = repr(table.default_label)
    if table.rules:
        lines.append("    else:")
        lines.append(f"        return {default}")
    else:
        lines.append(f"    return {default}")

    return "\n".join(lines)
