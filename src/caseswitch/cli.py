import logging
from collections.abc import Iterator
from pathlib import Path
from typing import Annotated, Any

import srsly
import typer
from pydantic import ValidationError

from caseswitch.core.validate import Severity
from caseswitch.rules.eval import eval_rules, trace_rules
from caseswitch.rules.models import RuleTable, ValueType
from caseswitch.rules.probes import (
    DEFAULT_INT_PROBE_RANGE,
    MAX_INT_PROBE_SPAN,
    generate_probe_values,
)
from caseswitch.rules.render import render_rules
from caseswitch.rules.validate import validate_rule_table

app = typer.Typer(help="Evaluate, render and lint first-match rule tables.")
logger = logging.getLogger(__name__)

NO_MATCH = "<no match>"


class _RowError(Exception):
    def __init__(self, *, row_number: int, reason: str):
        self.row_number = row_number
        self.reason = reason
        super().__init__(reason)


@app.callback()
def main(
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Enable debug logging")
    ] = False,
) -> None:
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )


def _parse_range(value: str | None) -> tuple[int, int] | None:
    """Parse 'lo,hi' into tuple. Raises typer.BadParameter on invalid input."""
    if value is None:
        return None
    try:
        parts = value.split(",")
        if len(parts) != 2:
            raise typer.BadParameter(
                f"Invalid range '{value}': expected 'LO,HI' (e.g., '5,10')"
            )
        lo_s, hi_s = parts[0].strip(), parts[1].strip()
        if not lo_s or not hi_s:
            raise typer.BadParameter(
                f"Invalid range '{value}': expected 'LO,HI' (e.g., '5,10')"
            )
        lo = int(lo_s)
        hi = int(hi_s)
        if lo > hi:
            raise typer.BadParameter(
                f"Invalid range '{value}': low must be <= high"
            )
        if hi - lo + 1 > MAX_INT_PROBE_SPAN:
            raise typer.BadParameter(
                f"Invalid range '{value}': spans more than "
                f"{MAX_INT_PROBE_SPAN} values"
            )
        return (lo, hi)
    except ValueError as err:
        raise typer.BadParameter(
            f"Invalid range '{value}': expected 'LO,HI' (e.g., '5,10')"
        ) from err


def _parse_value(table: RuleTable, raw: str) -> Any:
    if table.value_type == ValueType.STR:
        return raw
    try:
        return int(raw.strip())
    except ValueError as err:
        raise typer.BadParameter(
            f"Invalid value '{raw}': table dispatches on int values"
        ) from err


def _load_table(path: Path) -> RuleTable:
    if not path.is_file():
        typer.echo(f"Error: rule table not found: {path}", err=True)
        raise typer.Exit(1)
    try:
        raw = srsly.read_json(path)
    except ValueError as err:
        typer.echo(f"Error: malformed JSON in {path}: {err}", err=True)
        raise typer.Exit(1) from err
    try:
        table = RuleTable.model_validate(raw)
    except ValidationError as err:
        first_error = err.errors(include_url=False)[0]
        loc = ".".join(str(item) for item in first_error["loc"])
        typer.echo(
            f"Error: invalid rule table {path} at '{loc}': "
            f"{first_error['msg']}",
            err=True,
        )
        raise typer.Exit(1) from err
    logger.debug("loaded %d rule(s) from %s", len(table.rules), path)
    return table


def _format_label(label: str | None) -> str:
    return NO_MATCH if label is None else label


@app.command("eval")
def eval_command(
    table_file: Annotated[Path, typer.Argument(help="Rule table JSON file")],
    value: Annotated[str, typer.Argument(help="Value to dispatch on")],
    trace: Annotated[
        bool, typer.Option("--trace", help="Show every checked condition")
    ] = False,
) -> None:
    """Print the label selected for VALUE."""
    table = _load_table(table_file)
    parsed = _parse_value(table, value)
    if not trace:
        typer.echo(_format_label(eval_rules(table, parsed)))
        return

    result = trace_rules(table, parsed)
    for step in result.steps:
        mark = "match" if step.matched else "no"
        typer.echo(f"  rules[{step.index}] {step.condition}: {mark}")
    if result.used_default:
        typer.echo("  default")
    typer.echo(_format_label(result.label))


def _iter_rows(
    table: RuleTable, input_file: Path
) -> Iterator[dict[str, Any]]:
    for row_number, row in enumerate(srsly.read_jsonl(input_file), start=1):
        if not isinstance(row, dict) or "value" not in row:
            raise _RowError(
                row_number=row_number,
                reason="expected an object with a 'value' field",
            )
        try:
            label = eval_rules(table, row["value"])
        except ValueError as err:
            raise _RowError(row_number=row_number, reason=str(err)) from err
        yield {**row, "label": label}


@app.command()
def batch(
    table_file: Annotated[Path, typer.Argument(help="Rule table JSON file")],
    input_file: Annotated[
        Path, typer.Argument(help="JSONL file of {'value': ...} rows")
    ],
    output: Annotated[
        Path, typer.Option("--output", "-o", help="Output JSONL file")
    ],
) -> None:
    """Label every row of INPUT_FILE and write the rows to OUTPUT."""
    table = _load_table(table_file)
    try:
        rows = list(_iter_rows(table, input_file))
    except _RowError as err:
        typer.echo(
            f"Error: invalid row {err.row_number} in {input_file}: "
            f"{err.reason}",
            err=True,
        )
        raise typer.Exit(1) from err
    except ValueError as err:
        typer.echo(f"Error: malformed JSONL in {input_file}: {err}", err=True)
        raise typer.Exit(1) from err

    srsly.write_jsonl(output, rows)
    typer.echo(f"Labelled {len(rows)} rows to {output}")


@app.command()
def render(
    table_file: Annotated[Path, typer.Argument(help="Rule table JSON file")],
    func_name: Annotated[
        str, typer.Option("--func-name", help="Name of the rendered function")
    ] = "f",
) -> None:
    """Print the table as an equivalent Python if/elif/else function."""
    table = _load_table(table_file)
    typer.echo(render_rules(table, func_name=func_name))


@app.command()
def validate(
    table_file: Annotated[Path, typer.Argument(help="Rule table JSON file")],
    probe_range: Annotated[
        str | None,
        typer.Option(
            "--probe-range", help="Integer probe range (lo,hi), int tables"
        ),
    ] = None,
    probe_values: Annotated[
        list[str] | None,
        typer.Option(
            "--probe-value", help="Explicit probe value (repeatable)"
        ),
    ] = None,
) -> None:
    """Report duplicate, shadowed and unreachable rules."""
    table = _load_table(table_file)
    probes: list[Any]
    if probe_values:
        probes = [_parse_value(table, raw) for raw in probe_values]
    else:
        value_range = _parse_range(probe_range) or DEFAULT_INT_PROBE_RANGE
        probes = generate_probe_values(table, value_range)

    issues = validate_rule_table(table, probes)
    for issue in issues:
        typer.echo(
            f"{issue.severity.value.upper()} {issue.code} "
            f"{issue.location}: {issue.message}"
        )
    n_errors = sum(1 for i in issues if i.severity == Severity.ERROR)
    typer.echo(
        f"{table_file}: {len(issues)} issue(s), {n_errors} error(s)"
    )
    if n_errors:
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
