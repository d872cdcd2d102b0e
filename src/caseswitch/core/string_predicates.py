"""String conditions for rule tables dispatching on ``str`` values.

Only plain ``str`` operations are used, so a rendered condition reads the
same as the model it came from.
"""

from typing import Annotated, Literal

from pydantic import BaseModel, Field

from caseswitch.core.predicates import COMPARE_OPS


class StringPredicateStartsWith(BaseModel):
    kind: Literal["starts_with"] = "starts_with"
    prefix: str


class StringPredicateEndsWith(BaseModel):
    kind: Literal["ends_with"] = "ends_with"
    suffix: str


class StringPredicateContains(BaseModel):
    kind: Literal["contains"] = "contains"
    substring: str


class StringPredicateEquals(BaseModel):
    kind: Literal["equals"] = "equals"
    text: str


class StringPredicateLengthCmp(BaseModel):
    """``len(s) <op> value``, with the same operators as integer rules."""

    kind: Literal["length_cmp"] = "length_cmp"
    op: Literal["eq", "ne", "lt", "le", "gt", "ge"]
    value: int = Field(ge=0)


StringPredicate = Annotated[
    StringPredicateStartsWith
    | StringPredicateEndsWith
    | StringPredicateContains
    | StringPredicateEquals
    | StringPredicateLengthCmp,
    Field(discriminator="kind"),
]

STRING_PREDICATE_MODELS: tuple[type[BaseModel], ...] = (
    StringPredicateStartsWith,
    StringPredicateEndsWith,
    StringPredicateContains,
    StringPredicateEquals,
    StringPredicateLengthCmp,
)


def eval_string_predicate(pred: StringPredicate, s: str) -> bool:
    match pred:
        case StringPredicateStartsWith(prefix=p):
            return s.startswith(p)
        case StringPredicateEndsWith(suffix=suf):
            return s.endswith(suf)
        case StringPredicateContains(substring=sub):
            return sub in s
        case StringPredicateEquals(text=t):
            return s == t
        case StringPredicateLengthCmp(op=op, value=v):
            return COMPARE_OPS[op][1](len(s), v)
        case _:
            raise ValueError(f"Unknown string predicate: {pred}")


def render_string_predicate(pred: StringPredicate, var: str = "s") -> str:
    match pred:
        case StringPredicateStartsWith(prefix=p):
            return f"{var}.startswith({p!r})"
        case StringPredicateEndsWith(suffix=suf):
            return f"{var}.endswith({suf!r})"
        case StringPredicateContains(substring=sub):
            return f"{sub!r} in {var}"
        case StringPredicateEquals(text=t):
            return f"{var} == {t!r}"
        case StringPredicateLengthCmp(op=op, value=v):
            return f"len({var}) {COMPARE_OPS[op][0]} {v}"
        case _:
            raise ValueError(f"Unknown string predicate: {pred}")


def string_predicate_anchors(pred: StringPredicate) -> list[str]:
    """Strings on both sides of the boundary ``pred`` draws."""
    match pred:
        case StringPredicateStartsWith(prefix=p):
            return [p, p + "x", "x" + p]
        case StringPredicateEndsWith(suffix=suf):
            return [suf, "x" + suf, suf + "x"]
        case StringPredicateContains(substring=sub):
            return [sub, "x" + sub + "x", sub[:-1]]
        case StringPredicateEquals(text=t):
            return [t, t + "x", t[:-1]]
        case StringPredicateLengthCmp(value=v):
            return ["a" * n for n in (v - 1, v, v + 1) if n >= 0]
        case _:
            return []
