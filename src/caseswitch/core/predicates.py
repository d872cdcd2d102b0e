"""Integer conditions for rule tables dispatching on ``int`` values.

Combinators (``not``/``and``/``or``) live in ``caseswitch.core.conditions``
so they can wrap string conditions too.
"""

import operator
from collections.abc import Callable
from typing import Annotated, Literal

from pydantic import BaseModel, Field, field_validator, model_validator

COMPARE_OPS: dict[str, tuple[str, Callable[[int, int], bool]]] = {
    "eq": ("==", operator.eq),
    "ne": ("!=", operator.ne),
    "lt": ("<", operator.lt),
    "le": ("<=", operator.le),
    "gt": (">", operator.gt),
    "ge": (">=", operator.ge),
}


class Comparison(BaseModel):
    """``x <op> value``; the subclass ``kind`` names the operator."""

    value: int


class PredicateEq(Comparison):
    kind: Literal["eq"] = "eq"


class PredicateNe(Comparison):
    kind: Literal["ne"] = "ne"


class PredicateLt(Comparison):
    kind: Literal["lt"] = "lt"


class PredicateLe(Comparison):
    kind: Literal["le"] = "le"


class PredicateGt(Comparison):
    kind: Literal["gt"] = "gt"


class PredicateGe(Comparison):
    kind: Literal["ge"] = "ge"


class PredicateEven(BaseModel):
    kind: Literal["even"] = "even"


class PredicateOdd(BaseModel):
    kind: Literal["odd"] = "odd"


class PredicateBetween(BaseModel):
    """Inclusive range check: ``low <= x <= high``."""

    kind: Literal["between"] = "between"
    low: int
    high: int

    @model_validator(mode="after")
    def validate_bounds(self) -> "PredicateBetween":
        if self.low > self.high:
            raise ValueError(
                f"low ({self.low}) must be <= high ({self.high})"
            )
        return self


class PredicateModEq(BaseModel):
    kind: Literal["mod_eq"] = "mod_eq"
    divisor: int
    remainder: int

    @field_validator("divisor")
    @classmethod
    def divisor_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("divisor must be >= 1")
        return v

    @model_validator(mode="after")
    def validate_remainder(self) -> "PredicateModEq":
        if not 0 <= self.remainder < self.divisor:
            raise ValueError(
                f"remainder must be in [0, {self.divisor}), "
                f"got {self.remainder}"
            )
        return self


class PredicateInSet(BaseModel):
    model_config = {"frozen": True}
    kind: Literal["in_set"] = "in_set"
    values: frozenset[int]


Predicate = Annotated[
    PredicateEq
    | PredicateNe
    | PredicateLt
    | PredicateLe
    | PredicateGt
    | PredicateGe
    | PredicateEven
    | PredicateOdd
    | PredicateBetween
    | PredicateModEq
    | PredicateInSet,
    Field(discriminator="kind"),
]

PREDICATE_MODELS: tuple[type[BaseModel], ...] = (
    Comparison,
    PredicateEven,
    PredicateOdd,
    PredicateBetween,
    PredicateModEq,
    PredicateInSet,
)


def eval_predicate(pred: Predicate, x: int) -> bool:
    match pred:
        case Comparison(kind=kind, value=v):
            return COMPARE_OPS[kind][1](x, v)
        case PredicateEven():
            return x % 2 == 0
        case PredicateOdd():
            return x % 2 == 1
        case PredicateBetween(low=lo, high=hi):
            return lo <= x <= hi
        case PredicateModEq(divisor=d, remainder=r):
            return x % d == r
        case PredicateInSet(values=vals):
            return x in vals
        case _:
            raise ValueError(f"Unknown predicate: {pred}")


def render_predicate(pred: Predicate, var: str = "x") -> str:
    match pred:
        case Comparison(kind=kind, value=v):
            return f"{var} {COMPARE_OPS[kind][0]} {v}"
        case PredicateEven():
            return f"{var} % 2 == 0"
        case PredicateOdd():
            return f"{var} % 2 == 1"
        case PredicateBetween(low=lo, high=hi):
            return f"{lo} <= {var} <= {hi}"
        case PredicateModEq(divisor=d, remainder=r):
            return f"{var} % {d} == {r}"
        case PredicateInSet(values=vals):
            if not vals:
                return "False"
            return f"{var} in {{{', '.join(map(str, sorted(vals)))}}}"
        case _:
            raise ValueError(f"Unknown predicate: {pred}")


def predicate_anchors(pred: Predicate) -> list[int]:
    """Values where ``pred`` can flip between true and false."""
    match pred:
        case Comparison(value=v):
            return [v]
        case PredicateBetween(low=lo, high=hi):
            return [lo, hi]
        case PredicateModEq(divisor=d, remainder=r):
            return [r, r + d]
        case PredicateInSet(values=vals):
            return sorted(vals)
        case _:
            return []
