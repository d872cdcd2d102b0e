from collections.abc import Callable
from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field, model_validator

from caseswitch.core.predicates import (
    PREDICATE_MODELS,
    PredicateBetween,
    PredicateEq,
    PredicateEven,
    PredicateGe,
    PredicateGt,
    PredicateInSet,
    PredicateLe,
    PredicateLt,
    PredicateModEq,
    PredicateNe,
    PredicateOdd,
    eval_predicate,
    render_predicate,
)
from caseswitch.core.string_predicates import (
    STRING_PREDICATE_MODELS,
    StringPredicateContains,
    StringPredicateEndsWith,
    StringPredicateEquals,
    StringPredicateLengthCmp,
    StringPredicateStartsWith,
    eval_string_predicate,
    render_string_predicate,
)

ConditionFamily = Literal["int", "str"]


class ConditionNot(BaseModel):
    kind: Literal["not"] = "not"
    operand: "Condition"


class _ConditionGroup(BaseModel):
    operands: list["Condition"] = Field(min_length=2)

    @model_validator(mode="after")
    def validate_single_family(self) -> "_ConditionGroup":
        families = {condition_family(op) for op in self.operands}
        if len(families) > 1:
            raise ValueError("operands mix int and str conditions")
        return self


class ConditionAnd(_ConditionGroup):
    kind: Literal["and"] = "and"


class ConditionOr(_ConditionGroup):
    kind: Literal["or"] = "or"


# Integer and string predicate kinds are disjoint, so one discriminator
# covers both families and the combinators over them.
Condition = Annotated[
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
    | PredicateInSet
    | StringPredicateStartsWith
    | StringPredicateEndsWith
    | StringPredicateContains
    | StringPredicateEquals
    | StringPredicateLengthCmp
    | ConditionNot
    | ConditionAnd
    | ConditionOr,
    Field(discriminator="kind"),
]

ConditionNot.model_rebuild()
ConditionAnd.model_rebuild()
ConditionOr.model_rebuild()


def condition_family(cond: Any) -> ConditionFamily | None:
    """``"int"`` or ``"str"`` for the values ``cond`` applies to.

    A combinator takes the family of its operands; groups are validated to
    hold a single family.
    """
    match cond:
        case ConditionNot(operand=op):
            return condition_family(op)
        case ConditionAnd(operands=ops) | ConditionOr(operands=ops):
            return condition_family(ops[0])
    if isinstance(cond, PREDICATE_MODELS):
        return "int"
    if isinstance(cond, STRING_PREDICATE_MODELS):
        return "str"
    return None


def is_int_condition(cond: Any) -> bool:
    return condition_family(cond) == "int"


def is_string_condition(cond: Any) -> bool:
    return condition_family(cond) == "str"


def eval_condition(cond: Condition, value: Any) -> bool:
    match cond:
        case ConditionNot(operand=op):
            return not eval_condition(op, value)
        case ConditionAnd(operands=ops):
            return all(eval_condition(op, value) for op in ops)
        case ConditionOr(operands=ops):
            return any(eval_condition(op, value) for op in ops)
    if isinstance(cond, PREDICATE_MODELS):
        return eval_predicate(cond, value)
    if isinstance(cond, STRING_PREDICATE_MODELS):
        return eval_string_predicate(cond, value)
    raise ValueError(f"Unknown condition: {cond}")


def render_condition(cond: Condition, var: str) -> str:
    match cond:
        case ConditionNot(operand=op):
            return f"not ({render_condition(op, var)})"
        case ConditionAnd(operands=ops):
            parts = [render_condition(op, var) for op in ops]
            return f"({' and '.join(parts)})"
        case ConditionOr(operands=ops):
            parts = [render_condition(op, var) for op in ops]
            return f"({' or '.join(parts)})"
    if isinstance(cond, PREDICATE_MODELS):
        return render_predicate(cond, var)
    if isinstance(cond, STRING_PREDICATE_MODELS):
        return render_string_predicate(cond, var)
    raise ValueError(f"Unknown condition: {cond}")


def to_callable(cond: Condition) -> Callable[[Any], bool]:
    """Wrap a condition model as a predicate for ``Dispatcher.add_case``."""
    if condition_family(cond) is None:
        raise ValueError(f"Unknown condition: {cond}")

    def predicate(value: Any) -> bool:
        return eval_condition(cond, value)

    predicate.__qualname__ = f"condition[{cond.kind}]"
    return predicate
