from enum import Enum

from pydantic import BaseModel, Field, model_validator

from caseswitch.core.conditions import (
    Condition,
    is_int_condition,
    is_string_condition,
)


class ValueType(str, Enum):
    INT = "int"
    STR = "str"


class Rule(BaseModel):
    condition: Condition
    label: str = Field(description="Label produced when the condition holds")


class RuleTable(BaseModel):
    """Ordered rules plus an optional default, first match wins."""

    value_type: ValueType = Field(default=ValueType.INT)
    rules: list[Rule] = Field(default_factory=list)
    default_label: str | None = Field(
        default=None, description="Label used when no rule matches"
    )

    @model_validator(mode="after")
    def validate_condition_family(self) -> "RuleTable":
        check = (
            is_int_condition
            if self.value_type == ValueType.INT
            else is_string_condition
        )
        for i, rule in enumerate(self.rules):
            if not check(rule.condition):
                raise ValueError(
                    f"rules[{i}]: condition '{rule.condition.kind}' cannot "
                    f"be applied to {self.value_type.value} values"
                )
        return self


def default_var(value_type: ValueType) -> str:
    return "x" if value_type == ValueType.INT else "s"
