from typing import Any

from pydantic import BaseModel, Field


class TraceStep(BaseModel):
    """Single predicate evaluation during a dispatch."""

    index: int = Field(description="Position of the rule in the table")
    condition: str = Field(description="Rendered condition that was checked")
    matched: bool = Field(description="Whether the condition held")


class DispatchTrace(BaseModel):
    """Complete trace of one dispatch."""

    value: Any = Field(description="The dispatched value")
    steps: list[TraceStep] = Field(
        default_factory=list, description="Predicates checked, in order"
    )
    label: str | None = Field(
        default=None, description="Selected label, None when nothing ran"
    )
    used_default: bool = Field(
        default=False, description="True when the default label was chosen"
    )
