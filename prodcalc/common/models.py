"""Pydantic models for evaluation results and history entries."""
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class OperationResult(BaseModel):
    """Represents the outcome of one evaluation, successful or not."""

    expression: str = Field(..., description="Original arithmetic expression")
    line: int = Field(default=1, ge=1, description="Line number in the input")
    result: Optional[float] = Field(default=None, description="Evaluated value, None on failure")
    display: str = Field(default="", description="Formatted value as shown to the user")
    error_kind: Optional[str] = Field(default=None, description="Name of the error raised, if any")
    error: Optional[str] = Field(default=None, description="Error message, if any")

    @property
    def ok(self) -> bool:
        return self.error_kind is None

    def to_line(self) -> str:
        """Render the result as one line of a results file."""
        if self.ok:
            return f"{self.expression} = {self.display}"
        return f"{self.expression} -> ERROR: {self.error_kind}: {self.error}"


class HistoryEntry(BaseModel):
    """An expression the user committed, with its formatted result."""

    model_config = ConfigDict(frozen=True)

    expression: str = Field(..., description="Expression as typed")
    result: str = Field(..., description="Formatted result")
