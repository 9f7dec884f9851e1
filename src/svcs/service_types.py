"""Service layer types for svcs."""

from typing import List

from pydantic import BaseModel, Field


class AddResult(BaseModel):
    """Result of staging files."""
    added: List[str] = Field(default_factory=list)
    already_staged: List[str] = Field(default_factory=list)
    failed: List[str] = Field(default_factory=list)  # error messages


class CommandReport(BaseModel):
    """Human-readable outcome of one command.

    ``ok`` is False for validation, state and storage errors; the message
    says what happened either way.
    """
    ok: bool
    message: str
    lines: List[str] = Field(default_factory=list)

    @property
    def text(self) -> str:
        """Message followed by detail lines."""
        return "\n".join([self.message, *self.lines]) if self.lines else self.message
