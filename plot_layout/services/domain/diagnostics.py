"""
Structured diagnostics for degraded-but-successful layout and placement runs.

Generators and the placement engine never raise for expected edge cases;
they record a Diagnostic instead and carry on. Each diagnostic is also logged
at WARNING through the emitting module's logger.
"""
from typing import Optional
import logging

from pydantic import BaseModel, Field


# Diagnostic codes
GRID_REQUIRES_RECTANGLE = "GRID_REQUIRES_RECTANGLE"
CHILD_OUTSIDE_PARENT = "CHILD_OUTSIDE_PARENT"
SUBPLOT_RULE_NOT_IMPLEMENTED = "SUBPLOT_RULE_NOT_IMPLEMENTED"
PLACEMENT_BUDGET_EXHAUSTED = "PLACEMENT_BUDGET_EXHAUSTED"
UNKNOWN_SAMPLING_UNIT = "UNKNOWN_SAMPLING_UNIT"
NOT_A_SAMPLING_UNIT = "NOT_A_SAMPLING_UNIT"


class Diagnostic(BaseModel):
    """A single degradation notice."""
    code: str
    message: str
    path: Optional[str] = Field(default=None, description="Structural path of the node involved")
    subject_id: Optional[str] = Field(
        default=None,
        alias="subjectId",
        description="Id of the node or observation involved"
    )

    class Config:
        frozen = True
        populate_by_name = True


class DiagnosticLog:
    """Collects diagnostics for one generation or placement call."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self._entries: list[Diagnostic] = []
        self._logger = logger or logging.getLogger(__name__)

    def warn(
        self,
        code: str,
        message: str,
        path: Optional[str] = None,
        subject_id: Optional[str] = None,
    ) -> Diagnostic:
        diagnostic = Diagnostic(code=code, message=message, path=path, subject_id=subject_id)
        self._entries.append(diagnostic)
        self._logger.warning(f"[{code}] {message}")
        return diagnostic

    @property
    def entries(self) -> list[Diagnostic]:
        return list(self._entries)

    def count(self, code: str) -> int:
        return sum(1 for entry in self._entries if entry.code == code)

    def __len__(self) -> int:
        return len(self._entries)
