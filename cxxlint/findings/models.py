# Pydantic data models for analysis results: Severity, Location, Finding, Diagnostic.

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field


class Severity(str, Enum):
    """How serious a finding is, most severe first."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"
    STYLE = "style"


class Location(BaseModel):
    """Where in the source a finding was reported (optional file, line, column)."""

    line: int = Field(..., ge=1, description="1-based line number")
    column: int = Field(..., ge=1, description="1-based column number")
    path: Optional[Path] = None
    snippet: Optional[str] = None

    model_config = {"frozen": True, "arbitrary_types_allowed": True}


class Finding(BaseModel):
    """A single raw detection produced by one rule, before engine ordering."""

    rule_id: str
    message: str
    location: Location
    severity: Severity = Severity.WARNING

    model_config = {"frozen": True}

    @property
    def line(self) -> int:
        return self.location.line

    @property
    def column(self) -> int:
        return self.location.column

    def sort_key(self) -> tuple[int, int, str]:
        """Total order used for diagnostics: (line, column, rule id)."""
        return self.location.line, self.location.column, self.rule_id


class Diagnostic(Finding):
    """A finding after ordering, deduplication and severity overrides."""

    suggestion: Optional[str] = None

    @classmethod
    def from_finding(
        cls,
        finding: Finding,
        *,
        severity: Optional[Severity] = None,
        suggestion: Optional[str] = None,
        path: Optional[Path] = None,
    ) -> "Diagnostic":
        location = finding.location
        if path is not None:
            location = location.model_copy(update={"path": path})
        return cls(
            rule_id=finding.rule_id,
            message=finding.message,
            location=location,
            severity=severity if severity is not None else finding.severity,
            suggestion=suggestion,
        )
