"""Violation report models."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class ViolationSeverity(str, Enum):
    """Severity levels for rule violations and document issues."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class Violation(BaseModel):
    """A single roster rule violation."""

    rule_id: str
    message: str
    severity: ViolationSeverity = ViolationSeverity.ERROR
    worker: str | None = None
    date: str | None = Field(default=None, description="ISO date key, if day-scoped")


class ViolationReport(BaseModel):
    """Ordered result of evaluating a roster."""

    violations: list[Violation] = Field(default_factory=list)

    @property
    def messages(self) -> list[str]:
        return [v.message for v in self.violations]

    @property
    def is_compliant(self) -> bool:
        """True if no violations were found."""
        return not self.violations

    def by_rule(self, rule_id: str) -> list[Violation]:
        return [v for v in self.violations if v.rule_id == rule_id]
