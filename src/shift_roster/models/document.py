"""Result models for loading, migrating and saving documents."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from shift_roster.models.validation import ViolationSeverity
from shift_roster.schemas.versions import SaveDocument


class IssueKind(str, Enum):
    """Kinds of problems reported while handling a saved document."""

    # errors
    MALFORMED_INPUT = "malformed-input"
    LEGACY_SHAPE_INVALID = "legacy-shape-invalid"
    NO_MIGRATION_PATH = "no-migration-path"
    DOWNGRADE_ATTEMPTED = "downgrade-attempted"
    POST_MIGRATION_SHAPE_INVALID = "post-migration-shape-invalid"
    CURRENT_SHAPE_INVALID = "current-shape-invalid"
    VERSION_INCOMPATIBLE = "version-incompatible"
    SNAPSHOT_MISSING = "snapshot-missing"
    SNAPSHOT_CORRUPTED = "snapshot-corrupted"
    # warnings
    VERSION_UPGRADED = "version-upgraded-silently"
    EMPTY_ROSTER = "empty-roster"
    STALE_TIMESTAMP = "stale-timestamp"
    MINOR_VERSION_DRIFT = "minor-version-drift"


WARNING_KINDS = frozenset(
    {
        IssueKind.VERSION_UPGRADED,
        IssueKind.EMPTY_ROSTER,
        IssueKind.STALE_TIMESTAMP,
        IssueKind.MINOR_VERSION_DRIFT,
    }
)


class DocumentIssue(BaseModel):
    """A single error or warning, with enough context to show to a user."""

    kind: IssueKind
    message: str
    declared_version: str | None = None
    target_version: str | None = None
    path: str | None = Field(default=None, description="Dotted field path, if any")

    @property
    def severity(self) -> ViolationSeverity:
        if self.kind in WARNING_KINDS:
            return ViolationSeverity.WARNING
        return ViolationSeverity.ERROR


def issues_from_validation_error(
    exc: ValidationError,
    kind: IssueKind,
    declared_version: str | None = None,
    target_version: str | None = None,
    prefix: str = "",
) -> list[DocumentIssue]:
    """Convert pydantic field errors into one issue per failing field."""
    issues: list[DocumentIssue] = []
    for err in exc.errors():
        path = ".".join(str(part) for part in err["loc"])
        message = f"{prefix}{path}: {err['msg']}" if path else f"{prefix}{err['msg']}"
        issues.append(
            DocumentIssue(
                kind=kind,
                message=message,
                declared_version=declared_version,
                target_version=target_version,
                path=path or None,
            )
        )
    return issues


class LoadResult(BaseModel):
    """Outcome of validating or loading a document.

    ``document`` is only set when ``success`` is true; warnings never block.
    """

    success: bool
    document: SaveDocument | None = None
    errors: list[DocumentIssue] = Field(default_factory=list)
    warnings: list[DocumentIssue] = Field(default_factory=list)

    @classmethod
    def failure(cls, *errors: DocumentIssue) -> LoadResult:
        return cls(success=False, errors=list(errors))

    @property
    def error_messages(self) -> list[str]:
        return [e.message for e in self.errors]

    @property
    def warning_messages(self) -> list[str]:
        return [w.message for w in self.warnings]

    def error_kinds(self) -> list[IssueKind]:
        return [e.kind for e in self.errors]

    def warning_kinds(self) -> list[IssueKind]:
        return [w.kind for w in self.warnings]


class MigrationResult(BaseModel):
    """Outcome of migrating a raw document mapping."""

    success: bool
    data: dict[str, Any] | None = None
    error: DocumentIssue | None = None
    steps: list[str] = Field(default_factory=list, description="Names of applied edges")


class CompatibilityResult(BaseModel):
    compatible: bool
    message: str | None = None
    issue: DocumentIssue | None = None


class SaveResult(BaseModel):
    success: bool
    error_message: str | None = None
    content: str | None = Field(default=None, description="Serialized JSON text")
    path: str | None = None


class SnapshotInfo(BaseModel):
    """What is known about the auto-snapshot without fully loading it."""

    has_snapshot: bool
    saved_at: str | None = None
    month: str | None = None
