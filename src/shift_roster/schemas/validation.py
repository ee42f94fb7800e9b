"""Validation of saved documents, including upgrade of older versions."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from dateutil.parser import isoparse
from dateutil.relativedelta import relativedelta
from pydantic import ValidationError

from shift_roster.models.config import RosterConfig
from shift_roster.models.document import (
    CompatibilityResult,
    DocumentIssue,
    IssueKind,
    LoadResult,
    issues_from_validation_error,
)
from shift_roster.schemas.migrations import MigrationGraph, get_migration_graph
from shift_roster.schemas.registry import SchemaRegistry, get_schema_registry
from shift_roster.schemas.versioning import CURRENT_VERSION, SemanticVersion
from shift_roster.schemas.versions import SaveDocument

logger = logging.getLogger(__name__)


def check_version_compatibility(
    version: str, current: str = CURRENT_VERSION
) -> CompatibilityResult:
    """Compare a document version with the running version.

    Same major version is compatible (with a note unless identical);
    a different or unreadable major version is not.
    """
    if version == current:
        return CompatibilityResult(compatible=True)

    try:
        major = SemanticVersion.parse(version).major
    except ValueError:
        major = None
    current_major = SemanticVersion.parse(current).major

    if major != current_major:
        message = f"存檔版本 {version} 與當前版本 {current} 不相容"
        return CompatibilityResult(
            compatible=False,
            message=message,
            issue=DocumentIssue(
                kind=IssueKind.VERSION_INCOMPATIBLE,
                message=message,
                declared_version=str(version),
                target_version=current,
            ),
        )

    message = f"存檔版本 {version} 與當前版本 {current} 相容，但可能有細微差異"
    return CompatibilityResult(
        compatible=True,
        message=message,
        issue=DocumentIssue(
            kind=IssueKind.MINOR_VERSION_DRIFT,
            message=message,
            declared_version=version,
            target_version=current,
        ),
    )


def advisory_warnings(
    document: SaveDocument,
    now: datetime | None = None,
    config: RosterConfig | None = None,
) -> list[DocumentIssue]:
    """Non-blocking checks run on a document that already validated."""
    config = config or RosterConfig()
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    warnings: list[DocumentIssue] = []
    if not document.roster:
        warnings.append(DocumentIssue(kind=IssueKind.EMPTY_ROSTER, message="排班資料為空"))

    months = config.stale_after_months
    if isoparse(document.saved_at) < now - relativedelta(months=months):
        warnings.append(
            DocumentIssue(
                kind=IssueKind.STALE_TIMESTAMP,
                message=f"此存檔已超過{months}個月，可能與當前版本不完全相容",
                declared_version=document.version,
                path="savedAt",
            )
        )
    return warnings


def validate_save_data(
    data: Any,
    *,
    now: datetime | None = None,
    config: RosterConfig | None = None,
    registry: SchemaRegistry | None = None,
    graph: MigrationGraph | None = None,
) -> LoadResult:
    """Validate a parsed document, upgrading it to the current version if needed.

    Documents without a ``version`` field are read as the oldest registered
    version.
    """
    if registry is None:
        registry = get_schema_registry()
    if isinstance(data, dict):
        if "version" not in data:
            data = {**data, "version": registry.oldest.version}
        declared = data["version"]
        if isinstance(declared, str) and declared != CURRENT_VERSION:
            return _validate_legacy(
                data,
                declared,
                now=now,
                config=config,
                registry=registry,
                graph=graph or get_migration_graph(),
            )

    try:
        document = SaveDocument.model_validate(data)
    except ValidationError as exc:
        logger.warning("Document rejected: %d field error(s)", exc.error_count())
        return LoadResult(
            success=False,
            errors=issues_from_validation_error(
                exc, IssueKind.CURRENT_SHAPE_INVALID, target_version=CURRENT_VERSION
            ),
        )

    return LoadResult(
        success=True,
        document=document,
        warnings=advisory_warnings(document, now, config),
    )


def _validate_legacy(
    data: dict[str, Any],
    declared: str,
    *,
    now: datetime | None,
    config: RosterConfig | None,
    registry: SchemaRegistry,
    graph: MigrationGraph,
) -> LoadResult:
    compatibility = check_version_compatibility(declared)
    if not compatibility.compatible:
        logger.warning("Document version %s is incompatible", declared)
        return LoadResult.failure(compatibility.issue)

    if declared not in registry:
        return LoadResult.failure(
            DocumentIssue(
                kind=IssueKind.LEGACY_SHAPE_INVALID,
                message=f"不支援的版本: {declared}",
                declared_version=declared,
                target_version=CURRENT_VERSION,
            )
        )

    try:
        registry.validate(declared, data)
    except ValidationError as exc:
        logger.warning("Legacy document (%s) rejected", declared)
        issues = issues_from_validation_error(
            exc, IssueKind.LEGACY_SHAPE_INVALID, declared, CURRENT_VERSION, prefix="舊版本資料格式錯誤: "
        )
        return LoadResult(success=False, errors=issues)

    migration = graph.migrate(data, CURRENT_VERSION)
    if not migration.success:
        return LoadResult.failure(migration.error)

    try:
        document = SaveDocument.model_validate(migration.data)
    except ValidationError as exc:
        logger.warning("Document migrated from %s does not match the current schema", declared)
        issues = issues_from_validation_error(
            exc, IssueKind.POST_MIGRATION_SHAPE_INVALID, declared, CURRENT_VERSION, prefix="遷移後資料驗證失敗: "
        )
        return LoadResult(success=False, errors=issues)

    logger.info("Document upgraded from %s to %s via %s", declared, CURRENT_VERSION, migration.steps)
    warnings = [
        DocumentIssue(
            kind=IssueKind.VERSION_UPGRADED,
            message=f"資料已從版本 {declared} 自動升級到 {CURRENT_VERSION}",
            declared_version=declared,
            target_version=CURRENT_VERSION,
        )
    ]
    warnings.extend(advisory_warnings(document, now, config))
    return LoadResult(success=True, document=document, warnings=warnings)
