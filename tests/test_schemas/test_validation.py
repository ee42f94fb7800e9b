"""Tests for document validation and version upgrade."""

from __future__ import annotations

import copy
from datetime import datetime, timezone

import pytest

from shift_roster.models.document import IssueKind
from shift_roster.models.roster import Period
from shift_roster.models.validation import ViolationSeverity
from shift_roster.schemas.registry import SchemaEntry, SchemaRegistry
from shift_roster.schemas.validation import (
    check_version_compatibility,
    validate_save_data,
)
from shift_roster.schemas.versions import SaveDocumentV1_1_0, SaveDocumentV1_2_0


class TestLegacyUpgrade:
    def test_v1_0_0_upgrades_with_single_notice(self, v1_0_0_document, fixed_now):
        result = validate_save_data(v1_0_0_document, now=fixed_now)

        assert result.success
        assert result.errors == []
        assert result.warning_kinds() == [IssueKind.VERSION_UPGRADED]
        assert result.warnings[0].severity == ViolationSeverity.WARNING
        assert "1.0.0" in result.warning_messages[0]

        doc = result.document
        assert doc.version == "1.2.0"
        assert doc.metadata.creator == "unknown"
        assert doc.metadata.department == "default"
        assert doc.workers == ["邱", "黃"]

    def test_input_left_untouched(self, v1_0_0_document, fixed_now):
        original = copy.deepcopy(v1_0_0_document)
        validate_save_data(v1_0_0_document, now=fixed_now)
        assert v1_0_0_document == original

    def test_v1_1_0_keeps_overtime(self, v1_1_0_document, fixed_now):
        result = validate_save_data(v1_1_0_document, now=fixed_now)
        assert result.success
        assert result.document.to_payload()["roster"]["2025-01-01"]["邱"] == ["早", "午", "加"]

    def test_missing_version_read_as_oldest(self, v1_0_0_document, fixed_now):
        del v1_0_0_document["version"]
        result = validate_save_data(v1_0_0_document, now=fixed_now)
        assert result.success
        assert result.warnings[0].declared_version == "1.0.0"

    def test_missing_version_follows_registry(self, v1_1_0_document, fixed_now):
        registry = SchemaRegistry()
        registry.register(SchemaEntry("1.1.0", SaveDocumentV1_1_0, frozenset(Period)))
        registry.register(SchemaEntry("1.2.0", SaveDocumentV1_2_0, frozenset(Period)))
        del v1_1_0_document["version"]

        result = validate_save_data(v1_1_0_document, now=fixed_now, registry=registry)
        assert result.success
        assert result.warnings[0].declared_version == "1.1.0"

    def test_impossible_month_rejected_before_migration(self, v1_0_0_document):
        v1_0_0_document["period"] = "2025-13"
        result = validate_save_data(v1_0_0_document)
        assert result.error_kinds() == [IssueKind.LEGACY_SHAPE_INVALID]
        assert result.errors[0].path == "period"

    def test_legacy_shape_error_blocks_migration(self, v1_0_0_document, fixed_now):
        v1_0_0_document["roster"]["2025-01-01"]["邱"] = ["加"]
        result = validate_save_data(v1_0_0_document, now=fixed_now)

        assert not result.success
        assert set(result.error_kinds()) == {IssueKind.LEGACY_SHAPE_INVALID}
        assert result.errors[0].path.startswith("roster.2025-01-01")
        assert result.warnings == []

    def test_unregistered_minor_version(self, v1_0_0_document):
        v1_0_0_document["version"] = "1.5.0"
        result = validate_save_data(v1_0_0_document)
        assert result.error_kinds() == [IssueKind.LEGACY_SHAPE_INVALID]
        assert "1.5.0" in result.error_messages[0]

    def test_post_migration_failure_is_distinct(self, v1_0_0_document):
        # 1.0.0 tolerates unknown keys; the current format does not
        v1_0_0_document["legacyFlag"] = True
        result = validate_save_data(v1_0_0_document)

        assert not result.success
        assert result.error_kinds() == [IssueKind.POST_MIGRATION_SHAPE_INVALID]
        assert result.errors[0].path == "legacyFlag"

    def test_newer_major_is_incompatible(self, current_document):
        current_document["version"] = "2.0.0"
        result = validate_save_data(current_document)

        assert not result.success
        assert result.error_kinds() == [IssueKind.VERSION_INCOMPATIBLE]
        assert result.warnings == []


class TestCurrentShape:
    def test_valid_current_document(self, current_document, fixed_now):
        result = validate_save_data(current_document, now=fixed_now)
        assert result.success
        assert result.warnings == []
        assert result.document.to_payload() == current_document

    @pytest.mark.parametrize(
        "field, value, path",
        [
            ("workers", [], "workers"),
            ("workers", ["邱", "邱"], "workers"),
            ("workers", [f"p{i}" for i in range(21)], "workers"),
            ("period", "2025-1", "period"),
            ("period", "2025-13", "period"),
            ("period", "2025-00", "period"),
            ("savedAt", "yesterday", "savedAt"),
            ("notes", {"2025-01-02": "x" * 501}, "notes.2025-01-02"),
            ("roster", {"2025-01-02": {"邱": ["早", "午", "晚", "加", "早"]}}, "roster.2025-01-02.邱"),
            ("roster", {"2025/01/02": {}}, "roster.2025/01/02.[key]"),
        ],
    )
    def test_field_errors_carry_path(self, current_document, field, value, path):
        current_document[field] = value
        result = validate_save_data(current_document)

        assert not result.success
        assert result.error_kinds()[0] == IssueKind.CURRENT_SHAPE_INVALID
        assert result.errors[0].path == path

    def test_unknown_field_rejected(self, current_document):
        current_document["color"] = "blue"
        result = validate_save_data(current_document)
        assert result.error_kinds() == [IssueKind.CURRENT_SHAPE_INVALID]

    def test_dates_must_fall_in_period(self, current_document):
        current_document["notes"] = {"2025-02-01": "下個月"}
        result = validate_save_data(current_document)
        assert not result.success
        assert "2025-02-01" in result.error_messages[0]

    def test_not_an_object(self):
        result = validate_save_data(["not", "a", "document"])
        assert result.error_kinds() == [IssueKind.CURRENT_SHAPE_INVALID]


class TestAdvisoryWarnings:
    def test_empty_roster(self, current_document, fixed_now):
        current_document["roster"] = {}
        result = validate_save_data(current_document, now=fixed_now)
        assert result.success
        assert result.warning_kinds() == [IssueKind.EMPTY_ROSTER]

    def test_stale_timestamp(self, current_document):
        now = datetime(2025, 8, 1, tzinfo=timezone.utc)
        result = validate_save_data(current_document, now=now)
        assert result.success
        assert result.warning_kinds() == [IssueKind.STALE_TIMESTAMP]

    def test_just_under_six_months_is_fresh(self, current_document):
        now = datetime(2025, 6, 30, tzinfo=timezone.utc)
        assert validate_save_data(current_document, now=now).warnings == []


class TestCheckVersionCompatibility:
    def test_equal(self):
        result = check_version_compatibility("1.2.0")
        assert result.compatible
        assert result.message is None

    def test_minor_drift(self):
        result = check_version_compatibility("1.0.0")
        assert result.compatible
        assert result.issue.kind == IssueKind.MINOR_VERSION_DRIFT

    @pytest.mark.parametrize("version", ["2.0.0", "0.9.0", "garbage"])
    def test_incompatible(self, version):
        result = check_version_compatibility(version)
        assert not result.compatible
        assert result.issue.kind == IssueKind.VERSION_INCOMPATIBLE
        assert version in result.message
