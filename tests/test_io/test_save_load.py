"""Tests for saving and loading documents."""

from __future__ import annotations

import json
from datetime import datetime, timezone

from shift_roster.io.save_load import (
    create_save_document,
    document_to_state,
    format_instant,
    generate_file_name,
    load_document,
    load_from_file,
    save_document,
    save_to_file,
    serialize_document,
)
from shift_roster.models.document import IssueKind
from shift_roster.models.roster import Period

NOW = datetime(2025, 1, 15, 9, 30, 0, 123456, tzinfo=timezone.utc)
ROSTER = {"2025-01-06": {"邱": ["早", "晚"], "黃": [Period.MIDDAY]}}


class TestCreateSaveDocument:
    def test_stamps_current_version_and_instant(self):
        doc = create_save_document("2025-01", ["邱", "黃"], ROSTER, {}, now=NOW)
        assert doc.version == "1.2.0"
        assert doc.period == "2025-01"
        assert doc.saved_at == "2025-01-15T09:30:00.123Z"
        assert doc.roster["2025-01-06"]["黃"] == [Period.MIDDAY]

    def test_format_instant_assumes_utc_for_naive(self):
        assert format_instant(datetime(2025, 1, 1, 12)) == "2025-01-01T12:00:00.000Z"

    def test_serialized_text_is_readable_json(self):
        doc = create_save_document((2025, 1), ["邱", "黃"], ROSTER, {"2025-01-06": "盤點"}, now=NOW)
        text = serialize_document(doc)
        assert "早" in text
        assert json.loads(text)["notes"] == {"2025-01-06": "盤點"}
        assert "metadata" not in json.loads(text)


class TestSaveDocument:
    def test_success_returns_content(self):
        result = save_document("2025-01", ["邱", "黃"], ROSTER, {}, now=NOW)
        assert result.success
        assert result.error_message is None
        assert json.loads(result.content)["savedAt"] == "2025-01-15T09:30:00.123Z"

    def test_invalid_state_reports_error(self):
        result = save_document("2025-01", ["邱", "邱"], ROSTER, {}, now=NOW)
        assert not result.success
        assert "姓名重複" in result.error_message

    def test_bad_month_reports_error(self):
        result = save_document("January", ["邱"], {}, {}, now=NOW)
        assert not result.success


class TestLoadDocument:
    def test_round_trip(self):
        saved = save_document("2025-01", ["邱", "黃"], ROSTER, {}, now=NOW)
        result = load_document(saved.content.encode("utf-8"), now=NOW)

        assert result.success
        assert result.errors == []
        assert result.warnings == []
        assert result.document.to_payload() == json.loads(saved.content)

    def test_malformed_json(self):
        result = load_document(b"{not json")
        assert not result.success
        assert result.error_kinds() == [IssueKind.MALFORMED_INPUT]
        assert result.warnings == []

    def test_undecodable_bytes(self):
        result = load_document(b"\xff\xfe\x00")
        assert result.error_kinds() == [IssueKind.MALFORMED_INPUT]

    def test_legacy_document_upgraded(self, v1_0_0_document, fixed_now):
        result = load_document(json.dumps(v1_0_0_document), now=fixed_now)
        assert result.success
        assert result.document.version == "1.2.0"
        assert result.warning_kinds() == [IssueKind.VERSION_UPGRADED]

    def test_incompatible_major(self, current_document):
        current_document["version"] = "2.0.0"
        result = load_document(json.dumps(current_document))
        assert not result.success
        assert result.error_kinds() == [IssueKind.VERSION_INCOMPATIBLE]
        assert result.warnings == []


class TestFiles:
    def test_generate_file_name(self):
        name = generate_file_name("2025-01", datetime(2025, 1, 2, 3, 4, 5))
        assert name == "排班存檔_2025年01月_20250102_030405.json"

    def test_save_and_load_file(self, tmp_path):
        doc = create_save_document("2025-01", ["邱", "黃"], ROSTER, {}, now=NOW)
        result = save_to_file(doc, tmp_path, now=NOW)

        assert result.success
        assert result.path.endswith("排班存檔_2025年01月_20250115_093000.json")
        loaded = load_from_file(result.path, now=NOW)
        assert loaded.success
        assert loaded.document == doc

    def test_missing_file(self, tmp_path):
        result = load_from_file(tmp_path / "nope.json")
        assert result.error_kinds() == [IssueKind.MALFORMED_INPUT]


def test_document_to_state():
    doc = create_save_document("2025-01", ["邱", "黃"], ROSTER, {"2025-01-06": "盤點"}, now=NOW)
    month, workers, roster, notes = document_to_state(doc)

    assert month == (2025, 1)
    assert workers == ["邱", "黃"]
    assert roster == {"2025-01-06": {"邱": ["早", "晚"], "黃": ["午"]}}
    assert notes == {"2025-01-06": "盤點"}

    roster["2025-01-06"]["邱"].append(Period.OVERTIME)
    assert doc.roster["2025-01-06"]["邱"] == [Period.MORNING, Period.EVENING]
