"""Tests for the schema registry and version parsing."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from shift_roster.models.roster import Period
from shift_roster.schemas.registry import SchemaEntry, SchemaRegistry, get_schema_registry
from shift_roster.schemas.versioning import CURRENT_VERSION, SemanticVersion
from shift_roster.schemas.versions import SaveDocumentV1_0_0, SaveDocumentV1_1_0


class TestSemanticVersion:
    def test_parse_and_order(self):
        assert SemanticVersion.parse("1.2.0") == SemanticVersion(1, 2, 0)
        assert SemanticVersion.parse("1.10.0") > SemanticVersion.parse("1.9.3")
        assert str(SemanticVersion.parse("2")) == "2.0.0"

    @pytest.mark.parametrize("bad", ["", "v1.0.0", "1.0.0-beta", "a.b.c"])
    def test_rejects_garbage(self, bad):
        with pytest.raises(ValueError):
            SemanticVersion.parse(bad)


class TestDefaultRegistry:
    def test_versions_in_release_order(self):
        registry = get_schema_registry()
        assert registry.versions() == ["1.0.0", "1.1.0", "1.2.0"]
        assert registry.latest.version == CURRENT_VERSION
        assert registry.oldest.version == "1.0.0"

    def test_overtime_only_from_1_1_0(self, v1_1_0_document):
        registry = get_schema_registry()
        assert Period.OVERTIME not in registry.get("1.0.0").periods
        assert Period.OVERTIME in registry.get("1.1.0").periods

        registry.validate("1.1.0", v1_1_0_document)
        with pytest.raises(ValidationError):
            registry.validate("1.0.0", {**v1_1_0_document, "version": "1.0.0"})

    def test_unknown_version(self):
        registry = get_schema_registry()
        assert "9.9.9" not in registry
        with pytest.raises(KeyError, match="Available: 1.0.0, 1.1.0, 1.2.0"):
            registry.get("9.9.9")


class TestAppendOnly:
    def test_rejects_duplicate_and_out_of_order(self):
        registry = SchemaRegistry()
        periods = frozenset(Period)
        registry.register(SchemaEntry("1.1.0", SaveDocumentV1_1_0, periods))

        with pytest.raises(ValueError, match="already registered"):
            registry.register(SchemaEntry("1.1.0", SaveDocumentV1_1_0, periods))
        with pytest.raises(ValueError, match="not newer"):
            registry.register(SchemaEntry("1.0.0", SaveDocumentV1_0_0, periods))

        assert registry.versions() == ["1.1.0"]

    def test_empty_registry_has_no_latest(self):
        with pytest.raises(LookupError):
            _ = SchemaRegistry().latest
