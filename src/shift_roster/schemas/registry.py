"""Schema registry - append-only table of document shapes by version."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel

from shift_roster.models.roster import Period
from shift_roster.schemas.versioning import SemanticVersion


@dataclass(frozen=True)
class SchemaEntry:
    """Shape accepted for one released document version."""

    version: str
    model: type[BaseModel]
    periods: frozenset[Period]
    description: str = ""

    @property
    def semver(self) -> SemanticVersion:
        return SemanticVersion.parse(self.version)


class SchemaRegistry:
    """Registry of document schemas, ordered by version.

    Entries can only be appended; old versions stay loadable forever.
    """

    def __init__(self) -> None:
        self._entries: dict[str, SchemaEntry] = {}

    def register(self, entry: SchemaEntry) -> None:
        if entry.version in self._entries:
            raise ValueError(f"Schema for version {entry.version} is already registered")
        if self._entries and entry.semver <= self.latest.semver:
            raise ValueError(
                f"Schema versions must be appended in order: {entry.version} "
                f"is not newer than {self.latest.version}"
            )
        self._entries[entry.version] = entry

    def get(self, version: str) -> SchemaEntry:
        if version not in self._entries:
            available = ", ".join(self._entries)
            raise KeyError(f"Unknown document version: {version}. Available: {available}")
        return self._entries[version]

    def __contains__(self, version: object) -> bool:
        return version in self._entries

    def versions(self) -> list[str]:
        return list(self._entries)

    @property
    def latest(self) -> SchemaEntry:
        if not self._entries:
            raise LookupError("Schema registry is empty")
        return next(reversed(self._entries.values()))

    @property
    def oldest(self) -> SchemaEntry:
        if not self._entries:
            raise LookupError("Schema registry is empty")
        return next(iter(self._entries.values()))

    def validate(self, version: str, data: Any) -> BaseModel:
        """Validate ``data`` against a version's shape (raises ValidationError)."""
        return self.get(version).model.model_validate(data)


# Global registry instance
_global_registry: SchemaRegistry | None = None


def get_schema_registry() -> SchemaRegistry:
    """Get the global schema registry, initializing if needed."""
    global _global_registry
    if _global_registry is None:
        _global_registry = _create_default_registry()
    return _global_registry


def _create_default_registry() -> SchemaRegistry:
    from shift_roster.schemas.versions import (
        SaveDocumentV1_0_0,
        SaveDocumentV1_1_0,
        SaveDocumentV1_2_0,
    )

    base_periods = frozenset({Period.MORNING, Period.MIDDAY, Period.EVENING})
    registry = SchemaRegistry()
    for entry in [
        SchemaEntry("1.0.0", SaveDocumentV1_0_0, base_periods, "initial format"),
        SchemaEntry(
            "1.1.0", SaveDocumentV1_1_0, base_periods | {Period.OVERTIME}, "overtime period"
        ),
        SchemaEntry(
            "1.2.0", SaveDocumentV1_2_0, base_periods | {Period.OVERTIME}, "metadata block"
        ),
    ]:
        registry.register(entry)
    return registry
