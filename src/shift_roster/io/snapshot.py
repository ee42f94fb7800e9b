"""Automatic background snapshot kept in a single named slot."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from datetime import date, datetime
from pathlib import Path
from typing import Mapping, Protocol, Sequence

from shift_roster.io.save_load import load_document, save_document
from shift_roster.models.config import RosterConfig
from shift_roster.models.document import DocumentIssue, IssueKind, LoadResult, SnapshotInfo
from shift_roster.models.roster import Period

logger = logging.getLogger(__name__)


class SnapshotStore(Protocol):
    """Key-value store whose reads and writes are all-or-nothing.

    ``get`` may hand back undecoded bytes; decoding is left to the loader.
    """

    def get(self, key: str) -> str | bytes | None: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


class MemorySnapshotStore:
    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class FileSnapshotStore:
    """One ``<key>.json`` file per slot; writes go through a temp file and rename."""

    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get(self, key: str) -> bytes | None:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_bytes()

    def set(self, key: str, value: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self.directory, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(value)
            os.replace(tmp, self._path(key))
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise

    def delete(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)


class AutoSnapshot:
    """Save, load and inspect the auto-snapshot slot.

    A snapshot that cannot be loaded is cleared so it never blocks later saves.
    """

    def __init__(self, store: SnapshotStore, config: RosterConfig | None = None) -> None:
        self.store = store
        self.config = config or RosterConfig()

    @property
    def key(self) -> str:
        return self.config.snapshot_key

    def save_to_slot(
        self,
        month: str | date | tuple[int, int],
        workers: Sequence[str],
        roster: Mapping[str, Mapping[str, Sequence[Period | str]]],
        notes: Mapping[str, str],
        now: datetime | None = None,
    ) -> bool:
        result = save_document(month, workers, roster, notes, now)
        if not result.success:
            logger.warning("Auto-snapshot skipped: %s", result.error_message)
            return False
        self.store.set(self.key, result.content)
        return True

    def load_from_slot(self, now: datetime | None = None) -> LoadResult:
        raw = self.store.get(self.key)
        if raw is None:
            return LoadResult.failure(
                DocumentIssue(kind=IssueKind.SNAPSHOT_MISSING, message="沒有找到自動存檔")
            )

        result = load_document(raw, now, self.config)
        if not result.success:
            logger.warning(
                "Clearing corrupted auto-snapshot: %s", "; ".join(result.error_messages)
            )
            self.clear_slot()
            return LoadResult.failure(
                DocumentIssue(kind=IssueKind.SNAPSHOT_CORRUPTED, message="自動存檔已損壞並已清除")
            )
        return result

    def clear_slot(self) -> None:
        self.store.delete(self.key)

    def has_slot(self) -> bool:
        return self.store.get(self.key) is not None

    def peek_slot_metadata(self) -> SnapshotInfo:
        """Month and timestamp of the snapshot, read without validating it."""
        raw = self.store.get(self.key)
        if raw is None:
            return SnapshotInfo(has_snapshot=False)
        try:
            data = json.loads(raw)
        except ValueError:
            return SnapshotInfo(has_snapshot=False)
        if not isinstance(data, dict):
            return SnapshotInfo(has_snapshot=False)
        saved_at = data.get("savedAt")
        month = data.get("period")
        return SnapshotInfo(
            has_snapshot=True,
            saved_at=saved_at if isinstance(saved_at, str) else None,
            month=month if isinstance(month, str) else None,
        )
