"""Save-file reading and writing."""

from __future__ import annotations

import json
import logging
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Mapping, Sequence

from pydantic import ValidationError

from shift_roster.constraints.policy import month_key, parse_month
from shift_roster.models.config import RosterConfig
from shift_roster.models.document import DocumentIssue, IssueKind, LoadResult, SaveResult
from shift_roster.models.roster import Notes, Period, Roster
from shift_roster.schemas.validation import validate_save_data
from shift_roster.schemas.versioning import CURRENT_VERSION
from shift_roster.schemas.versions import SaveDocument

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_instant(moment: datetime) -> str:
    """ISO-8601 UTC instant with millisecond precision, e.g. ``2025-01-01T12:00:00.000Z``."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def create_save_document(
    month: str | date | tuple[int, int],
    workers: Sequence[str],
    roster: Mapping[str, Mapping[str, Sequence[Period | str]]],
    notes: Mapping[str, str],
    now: datetime | None = None,
) -> SaveDocument:
    """Snapshot the editing state as a current-version document.

    Raises pydantic.ValidationError if the state breaks the document rules.
    """
    year, mon = parse_month(month)
    return SaveDocument.model_validate(
        {
            "version": CURRENT_VERSION,
            "period": month_key(year, mon),
            "workers": list(workers),
            "roster": {
                day: {worker: list(periods) for worker, periods in entry.items()}
                for day, entry in roster.items()
            },
            "notes": dict(notes),
            "savedAt": format_instant(now or _utc_now()),
        }
    )


def serialize_document(document: SaveDocument) -> str:
    """Human-diffable UTF-8 JSON text for a document."""
    return json.dumps(document.to_payload(), ensure_ascii=False, indent=2)


def save_document(
    month: str | date | tuple[int, int],
    workers: Sequence[str],
    roster: Mapping[str, Mapping[str, Sequence[Period | str]]],
    notes: Mapping[str, str],
    now: datetime | None = None,
) -> SaveResult:
    """Build and serialize a document; the caller decides where it goes."""
    try:
        document = create_save_document(month, workers, roster, notes, now)
    except (ValidationError, ValueError) as exc:
        logger.warning("Save rejected: %s", exc)
        return SaveResult(success=False, error_message=str(exc))
    return SaveResult(success=True, content=serialize_document(document))


def generate_file_name(
    month: str | date | tuple[int, int],
    now: datetime | None = None,
    config: RosterConfig | None = None,
) -> str:
    """Export file name: label, target month and export timestamp."""
    config = config or RosterConfig()
    year, mon = parse_month(month)
    timestamp = (now or _utc_now()).strftime("%Y%m%d_%H%M%S")
    return f"{config.export_label}_{year}年{mon:02d}月_{timestamp}.json"


def save_to_file(
    document: SaveDocument,
    directory: str | Path,
    filename: str | None = None,
    now: datetime | None = None,
) -> SaveResult:
    """Write a document into ``directory`` as JSON."""
    filename = filename or generate_file_name(document.period, now)
    path = Path(directory) / filename
    content = serialize_document(document)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    except OSError as exc:
        logger.error("Could not write %s: %s", path, exc)
        return SaveResult(success=False, error_message=f"存檔失敗: {exc}")
    return SaveResult(success=True, content=content, path=str(path))


def parse_document_bytes(raw: bytes | str) -> Any:
    """Decode and parse raw file contents; raises ValueError if unreadable."""
    text = raw.decode("utf-8") if isinstance(raw, bytes) else raw
    return json.loads(text)


def load_document(
    raw: bytes | str,
    now: datetime | None = None,
    config: RosterConfig | None = None,
) -> LoadResult:
    """Parse, validate and (if needed) upgrade a saved document."""
    try:
        data = parse_document_bytes(raw)
    except ValueError:
        # json.JSONDecodeError and UnicodeDecodeError are both ValueErrors
        logger.warning("Document is not valid JSON")
        return LoadResult.failure(
            DocumentIssue(kind=IssueKind.MALFORMED_INPUT, message="檔案格式錯誤：無法解析 JSON")
        )

    return validate_save_data(data, now=now, config=config)


def load_from_file(
    path: str | Path,
    now: datetime | None = None,
    config: RosterConfig | None = None,
) -> LoadResult:
    try:
        raw = Path(path).read_bytes()
    except OSError as exc:
        return LoadResult.failure(
            DocumentIssue(kind=IssueKind.MALFORMED_INPUT, message=f"讀檔失敗: {exc}")
        )
    return load_document(raw, now, config)


def document_to_state(document: SaveDocument) -> tuple[tuple[int, int], list[str], Roster, Notes]:
    """Unpack a loaded document into (month, workers, roster, notes) for editing."""
    roster: Roster = {
        day: {worker: list(periods) for worker, periods in entry.items()}
        for day, entry in document.roster.items()
    }
    return parse_month(document.period), list(document.workers), roster, dict(document.notes)
