"""Document shapes, one model per released save-file version.

Legacy models (``SaveDocumentV1_0_0`` .. ``SaveDocumentV1_2_0``) describe the
structure accepted for a version before migration and ignore unknown keys.
``SaveDocument`` is the current, strict and immutable shape that every loaded
document ends up in.
"""

from __future__ import annotations

from datetime import date
from typing import Annotated, Any, Literal

from dateutil.parser import isoparse
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StringConstraints,
    field_validator,
    model_validator,
)

from shift_roster.models.roster import Period

MAX_WORKERS = 20
MAX_PERIODS_PER_DAY = 4
MAX_NOTE_LENGTH = 500

MonthKey = Annotated[str, StringConstraints(pattern=r"^\d{4}-\d{2}$")]
DateKey = Annotated[str, StringConstraints(pattern=r"^\d{4}-\d{2}-\d{2}$")]
WorkerName = Annotated[str, StringConstraints(min_length=1)]
NoteText = Annotated[str, StringConstraints(max_length=MAX_NOTE_LENGTH)]
DayPeriods = Annotated[list[Period], Field(max_length=MAX_PERIODS_PER_DAY)]

# 1.0.0 predates overtime
PeriodV1_0 = Literal["早", "午", "晚"]
PeriodV1_1 = Literal["早", "午", "晚", "加"]


def check_instant(value: str) -> str:
    """Accept an ISO-8601 timestamp carrying a UTC offset."""
    try:
        parsed = isoparse(value)
    except (ValueError, OverflowError) as exc:
        raise ValueError("存檔時間格式錯誤") from exc
    if parsed.tzinfo is None:
        raise ValueError("存檔時間格式錯誤：缺少時區")
    return value


def check_month(value: str) -> str:
    """Accept a ``YYYY-MM`` key naming a real calendar month."""
    year, month = int(value[:4]), int(value[5:])
    if year < 1 or not 1 <= month <= 12:
        raise ValueError(f"月份超出範圍: {value}")
    return value


class DocumentMetadata(BaseModel):
    """Optional metadata block introduced in 1.2.0."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    creator: str | None = None
    department: str | None = None


class _LegacyDocument(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    version: str
    period: MonthKey
    workers: list[str] = Field(min_length=1, max_length=MAX_WORKERS)
    notes: dict[str, str]
    saved_at: str = Field(alias="savedAt")

    @field_validator("saved_at")
    @classmethod
    def _saved_at_is_instant(cls, value: str) -> str:
        return check_instant(value)

    @field_validator("period")
    @classmethod
    def _period_is_month(cls, value: str) -> str:
        return check_month(value)


class SaveDocumentV1_0_0(_LegacyDocument):
    """Original format: morning/midday/evening only."""

    roster: dict[str, dict[str, list[PeriodV1_0]]]


class SaveDocumentV1_1_0(_LegacyDocument):
    """Adds the overtime period."""

    roster: dict[str, dict[str, list[PeriodV1_1]]]


class SaveDocumentV1_2_0(SaveDocumentV1_1_0):
    """Adds the optional metadata block."""

    metadata: DocumentMetadata | None = None


class SaveDocument(BaseModel):
    """Current save-file format (1.2.0, strict)."""

    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    version: str = Field(min_length=1)
    period: MonthKey
    workers: list[WorkerName] = Field(min_length=1, max_length=MAX_WORKERS)
    roster: dict[DateKey, dict[WorkerName, DayPeriods]]
    notes: dict[DateKey, NoteText]
    saved_at: str = Field(alias="savedAt")
    metadata: DocumentMetadata | None = None

    @field_validator("saved_at")
    @classmethod
    def _saved_at_is_instant(cls, value: str) -> str:
        return check_instant(value)

    @field_validator("period")
    @classmethod
    def _period_is_month(cls, value: str) -> str:
        return check_month(value)

    @field_validator("workers")
    @classmethod
    def _workers_unique(cls, value: list[str]) -> list[str]:
        seen: set[str] = set()
        for name in value:
            if name in seen:
                raise ValueError(f"姓名重複: {name}")
            seen.add(name)
        return value

    @model_validator(mode="after")
    def _dates_within_period(self) -> SaveDocument:
        for field_name, keys in (("roster", self.roster), ("notes", self.notes)):
            for key in keys:
                try:
                    date.fromisoformat(key)
                except ValueError as exc:
                    raise ValueError(f"{field_name}.{key}: 日期不存在") from exc
                if not key.startswith(f"{self.period}-"):
                    raise ValueError(f"{field_name}.{key}: 日期不在 {self.period} 月份內")
        return self

    def to_payload(self) -> dict[str, Any]:
        """JSON-ready mapping using the persisted field names."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
