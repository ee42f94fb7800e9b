"""Roster-related data models."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Period(str, Enum):
    """Shift period within a working day.

    Values are the tokens written to saved documents.
    """

    MORNING = "早"
    MIDDAY = "午"
    EVENING = "晚"
    OVERTIME = "加"


# Periods whose headcount is governed by the calendar policy
STAFFED_PERIODS: tuple[Period, ...] = (Period.MORNING, Period.MIDDAY, Period.EVENING)

# date key (YYYY-MM-DD) -> worker name -> periods worked that day
Roster = dict[str, dict[str, list[Period]]]

# date key (YYYY-MM-DD) -> free-text note
Notes = dict[str, str]


class Requirement(BaseModel):
    """Staffing requirement for a single calendar day."""

    model_config = ConfigDict(frozen=True)

    morning: int = Field(default=0, ge=0)
    midday: int = Field(default=0, ge=0)
    evening: int = Field(default=0, ge=0)
    max_per_person: int | None = Field(
        default=None, ge=1, description="Per-person period cap for the day"
    )
    rest_day: bool = False

    def count_for(self, period: Period) -> int:
        """Required headcount for a staffed period (overtime is never required)."""
        if period is Period.MORNING:
            return self.morning
        if period is Period.MIDDAY:
            return self.midday
        if period is Period.EVENING:
            return self.evening
        return 0


@dataclass
class WorkerStats:
    """Per-worker workload figures for one month.

    Recomputed on every evaluation; never persisted.
    """

    holidays: int = 0
    periods: int = 0
    morning_evening_days: int = 0
    monday_holidays: int = 0
    saturday_holidays: int = 0

    def as_tuple(self) -> tuple[int, int, int, int, int]:
        return (
            self.holidays,
            self.periods,
            self.morning_evening_days,
            self.monday_holidays,
            self.saturday_holidays,
        )
