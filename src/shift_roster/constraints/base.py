"""Base classes for the roster rule system."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date
from typing import Mapping, Sequence

import numpy as np
from numpy.typing import NDArray
from pydantic import BaseModel, ConfigDict, Field

from shift_roster.constraints.policy import days_in_month, parse_month, requirement_for
from shift_roster.models.config import RosterConfig
from shift_roster.models.roster import Period, Requirement
from shift_roster.models.validation import Violation

PERIODS: tuple[Period, ...] = tuple(Period)
PERIOD_INDEX: dict[Period, int] = {p: i for i, p in enumerate(PERIODS)}


class RuleContext(BaseModel):
    """Read-only view of one month's roster for rule evaluation."""

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    year: int
    month: int
    workers: list[str]
    days: list[date]
    requirements: list[Requirement]
    assignment: NDArray[np.int_] = Field(
        description="shape=(num_workers, num_days, num_periods). 1=assigned"
    )
    config: RosterConfig = Field(default_factory=RosterConfig)

    @classmethod
    def from_roster(
        cls,
        month: str | date | tuple[int, int],
        roster: Mapping[str, Mapping[str, Sequence[Period | str]]],
        workers: Sequence[str],
        config: RosterConfig | None = None,
    ) -> RuleContext:
        """Build the context; workers not listed in ``workers`` are ignored."""
        year, mon = parse_month(month)
        days = days_in_month(year, mon)
        assignment = np.zeros((len(workers), len(days), len(PERIODS)), dtype=int)
        for d_idx, day in enumerate(days):
            day_entry = roster.get(day.isoformat()) or {}
            for w_idx, worker in enumerate(workers):
                for token in day_entry.get(worker) or ():
                    assignment[w_idx, d_idx, PERIOD_INDEX[Period(token)]] = 1
        return cls(
            year=year,
            month=mon,
            workers=list(workers),
            days=days,
            requirements=[requirement_for(day) for day in days],
            assignment=assignment,
            config=config or RosterConfig(),
        )

    @property
    def num_workers(self) -> int:
        return len(self.workers)

    @property
    def num_days(self) -> int:
        return len(self.days)

    def headcount(self, day_idx: int, period: Period) -> int:
        """Number of listed workers assigned ``period`` on the day."""
        return int(self.assignment[:, day_idx, PERIOD_INDEX[period]].sum())

    def periods_worked(self, worker_idx: int, day_idx: int) -> int:
        return int(self.assignment[worker_idx, day_idx].sum())

    def works(self, worker_idx: int, day_idx: int, period: Period) -> bool:
        return bool(self.assignment[worker_idx, day_idx, PERIOD_INDEX[period]])


def day_label(day: date) -> str:
    """Short month/day label used in messages, e.g. ``1/6``."""
    return f"{day.month}/{day.day}"


class RosterRule(ABC):
    """Abstract base class for roster rules."""

    @property
    @abstractmethod
    def rule_id(self) -> str:
        """Unique identifier for this rule."""

    @property
    @abstractmethod
    def name_zh(self) -> str:
        """Display name."""

    @property
    @abstractmethod
    def category(self) -> str:
        """Category: day or fairness."""

    @property
    def description(self) -> str:
        return ""


class DayRule(RosterRule):
    """A rule checked once per staffed day, in calendar order."""

    @property
    def category(self) -> str:
        return "day"

    @abstractmethod
    def check_day(self, ctx: RuleContext, day_idx: int) -> list[Violation]:
        """Violations for a single day."""


class MonthRule(RosterRule):
    """A rule checked once over the whole month."""

    @abstractmethod
    def check(self, ctx: RuleContext) -> list[Violation]:
        """Violations for the whole month."""
