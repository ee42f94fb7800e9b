"""Calendar staffing policy: who is needed on which weekday."""

from __future__ import annotations

import calendar
import re
from datetime import date

from shift_roster.models.roster import Requirement

MONDAY = 0
SATURDAY = 5
SUNDAY = 6

# Weekday whose requirement carries a per-person cap
HEAVY_WEEKDAY = MONDAY
# Weekend day that is still staffed, with a lighter requirement
LIGHT_WEEKEND_DAY = SATURDAY

WEEKDAY_NAMES = ("週一", "週二", "週三", "週四", "週五", "週六", "週日")

_WEEKDAY_POLICY: dict[int, Requirement] = {
    0: Requirement(morning=2, midday=2, evening=2, max_per_person=2),
    1: Requirement(morning=1, midday=1, evening=2),
    2: Requirement(morning=1, midday=1, evening=2),
    3: Requirement(morning=1, midday=1, evening=2),
    4: Requirement(morning=1, midday=1, evening=2),
    5: Requirement(morning=2, midday=1, evening=1),
    6: Requirement(rest_day=True),
}

_MONTH_RE = re.compile(r"(\d{4})-(\d{2})")


def requirement_for(day: date) -> Requirement:
    """Staffing requirement for ``day``, determined by its weekday only."""
    return _WEEKDAY_POLICY[day.weekday()]


def parse_month(value: str | date | tuple[int, int]) -> tuple[int, int]:
    """Normalize ``"YYYY-MM"``, a date, or ``(year, month)`` to a tuple."""
    if isinstance(value, date):
        return value.year, value.month
    if isinstance(value, tuple):
        year, month = value
    else:
        match = _MONTH_RE.fullmatch(str(value).strip())
        if match is None:
            raise ValueError(f"月份格式必須為 YYYY-MM: {value!r}")
        year, month = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12:
        raise ValueError(f"月份超出範圍: {value!r}")
    return year, month


def month_key(year: int, month: int) -> str:
    return f"{year:04d}-{month:02d}"


def days_in_month(year: int, month: int) -> list[date]:
    _, last = calendar.monthrange(year, month)
    return [date(year, month, d) for d in range(1, last + 1)]
