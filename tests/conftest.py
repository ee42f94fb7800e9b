"""Common test fixtures."""

from __future__ import annotations

import copy
from datetime import datetime, timezone

import pytest

from shift_roster.constraints.policy import days_in_month, parse_month

# Four-person day patterns, rotated daily so that workload stays even
_MONDAY_PATTERN = [["早", "午"], ["早", "晚"], ["午", "晚"], []]
_WEEKDAY_PATTERN = [["早"], ["午"], ["晚"], ["晚"]]
_SATURDAY_PATTERN = [["早"], ["早"], ["午"], ["晚"]]


@pytest.fixture
def workers() -> list[str]:
    return ["邱", "黃", "李", "陳"]


@pytest.fixture
def make_balanced_roster():
    """Roster meeting every headcount and cap, with balanced workload.

    Worker ``i`` takes pattern slot ``(i + day) % 4``; consecutive Mondays
    land on different slots, so nobody is off every Monday.
    """

    def _make(month: str, names: list[str]) -> dict[str, dict[str, list[str]]]:
        assert len(names) == 4
        roster: dict[str, dict[str, list[str]]] = {}
        for day in days_in_month(*parse_month(month)):
            weekday = day.weekday()
            if weekday == 6:
                continue
            if weekday == 0:
                pattern = _MONDAY_PATTERN
            elif weekday == 5:
                pattern = _SATURDAY_PATTERN
            else:
                pattern = _WEEKDAY_PATTERN
            roster[day.isoformat()] = {
                name: list(pattern[(i + day.day) % 4]) for i, name in enumerate(names)
            }
        return roster

    return _make


@pytest.fixture
def fixed_now() -> datetime:
    """A clock close enough to the sample documents that nothing is stale."""
    return datetime(2025, 3, 1, 9, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def v1_0_0_document() -> dict:
    return {
        "version": "1.0.0",
        "period": "2025-01",
        "workers": ["邱", "黃"],
        "roster": {"2025-01-01": {"邱": ["早"], "黃": ["晚"]}},
        "notes": {},
        "savedAt": "2025-01-01T12:00:00.000Z",
    }


@pytest.fixture
def v1_1_0_document() -> dict:
    return {
        "version": "1.1.0",
        "period": "2025-01",
        "workers": ["邱", "黃", "李", "陳"],
        "roster": {
            "2025-01-01": {"邱": ["早", "午", "加"], "黃": ["晚"], "李": [], "陳": ["午"]}
        },
        "notes": {"2025-01-01": "元旦假期"},
        "savedAt": "2025-01-01T12:00:00.000Z",
    }


@pytest.fixture
def current_document(v1_1_0_document) -> dict:
    doc = copy.deepcopy(v1_1_0_document)
    doc["version"] = "1.2.0"
    doc["metadata"] = {"creator": "管理員", "department": "藥劑科"}
    return doc
