"""Roster evaluation against the registered rules."""

from __future__ import annotations

from datetime import date
from typing import Mapping, Sequence

from shift_roster.constraints.base import RuleContext
from shift_roster.constraints.registry import RuleRegistry, get_registry
from shift_roster.models.config import RosterConfig
from shift_roster.models.roster import Period
from shift_roster.models.validation import Violation, ViolationReport


def evaluate_report(
    month: str | date | tuple[int, int],
    roster: Mapping[str, Mapping[str, Sequence[Period | str]]],
    workers: Sequence[str],
    config: RosterConfig | None = None,
    registry: RuleRegistry | None = None,
) -> ViolationReport:
    """Evaluate a month's roster.

    Day violations come first in calendar order (rest days skipped), followed
    by month-level violations in worker-list order. Inputs are not modified.
    """
    registry = registry or get_registry()
    ctx = RuleContext.from_roster(month, roster, workers, config)

    violations: list[Violation] = []
    day_rules = registry.day_rules()
    for day_idx in range(ctx.num_days):
        if ctx.requirements[day_idx].rest_day:
            continue
        for rule in day_rules:
            violations.extend(rule.check_day(ctx, day_idx))

    for rule in registry.month_rules():
        violations.extend(rule.check(ctx))

    return ViolationReport(violations=violations)


def evaluate(
    month: str | date | tuple[int, int],
    roster: Mapping[str, Mapping[str, Sequence[Period | str]]],
    workers: Sequence[str],
    config: RosterConfig | None = None,
) -> list[str]:
    """Violation messages for a month's roster, in reporting order."""
    return evaluate_report(month, roster, workers, config).messages
