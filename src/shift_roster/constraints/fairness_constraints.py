"""Fairness rules (balanced workload across the team)."""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray

from shift_roster.constraints.base import MonthRule, RuleContext
from shift_roster.constraints.policy import HEAVY_WEEKDAY, LIGHT_WEEKEND_DAY
from shift_roster.models.roster import Period, WorkerStats
from shift_roster.models.validation import Violation, ViolationSeverity

# Same order as WorkerStats.as_tuple()
_STAT_MESSAGES = (
    "{worker}假期天數不平均",
    "{worker}上班節數不平均",
    "{worker}早晚班天數不平均",
    "{worker}週一假期不平均",
    "{worker}週六假期不平均",
)


def compute_worker_stats(ctx: RuleContext) -> list[WorkerStats]:
    """Workload figures per worker, in worker-list order.

    Every day of the month counts, rest days included.
    """
    stats = [WorkerStats() for _ in ctx.workers]
    for d_idx, day in enumerate(ctx.days):
        weekday = day.weekday()
        for w_idx, s in enumerate(stats):
            worked = ctx.periods_worked(w_idx, d_idx)
            if worked == 0:
                s.holidays += 1
                if weekday == HEAVY_WEEKDAY:
                    s.monday_holidays += 1
                if weekday == LIGHT_WEEKEND_DAY:
                    s.saturday_holidays += 1
            else:
                s.periods += worked
                if ctx.works(w_idx, d_idx, Period.MORNING) and ctx.works(
                    w_idx, d_idx, Period.EVENING
                ):
                    s.morning_evening_days += 1
    return stats


def find_outliers(
    values: NDArray[np.int_], thresholds: NDArray[np.float64]
) -> NDArray[np.bool_]:
    """Mark entries deviating from their column mean by more than the threshold.

    ``values`` has shape (num_workers, num_figures). Compared as
    ``|n*x - sum| > n*threshold`` so integer inputs never hit rounding.
    """
    n = values.shape[0]
    if n == 0:
        return np.zeros(values.shape, dtype=bool)
    deviation = np.abs(n * values - values.sum(axis=0))
    return deviation > n * thresholds


class WorkloadBalance(MonthRule):
    """Penalize workers whose workload strays from the team average."""

    @property
    def rule_id(self) -> str:
        return "workload_balance"

    @property
    def name_zh(self) -> str:
        return "工作量平均"

    @property
    def category(self) -> str:
        return "fairness"

    @property
    def description(self) -> str:
        return "假期、班數、早晚班、週一及週六假期與平均值差距過大時違規"

    def check(self, ctx: RuleContext) -> list[Violation]:
        if not ctx.workers:
            return []

        stats = compute_worker_stats(ctx)
        values = np.array([s.as_tuple() for s in stats], dtype=int)
        thresholds = np.array(ctx.config.fairness.as_tuple(), dtype=float)
        outliers = find_outliers(values, thresholds)

        violations: list[Violation] = []
        for w_idx, worker in enumerate(ctx.workers):
            for figure_idx, template in enumerate(_STAT_MESSAGES):
                if outliers[w_idx, figure_idx]:
                    violations.append(
                        Violation(
                            rule_id=self.rule_id,
                            message=template.format(worker=worker),
                            severity=ViolationSeverity.WARNING,
                            worker=worker,
                        )
                    )
        return violations
