"""Day-level rules (per-day headcounts and per-person caps)."""

from __future__ import annotations

from shift_roster.constraints.base import DayRule, RuleContext, day_label
from shift_roster.constraints.policy import WEEKDAY_NAMES
from shift_roster.models.roster import STAFFED_PERIODS
from shift_roster.models.validation import Violation


class RequiredHeadcount(DayRule):
    """Each staffed period must have exactly the required number of workers."""

    @property
    def rule_id(self) -> str:
        return "required_headcount"

    @property
    def name_zh(self) -> str:
        return "各班人數需求"

    @property
    def description(self) -> str:
        return "早、午、晚班的實際人數必須等於當日需求人數"

    def check_day(self, ctx: RuleContext, day_idx: int) -> list[Violation]:
        day = ctx.days[day_idx]
        required = ctx.requirements[day_idx]
        violations: list[Violation] = []

        for period in STAFFED_PERIODS:
            required_count = required.count_for(period)
            if required_count <= 0:
                continue
            actual = ctx.headcount(day_idx, period)
            if actual != required_count:
                violations.append(
                    Violation(
                        rule_id=self.rule_id,
                        message=(
                            f"{day_label(day)} {period.value}班人數不符："
                            f"需要{required_count}人，實際{actual}人"
                        ),
                        date=day.isoformat(),
                    )
                )
        return violations


class PerPersonCap(DayRule):
    """On capped days nobody may work more periods than the cap."""

    @property
    def rule_id(self) -> str:
        return "per_person_cap"

    @property
    def name_zh(self) -> str:
        return "每人班數上限"

    @property
    def description(self) -> str:
        return "週一每人最多兩節"

    def check_day(self, ctx: RuleContext, day_idx: int) -> list[Violation]:
        cap = ctx.requirements[day_idx].max_per_person
        if cap is None:
            return []

        day = ctx.days[day_idx]
        weekday_name = WEEKDAY_NAMES[day.weekday()]
        violations: list[Violation] = []
        for w_idx, worker in enumerate(ctx.workers):
            if ctx.periods_worked(w_idx, day_idx) > cap:
                violations.append(
                    Violation(
                        rule_id=self.rule_id,
                        message=f"{day_label(day)} {worker}超過{weekday_name}每人最多{cap}節限制",
                        worker=worker,
                        date=day.isoformat(),
                    )
                )
        return violations
