"""Engine configuration."""

from __future__ import annotations

from pydantic import BaseModel, Field


class FairnessThresholds(BaseModel):
    """Allowed deviation from the team mean for each workload figure."""

    holidays: float = Field(default=2, ge=0)
    periods: float = Field(default=3, ge=0)
    morning_evening_days: float = Field(default=1, ge=0)
    monday_holidays: float = Field(default=1, ge=0)
    saturday_holidays: float = Field(default=1, ge=0)

    def as_tuple(self) -> tuple[float, float, float, float, float]:
        return (
            self.holidays,
            self.periods,
            self.morning_evening_days,
            self.monday_holidays,
            self.saturday_holidays,
        )


class RosterConfig(BaseModel):
    """Configuration shared by the rule engine and the document layer."""

    fairness: FairnessThresholds = Field(default_factory=FairnessThresholds)
    stale_after_months: int = Field(
        default=6, ge=1, description="Saved documents older than this get a warning"
    )
    snapshot_key: str = Field(default="pharmacist-schedule-autosave", min_length=1)
    export_label: str = Field(default="排班存檔", min_length=1)
