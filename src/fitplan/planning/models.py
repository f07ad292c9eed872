"""Data models for resolved goals and modifier-adjusted plans."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from fitplan.profiles.models import ActivityLevel


class Direction(Enum):
    """Weight goal direction, from sign(target - current)."""

    LOSS = "loss"
    GAIN = "gain"
    MAINTAIN = "maintain"


@dataclass(frozen=True)
class GoalPlan:
    """Raw calorie and macro targets before any modifier is applied.

    May be unsafe (e.g. below BMR); validation decides that.
    """

    direction: Direction
    required_weekly_rate_kg: float
    exercise_kcal_per_week: float
    true_tdee: float            # base TDEE + daily exercise energy
    daily_kcal_delta: float     # deficit or surplus magnitude
    target_calories: float
    protein_g: float
    carbs_g: float
    fat_g: float
    carb_share: float           # share of non-protein calories from carbs


@dataclass(frozen=True)
class RefeedSchedule:
    """Refeed days and diet break planned for a long deficit."""

    weekly_refeeds: bool
    diet_break_week: Optional[int]
    explanation: tuple[str, ...]


@dataclass(frozen=True)
class AdjustedPlan:
    """GoalPlan with the modifier pipeline applied.

    Attributes:
        base: The unmodified GoalPlan
        adjusted_tdee: Maintenance energy after metabolic modifiers
        target_calories: Final daily calorie target
        activity_level: Activity level after the occupation floor
        projected_timeline_weeks: Timeline expected after sleep debt
        refeed: Refeed/diet-break schedule, if the plan needs one
        modifier_notes: One human-readable line per applied adjustment
    """

    base: GoalPlan
    adjusted_tdee: float
    target_calories: float
    protein_g: float
    carbs_g: float
    fat_g: float
    activity_level: ActivityLevel
    projected_timeline_weeks: int
    refeed: Optional[RefeedSchedule]
    modifier_notes: tuple[str, ...]

    @property
    def direction(self) -> Direction:
        return self.base.direction

    @property
    def true_tdee(self) -> float:
        return self.base.true_tdee

    @property
    def required_weekly_rate_kg(self) -> float:
        return self.base.required_weekly_rate_kg

    @property
    def deficit_fraction(self) -> float:
        return deficit_fraction(self.true_tdee, self.target_calories)


def deficit_fraction(true_tdee: float, target_calories: float) -> float:
    """Deficit as a fraction of true TDEE (0 when not in a deficit)."""
    if true_tdee <= 0:
        return 0.0
    return max(0.0, (true_tdee - target_calories) / true_tdee)
