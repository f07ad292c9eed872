"""Goal resolution and the modifier pipeline.

Key components:
- resolve_goal: direction, rate, calorie target and macros
- apply_modifiers: ordered, non-stacking condition/age/sleep/pregnancy adjustments
"""

from __future__ import annotations

from fitplan.planning.goal import resolve_goal
from fitplan.planning.modifiers import apply_modifiers
from fitplan.planning.models import AdjustedPlan, Direction, GoalPlan, RefeedSchedule

__all__ = [
    "AdjustedPlan",
    "Direction",
    "GoalPlan",
    "RefeedSchedule",
    "apply_modifiers",
    "resolve_goal",
]
