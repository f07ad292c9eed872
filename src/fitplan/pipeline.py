"""Run metrics, goal resolution, modifiers and validation in sequence."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from fitplan.config.settings import Settings
from fitplan.planning.goal import resolve_goal
from fitplan.planning.modifiers import apply_modifiers
from fitplan.planning.models import AdjustedPlan
from fitplan.profiles.body_calc import RawMetrics, compute_raw_metrics
from fitplan.profiles.models import UserProfile
from fitplan.validation.engine import validate
from fitplan.validation.models import ValidationVerdict


@dataclass(frozen=True)
class StageResult:
    metrics: RawMetrics
    plan: AdjustedPlan
    verdict: ValidationVerdict


def run_stages(profile: UserProfile, settings: Optional[Settings] = None) -> StageResult:
    """Run stages 1-4 for one profile. Pure; safe to call repeatedly."""
    raw = compute_raw_metrics(profile)
    goal = resolve_goal(profile, raw)
    adjusted = apply_modifiers(profile, goal)
    verdict = validate(profile, raw, adjusted, settings)
    return StageResult(metrics=raw, plan=adjusted, verdict=verdict)
