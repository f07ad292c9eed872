"""Single entry point: evaluate a profile end to end."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from fitplan.adjust.strategies import AlternativePlan, generate_alternatives
from fitplan.config.settings import Settings
from fitplan.pipeline import run_stages
from fitplan.planning.models import AdjustedPlan
from fitplan.profiles.body_calc import RawMetrics
from fitplan.profiles.models import UserProfile
from fitplan.validation.models import ValidationVerdict

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EvaluationResult:
    metrics: RawMetrics
    plan: AdjustedPlan
    verdict: ValidationVerdict
    alternatives: tuple[AlternativePlan, ...] = ()


def evaluate(profile: UserProfile, settings: Optional[Settings] = None) -> EvaluationResult:
    """Compute metrics, resolve and adjust the plan, validate it.

    Alternatives are searched only for blocked plans. The call is pure:
    the same profile and settings always give the same result.

    Args:
        profile: Complete onboarding profile
        settings: Thresholds and search bounds (defaults when omitted)

    Returns:
        EvaluationResult
    """
    if settings is None:
        settings = Settings()

    stages = run_stages(profile, settings)
    alternatives: tuple[AlternativePlan, ...] = ()
    if not stages.verdict.can_proceed:
        alternatives = tuple(generate_alternatives(profile, stages.verdict, settings))
        logger.debug("Found %d alternative(s)", len(alternatives))

    return EvaluationResult(
        metrics=stages.metrics,
        plan=stages.plan,
        verdict=stages.verdict,
        alternatives=alternatives,
    )
