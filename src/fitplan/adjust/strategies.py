"""Alternative-plan search for blocked verdicts.

Every strategy mutates one aspect of the profile, re-runs the stage
pipeline and keeps the candidate only if the new verdict can proceed.
Searches are bounded by AdjustmentConfig.max_probes per strategy.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Optional

from fitplan.config.settings import Settings
from fitplan.pipeline import StageResult, run_stages
from fitplan.planning.goal import WEIGHT_EPSILON_KG
from fitplan.planning.models import AdjustedPlan
from fitplan.profiles.models import GoalTag, UserProfile
from fitplan.validation.models import RuleCode, StrategyKind, ValidationVerdict

logger = logging.getLogger(__name__)

# Fraction of body weight lost in the cut phase when the goal is a gain
HYBRID_CUT_FRACTION = 0.05

# Lean-gain rate (% body weight per week) used to size a bulk phase
LEAN_GAIN_PCT = 0.5

STRATEGIES_BY_CODE = {
    RuleCode.EXTREMELY_UNREALISTIC: (StrategyKind.EXTEND_TIMELINE,),
    RuleCode.BELOW_BMR: (
        StrategyKind.EXTEND_TIMELINE,
        StrategyKind.ADD_EXERCISE,
        StrategyKind.ADJUST_TARGET,
    ),
    RuleCode.BELOW_ABSOLUTE_MINIMUM: (
        StrategyKind.EXTEND_TIMELINE,
        StrategyKind.ADD_EXERCISE,
        StrategyKind.ADJUST_TARGET,
    ),
    RuleCode.INSUFFICIENT_EXERCISE: (
        StrategyKind.ADD_EXERCISE,
        StrategyKind.EXTEND_TIMELINE,
    ),
    RuleCode.TARGET_BMI_UNDERWEIGHT: (StrategyKind.ADJUST_TARGET,),
    RuleCode.SEVERE_SLEEP_DEPRIVATION: (StrategyKind.EXTEND_TIMELINE,),
    RuleCode.CONFLICTING_GOALS: (StrategyKind.HYBRID,),
}


@dataclass(frozen=True)
class PlanPhase:
    """One leg of a phased (hybrid) plan."""

    label: str
    profile_changes: dict[str, Any]
    plan: AdjustedPlan
    verdict: ValidationVerdict


@dataclass(frozen=True)
class AlternativePlan:
    """A validated fix for a blocked plan.

    resulting_verdict.can_proceed is always True; candidates that fail
    validation are never returned.
    """

    label: str
    strategy: StrategyKind
    changed_fields: dict[str, Any]
    resulting_plan: AdjustedPlan
    resulting_verdict: ValidationVerdict
    phases: tuple[PlanPhase, ...] = field(default=())


class ProbeBudget:
    """Runs the stage pipeline for candidate profiles, up to a fixed count."""

    def __init__(self, settings: Settings, limit: Optional[int] = None):
        self.settings = settings
        self.limit = limit if limit is not None else settings.adjustment.max_probes
        self.used = 0

    @property
    def exhausted(self) -> bool:
        return self.used >= self.limit

    def run(self, profile: UserProfile) -> Optional[StageResult]:
        """Return the stage result, or None once the budget is spent."""
        if self.exhausted:
            logger.debug("Probe budget of %d exhausted", self.limit)
            return None
        self.used += 1
        result = run_stages(profile, self.settings)
        body = profile.body
        logger.debug(
            "Probe %d: target=%.1fkg timeline=%dw freq=%d -> %s",
            self.used,
            body.target_weight_kg,
            body.timeline_weeks,
            profile.activity.workout_frequency_per_week,
            "ok" if result.verdict.can_proceed else "blocked",
        )
        return result


# =============================================================================
# Profile mutations
# =============================================================================


def with_timeline(profile: UserProfile, weeks: int) -> UserProfile:
    return replace(profile, body=replace(profile.body, timeline_weeks=weeks))


def with_frequency(profile: UserProfile, sessions: int) -> UserProfile:
    return replace(
        profile,
        activity=replace(profile.activity, workout_frequency_per_week=sessions),
    )


def with_target(profile: UserProfile, target_kg: float) -> UserProfile:
    return replace(profile, body=replace(profile.body, target_weight_kg=target_kg))


def with_goals(profile: UserProfile, goals: frozenset[GoalTag]) -> UserProfile:
    return replace(profile, goals=replace(profile.goals, primary_goals=goals))


# =============================================================================
# Searches
# =============================================================================


def search_timeline(
    profile: UserProfile,
    budget: ProbeBudget,
) -> Optional[tuple[UserProfile, StageResult]]:
    """Binary-search the shortest timeline that passes validation.

    The target weight is held fixed. Returns None when even the longest
    allowed timeline is blocked.
    """
    lo = profile.body.timeline_weeks + 1
    hi = max(budget.settings.adjustment.max_timeline_weeks, lo)

    best_profile = with_timeline(profile, hi)
    best = budget.run(best_profile)
    if best is None or not best.verdict.can_proceed:
        return None

    while lo < hi:
        mid = (lo + hi) // 2
        candidate = with_timeline(profile, mid)
        result = budget.run(candidate)
        if result is None:
            break
        if result.verdict.can_proceed:
            hi = mid
            best_profile, best = candidate, result
        else:
            lo = mid + 1

    return best_profile, best


def search_frequency(
    profile: UserProfile,
    budget: ProbeBudget,
) -> Optional[tuple[UserProfile, StageResult]]:
    """Add one weekly session at a time up to the safe ceiling."""
    current = profile.activity.workout_frequency_per_week
    ceiling = budget.settings.adjustment.safe_max_frequency

    for sessions in range(current + 1, ceiling + 1):
        candidate = with_frequency(profile, sessions)
        result = budget.run(candidate)
        if result is None:
            return None
        if result.verdict.can_proceed:
            return candidate, result
    return None


def search_target(
    profile: UserProfile,
    budget: ProbeBudget,
) -> Optional[tuple[UserProfile, StageResult]]:
    """Find the largest feasible weight change at the current timeline.

    Changes are multiples of the target resolution and strictly smaller
    than the requested change.
    """
    body = profile.body
    resolution = budget.settings.adjustment.target_resolution_kg
    difference = body.target_weight_kg - body.weight_kg
    sign = -1 if difference < 0 else 1
    max_steps = math.ceil(abs(difference) / resolution) - 1
    if max_steps < 1:
        return None

    def candidate_for(steps: int) -> UserProfile:
        return with_target(profile, round(body.weight_kg + sign * steps * resolution, 2))

    lo, hi = 1, max_steps
    best_profile = candidate_for(lo)
    best = budget.run(best_profile)
    if best is None or not best.verdict.can_proceed:
        return None

    while lo < hi:
        mid = (lo + hi + 1) // 2
        candidate = candidate_for(mid)
        result = budget.run(candidate)
        if result is None:
            break
        if result.verdict.can_proceed:
            lo = mid
            best_profile, best = candidate, result
        else:
            hi = mid - 1

    return best_profile, best


# =============================================================================
# Strategies
# =============================================================================


def extend_timeline(profile: UserProfile, settings: Settings) -> Optional[AlternativePlan]:
    found = search_timeline(profile, ProbeBudget(settings))
    if found is None:
        return None
    candidate, result = found
    weeks = candidate.body.timeline_weeks
    return AlternativePlan(
        label=f"Extend timeline to {weeks} weeks",
        strategy=StrategyKind.EXTEND_TIMELINE,
        changed_fields={"timeline_weeks": weeks},
        resulting_plan=result.plan,
        resulting_verdict=result.verdict,
    )


def add_exercise(profile: UserProfile, settings: Settings) -> Optional[AlternativePlan]:
    found = search_frequency(profile, ProbeBudget(settings))
    if found is None:
        return None
    candidate, result = found
    sessions = candidate.activity.workout_frequency_per_week
    return AlternativePlan(
        label=f"Train {sessions} times per week",
        strategy=StrategyKind.ADD_EXERCISE,
        changed_fields={"workout_frequency_per_week": sessions},
        resulting_plan=result.plan,
        resulting_verdict=result.verdict,
    )


def adjust_target(profile: UserProfile, settings: Settings) -> Optional[AlternativePlan]:
    found = search_target(profile, ProbeBudget(settings))
    if found is None:
        return None
    candidate, result = found
    target = candidate.body.target_weight_kg
    return AlternativePlan(
        label=f"Aim for {target:g} kg in {candidate.body.timeline_weeks} weeks",
        strategy=StrategyKind.ADJUST_TARGET,
        changed_fields={"target_weight_kg": target},
        resulting_plan=result.plan,
        resulting_verdict=result.verdict,
    )


def _hybrid_intermediate_weight(profile: UserProfile, resolution: float) -> float:
    body = profile.body
    if body.target_weight_kg < body.weight_kg - WEIGHT_EPSILON_KG:
        return body.target_weight_kg
    cut_to = body.weight_kg * (1 - HYBRID_CUT_FRACTION)
    return round(round(cut_to / resolution) * resolution, 2)


def hybrid_plan(profile: UserProfile, settings: Settings) -> Optional[AlternativePlan]:
    """Cut to an intermediate weight, then maintain or lean bulk.

    Both phases must pass validation on their own.
    """
    budget = ProbeBudget(settings)
    body = profile.body
    goals = profile.goals.primary_goals
    intermediate = _hybrid_intermediate_weight(profile, settings.adjustment.target_resolution_kg)

    # Cut phase at the optimal rate, extended further if still blocked
    cut_kg = body.weight_kg - intermediate
    cut_weeks = max(1, math.ceil(cut_kg / (body.weight_kg * settings.rates.optimal_pct / 100)))
    cut_profile = with_goals(
        replace(
            profile,
            body=replace(body, target_weight_kg=intermediate, timeline_weeks=cut_weeks),
        ),
        goals - {GoalTag.WEIGHT_GAIN},
    )
    cut = budget.run(cut_profile)
    if cut is None:
        return None
    if not cut.verdict.can_proceed:
        found = search_timeline(cut_profile, budget)
        if found is None:
            logger.debug("Hybrid discarded: cut phase never validates")
            return None
        cut_profile, cut = found

    # Second phase starts from the intermediate weight
    final_target = max(body.target_weight_kg, intermediate)
    gain_kg = final_target - intermediate
    second_weeks = body.timeline_weeks
    if gain_kg > WEIGHT_EPSILON_KG:
        second_weeks = max(
            second_weeks, math.ceil(gain_kg / (intermediate * LEAN_GAIN_PCT / 100))
        )
    second_profile = with_goals(
        replace(
            profile,
            body=replace(
                body,
                weight_kg=intermediate,
                target_weight_kg=final_target,
                timeline_weeks=second_weeks,
            ),
        ),
        goals - {GoalTag.WEIGHT_LOSS},
    )
    second = budget.run(second_profile)
    if second is None or not second.verdict.can_proceed:
        logger.debug("Hybrid discarded: second phase blocked")
        return None

    second_label = "Lean bulk" if gain_kg > WEIGHT_EPSILON_KG else "Maintain"
    phases = (
        PlanPhase(
            label=f"Cut to {intermediate:g} kg",
            profile_changes={
                "target_weight_kg": intermediate,
                "timeline_weeks": cut_profile.body.timeline_weeks,
                "primary_goals": sorted(g.value for g in cut_profile.goals.primary_goals),
            },
            plan=cut.plan,
            verdict=cut.verdict,
        ),
        PlanPhase(
            label=f"{second_label} at {final_target:g} kg",
            profile_changes={
                "weight_kg": intermediate,
                "target_weight_kg": final_target,
                "timeline_weeks": second_weeks,
                "primary_goals": sorted(g.value for g in second_profile.goals.primary_goals),
            },
            plan=second.plan,
            verdict=second.verdict,
        ),
    )
    return AlternativePlan(
        label=f"Cut to {intermediate:g} kg, then {second_label.lower()}",
        strategy=StrategyKind.HYBRID,
        changed_fields=dict(phases[0].profile_changes),
        resulting_plan=cut.plan,
        resulting_verdict=cut.verdict,
        phases=phases,
    )


STRATEGY_FUNCS: dict[StrategyKind, Callable[[UserProfile, Settings], Optional[AlternativePlan]]] = {
    StrategyKind.EXTEND_TIMELINE: extend_timeline,
    StrategyKind.ADD_EXERCISE: add_exercise,
    StrategyKind.ADJUST_TARGET: adjust_target,
    StrategyKind.HYBRID: hybrid_plan,
}


def select_strategies(verdict: ValidationVerdict) -> list[StrategyKind]:
    """Strategies worth trying for the blocking codes, in presentation order."""
    wanted: set[StrategyKind] = set()
    for error in verdict.errors:
        wanted.update(STRATEGIES_BY_CODE.get(error.code, ()))
        wanted.update(ref.strategy for ref in error.alternatives)
    return [kind for kind in StrategyKind if kind in wanted]


def generate_alternatives(
    profile: UserProfile,
    verdict: ValidationVerdict,
    settings: Optional[Settings] = None,
) -> list[AlternativePlan]:
    """Expand a blocked verdict into validated alternative plans.

    Args:
        profile: The profile that was blocked
        verdict: Its verdict
        settings: Search bounds and rate thresholds; defaults when omitted

    Returns:
        At most max_alternatives plans, each of which can proceed
    """
    if verdict.can_proceed:
        return []
    if settings is None:
        settings = Settings()

    alternatives: list[AlternativePlan] = []
    for kind in select_strategies(verdict):
        alternative = STRATEGY_FUNCS[kind](profile, settings)
        if alternative is None or not alternative.resulting_verdict.can_proceed:
            logger.debug("Strategy %s produced no valid alternative", kind.value)
            continue
        alternatives.append(alternative)
        if len(alternatives) >= settings.adjustment.max_alternatives:
            break
    return alternatives
