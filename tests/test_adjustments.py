"""Tests for the alternative-plan search."""

import pytest

from fitplan.adjust.strategies import (
    ProbeBudget,
    add_exercise,
    adjust_target,
    extend_timeline,
    generate_alternatives,
    hybrid_plan,
    search_timeline,
    select_strategies,
    with_timeline,
)
from fitplan.config.settings import Settings
from fitplan.pipeline import run_stages
from fitplan.profiles.models import GoalTag
from fitplan.validation.models import StrategyKind


@pytest.fixture
def insufficient_exercise_profile(make_profile):
    """80 -> 72 kg in 8 weeks with a single weekly workout."""
    return make_profile(
        target_weight_kg=72.0, timeline_weeks=8, activity={"workout_frequency_per_week": 1}
    )


@pytest.fixture
def conflicting_goals_profile(make_profile):
    return make_profile(
        weight_kg=90.0,
        target_weight_kg=80.0,
        timeline_weeks=20,
        goals=(GoalTag.WEIGHT_LOSS, GoalTag.WEIGHT_GAIN),
    )


class TestStrategies:
    """Tests for individual strategies."""

    def test_extend_timeline_finds_shortest(self, below_bmr_profile, default_settings):
        alternative = extend_timeline(below_bmr_profile, default_settings)
        assert alternative.changed_fields == {"timeline_weeks": 14}
        assert alternative.label == "Extend timeline to 14 weeks"
        assert alternative.resulting_verdict.can_proceed
        # One week shorter is still blocked
        assert not run_stages(with_timeline(below_bmr_profile, 13)).verdict.can_proceed

    def test_add_exercise_fails_when_ceiling_too_low(self, below_bmr_profile, default_settings):
        assert add_exercise(below_bmr_profile, default_settings) is None

    def test_add_exercise_respects_safe_ceiling(self, below_bmr_profile):
        settings = Settings()
        settings.adjustment.safe_max_frequency = 3
        assert add_exercise(below_bmr_profile, settings) is None

    def test_adjust_target_largest_feasible_change(self, below_bmr_profile, default_settings):
        alternative = adjust_target(below_bmr_profile, default_settings)
        assert alternative.changed_fields == {"target_weight_kg": 57.5}
        assert alternative.label == "Aim for 57.5 kg in 8 weeks"

    def test_adjust_target_uses_resolution(self, below_bmr_profile):
        settings = Settings()
        settings.adjustment.target_resolution_kg = 1.0
        alternative = adjust_target(below_bmr_profile, settings)
        assert alternative.changed_fields == {"target_weight_kg": 58.0}

    def test_hybrid_phases(self, conflicting_goals_profile, default_settings):
        alternative = hybrid_plan(conflicting_goals_profile, default_settings)
        assert alternative.strategy == StrategyKind.HYBRID
        assert len(alternative.phases) == 2
        cut, second = alternative.phases
        assert cut.label == "Cut to 80 kg"
        assert cut.profile_changes["timeline_weeks"] == 19
        assert cut.profile_changes["primary_goals"] == ["weight_loss"]
        assert second.label == "Maintain at 80 kg"
        assert second.profile_changes["primary_goals"] == ["weight_gain"]
        assert all(phase.verdict.can_proceed for phase in alternative.phases)


class TestProbeBudget:
    def test_exhausted_budget_returns_none(self, maintenance_profile, default_settings):
        budget = ProbeBudget(default_settings, limit=0)
        assert budget.run(maintenance_profile) is None

    def test_search_keeps_best_found_when_budget_runs_out(self, below_bmr_profile, default_settings):
        """With one probe only the longest timeline is tried."""
        found = search_timeline(below_bmr_profile, ProbeBudget(default_settings, limit=1))
        candidate, result = found
        assert candidate.body.timeline_weeks == default_settings.adjustment.max_timeline_weeks
        assert result.verdict.can_proceed

    def test_default_limit_from_settings(self, default_settings):
        assert ProbeBudget(default_settings).limit == 20


class TestGenerateAlternatives:
    """Tests for the combined search."""

    def test_below_bmr(self, below_bmr_profile, default_settings):
        verdict = run_stages(below_bmr_profile).verdict
        alternatives = generate_alternatives(below_bmr_profile, verdict, default_settings)
        assert [a.label for a in alternatives] == [
            "Extend timeline to 14 weeks",
            "Aim for 57.5 kg in 8 weeks",
        ]

    def test_every_alternative_can_proceed(self, insufficient_exercise_profile, default_settings):
        verdict = run_stages(insufficient_exercise_profile).verdict
        alternatives = generate_alternatives(
            insufficient_exercise_profile, verdict, default_settings
        )
        assert alternatives
        assert alternatives[0].changed_fields == {"timeline_weeks": 19}
        assert all(a.resulting_verdict.can_proceed for a in alternatives)

    def test_proceeding_verdict_gets_none(self, aggressive_cut_profile):
        verdict = run_stages(aggressive_cut_profile).verdict
        assert generate_alternatives(aggressive_cut_profile, verdict) == []

    def test_max_alternatives(self, below_bmr_profile):
        settings = Settings()
        settings.adjustment.max_alternatives = 1
        verdict = run_stages(below_bmr_profile).verdict
        alternatives = generate_alternatives(below_bmr_profile, verdict, settings)
        assert [a.strategy for a in alternatives] == [StrategyKind.EXTEND_TIMELINE]

    def test_conflicting_goals_get_hybrid(self, conflicting_goals_profile):
        verdict = run_stages(conflicting_goals_profile).verdict
        assert select_strategies(verdict) == [StrategyKind.HYBRID]
        alternatives = generate_alternatives(conflicting_goals_profile, verdict)
        assert [a.label for a in alternatives] == ["Cut to 80 kg, then maintain"]

    def test_unfixable_plan_has_no_alternatives(self, make_profile):
        """Disabling every meal cannot be fixed by any strategy."""
        profile = make_profile(diet={"meals_enabled": frozenset()})
        verdict = run_stages(profile).verdict
        assert select_strategies(verdict) == []
        assert generate_alternatives(profile, verdict) == []
