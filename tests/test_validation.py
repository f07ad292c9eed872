"""Tests for blocking and warning rules."""

from dataclasses import replace

import pytest

from fitplan.config.settings import Settings
from fitplan.pipeline import run_stages
from fitplan.profiles.models import (
    AlcoholLevel,
    ConditionTag,
    DietType,
    Gender,
    GoalTag,
    Intensity,
    LimitationTag,
    OccupationClass,
    StressLevel,
    WorkoutLocation,
)
from fitplan.validation.models import (
    BLOCKING_CODES,
    RuleCode,
    Severity,
    StrategyKind,
    ValidationVerdict,
)
from fitplan.validation.rules import (
    RuleContext,
    check_absolute_minimum,
    check_below_bmr,
    check_pregnancy_deficit,
    lifestyle_factors,
)


def verdict_for(profile, settings=None):
    return run_stages(profile, settings).verdict


class TestRuleCodes:
    def test_blocking_codes_are_errors(self):
        assert len(BLOCKING_CODES) == 11
        for code in RuleCode:
            expected = Severity.ERROR if code in BLOCKING_CODES else Severity.WARNING
            assert code.severity == expected

    def test_codes_are_stable_strings(self):
        assert RuleCode.BELOW_BMR == "BELOW_BMR"
        assert RuleCode("AGGRESSIVE_TIMELINE") is RuleCode.AGGRESSIVE_TIMELINE

    def test_can_proceed_follows_errors(self, maintenance_profile):
        assert ValidationVerdict().can_proceed is True
        blocked = verdict_for(replace(
            maintenance_profile,
            diet=replace(maintenance_profile.diet, meals_enabled=frozenset()),
        ))
        assert blocked.can_proceed is False


class TestBaselines:
    """Tests for the reference scenarios."""

    def test_healthy_maintenance_is_clean(self, maintenance_profile):
        verdict = verdict_for(maintenance_profile)
        assert verdict.can_proceed
        assert verdict.errors == ()
        assert verdict.warnings == ()

    def test_aggressive_cut_warns(self, aggressive_cut_profile):
        verdict = verdict_for(aggressive_cut_profile)
        assert verdict.can_proceed
        assert verdict.codes == [
            RuleCode.AGGRESSIVE_TIMELINE,
            RuleCode.DEFICIT_LIMITED_FOR_SAFETY,
            RuleCode.LOW_DIET_READINESS,
        ]
        hint = verdict.warnings[0].alternatives[0]
        assert hint.strategy == StrategyKind.EXTEND_TIMELINE
        assert hint.changed_fields == {"timeline_weeks": 28}

    def test_below_bmr_blocks(self, below_bmr_profile):
        verdict = verdict_for(below_bmr_profile)
        assert not verdict.can_proceed
        assert verdict.codes == [RuleCode.BELOW_BMR, RuleCode.BELOW_ABSOLUTE_MINIMUM]

    def test_blocked_verdict_has_no_warnings(self, below_bmr_profile):
        """Warnings are skipped once any blocking rule fires."""
        smoker = replace(
            below_bmr_profile,
            lifestyle=replace(below_bmr_profile.lifestyle, tobacco=True),
        )
        verdict = verdict_for(smoker)
        assert verdict.errors
        assert verdict.warnings == ()

    def test_pregnancy_overrides_deficit(self, pregnant_loss_profile):
        verdict = verdict_for(pregnant_loss_profile)
        assert verdict.can_proceed
        assert verdict.has(RuleCode.PREGNANCY_CALORIE_OVERRIDE)
        assert not verdict.has(RuleCode.AGGRESSIVE_TIMELINE)


class TestBlockingRules:
    """One test per blocking code."""

    def test_essential_body_fat(self, make_profile):
        profile = make_profile(
            target_weight_kg=78.0, timeline_weeks=10, body={"body_fat_pct": 4.5}
        )
        assert verdict_for(profile).has(RuleCode.AT_ESSENTIAL_BODY_FAT)

    def test_essential_body_fat_ignored_when_not_cutting(self, make_profile):
        profile = make_profile(body={"body_fat_pct": 4.5})
        assert not verdict_for(profile).has(RuleCode.AT_ESSENTIAL_BODY_FAT)

    def test_underweight_target(self, make_profile):
        verdict = verdict_for(make_profile(target_weight_kg=55.0, timeline_weeks=60))
        assert verdict.codes == [RuleCode.TARGET_BMI_UNDERWEIGHT]
        hint = verdict.errors[0].alternatives[0]
        assert hint.strategy == StrategyKind.ADJUST_TARGET
        assert hint.changed_fields["target_weight_kg"] == pytest.approx(59.9)

    def test_extreme_rate(self, make_profile):
        verdict = verdict_for(make_profile(target_weight_kg=70.0, timeline_weeks=5))
        assert verdict.has(RuleCode.EXTREMELY_UNREALISTIC)

    def test_extreme_rate_uses_configured_bracket(self, make_profile):
        settings = Settings()
        settings.rates.brackets[0].block_pct = 1.0
        profile = make_profile(
            occupation=OccupationClass.HEAVY_LABOR, target_weight_kg=72.0, timeline_weeks=8
        )
        assert not verdict_for(profile).has(RuleCode.EXTREMELY_UNREALISTIC)
        assert verdict_for(profile, settings).has(RuleCode.EXTREMELY_UNREALISTIC)

    def test_below_bmr_hint_always_extends(self, make_profile):
        """A slow cut that still lands under BMR is offered a longer plan."""
        profile = make_profile(target_weight_kg=76.0, timeline_weeks=7)
        verdict = verdict_for(profile)
        assert verdict.codes == [RuleCode.BELOW_BMR]
        hint = verdict.errors[0].alternatives[0]
        assert hint.strategy == StrategyKind.EXTEND_TIMELINE
        assert hint.changed_fields == {"timeline_weeks": 8}

    def test_small_older_maintainer_can_proceed(self, make_profile):
        """Calorie minimums only guard a deficit."""
        profile = make_profile(
            age=70,
            gender=Gender.FEMALE,
            height_cm=152.0,
            weight_kg=47.0,
            activity={"workout_frequency_per_week": 0},
        )
        stages = run_stages(profile)
        assert stages.plan.target_calories < 1200
        assert stages.verdict.can_proceed
        assert not stages.verdict.has(RuleCode.BELOW_ABSOLUTE_MINIMUM)

    def test_small_older_gainer_can_proceed(self, make_profile):
        profile = make_profile(
            age=70,
            gender=Gender.FEMALE,
            height_cm=152.0,
            weight_kg=47.0,
            target_weight_kg=48.0,
            timeline_weeks=10,
            activity={"workout_frequency_per_week": 0},
        )
        stages = run_stages(profile)
        assert stages.plan.target_calories < 1200
        assert stages.verdict.can_proceed

    def test_calorie_minimums_skip_maintenance(self, maintenance_profile):
        stages = run_stages(maintenance_profile)
        starved = replace(stages.plan, target_calories=stages.metrics.bmr - 400)
        ctx = RuleContext(
            profile=maintenance_profile,
            raw=stages.metrics,
            plan=starved,
            settings=Settings(),
        )
        assert starved.target_calories < 1500
        assert check_below_bmr(ctx) is None
        assert check_absolute_minimum(ctx) is None

    def test_insufficient_exercise(self, make_profile):
        profile = make_profile(
            target_weight_kg=72.0, timeline_weeks=8, activity={"workout_frequency_per_week": 1}
        )
        verdict = verdict_for(profile)
        assert verdict.codes == [
            RuleCode.BELOW_BMR,
            RuleCode.BELOW_ABSOLUTE_MINIMUM,
            RuleCode.INSUFFICIENT_EXERCISE,
        ]

    def test_no_meals(self, make_profile):
        profile = make_profile(diet={"meals_enabled": frozenset()})
        assert verdict_for(profile).codes == [RuleCode.NO_MEALS_ENABLED]

    def test_severe_sleep_with_aggressive_goal(self, aggressive_cut_profile):
        profile = replace(
            aggressive_cut_profile,
            lifestyle=replace(aggressive_cut_profile.lifestyle, sleep_hours=4.5),
        )
        assert verdict_for(profile).codes == [RuleCode.SEVERE_SLEEP_DEPRIVATION]

    def test_severe_sleep_at_maintenance_only_warns(self, make_profile):
        verdict = verdict_for(make_profile(lifestyle={"sleep_hours": 4.5}))
        assert verdict.can_proceed
        assert verdict.has(RuleCode.INSUFFICIENT_SLEEP)

    def test_excessive_training_volume(self, make_profile):
        profile = make_profile(activity={"workout_frequency_per_week": 7, "session_minutes": 150})
        assert verdict_for(profile).has(RuleCode.EXCESSIVE_TRAINING_VOLUME)

    def test_very_active_gets_higher_volume_limit(self, make_profile):
        profile = make_profile(
            occupation=OccupationClass.VERY_ACTIVE,
            activity={"workout_frequency_per_week": 7, "session_minutes": 150},
        )
        assert not verdict_for(profile).has(RuleCode.EXCESSIVE_TRAINING_VOLUME)

    def test_pregnancy_deficit_rule(self, pregnant_loss_profile):
        """The rule catches a deficit if one ever reaches validation."""
        stages = run_stages(pregnant_loss_profile)
        in_deficit = replace(stages.plan, target_calories=stages.plan.true_tdee - 300)
        ctx = RuleContext(
            profile=pregnant_loss_profile,
            raw=stages.metrics,
            plan=in_deficit,
            settings=Settings(),
        )
        result = check_pregnancy_deficit(ctx)
        assert result is not None
        assert result.code == RuleCode.UNSAFE_PREGNANCY_BREASTFEEDING

    def test_conflicting_goals(self, make_profile):
        profile = make_profile(goals=(GoalTag.WEIGHT_LOSS, GoalTag.WEIGHT_GAIN))
        verdict = verdict_for(profile)
        assert verdict.codes == [RuleCode.CONFLICTING_GOALS]
        assert verdict.errors[0].alternatives[0].strategy == StrategyKind.HYBRID


class TestWarningRules:
    """Tests for non-blocking warnings."""

    def test_insufficient_sleep(self, make_profile):
        assert verdict_for(make_profile(lifestyle={"sleep_hours": 6.5})).has(
            RuleCode.INSUFFICIENT_SLEEP
        )

    def test_medical_supervision_needs_aggressive_goal(self, make_profile, aggressive_cut_profile):
        diabetic = frozenset({ConditionTag.DIABETES_TYPE2})
        assert not verdict_for(make_profile(lifestyle={"medical_conditions": diabetic})).has(
            RuleCode.MEDICAL_SUPERVISION
        )
        profile = replace(
            aggressive_cut_profile,
            lifestyle=replace(aggressive_cut_profile.lifestyle, medical_conditions=diabetic),
        )
        assert verdict_for(profile).has(RuleCode.MEDICAL_SUPERVISION)

    def test_heart_disease(self, make_profile):
        profile = make_profile(
            lifestyle={"medical_conditions": frozenset({ConditionTag.HEART_DISEASE})}
        )
        verdict = verdict_for(profile)
        assert verdict.has(RuleCode.HEART_DISEASE_CLEARANCE)
        assert not verdict.has(RuleCode.MEDICAL_SUPERVISION)

    def test_body_recomp(self, make_profile):
        goals = (GoalTag.MUSCLE_GAIN, GoalTag.WEIGHT_LOSS)
        assert verdict_for(make_profile(goals=goals)).has(RuleCode.BODY_RECOMP_POSSIBLE)
        trained_lean = make_profile(
            goals=goals,
            body={"body_fat_pct": 15.0},
            activity={"experience_years": 5.0},
        )
        assert verdict_for(trained_lean).has(RuleCode.BODY_RECOMP_SLOW)

    def test_alcohol_only_when_heavy_and_aggressive(self, aggressive_cut_profile):
        def with_alcohol(level):
            return replace(
                aggressive_cut_profile,
                lifestyle=replace(aggressive_cut_profile.lifestyle, alcohol=level),
            )

        assert verdict_for(with_alcohol(AlcoholLevel.REGULAR)).has(RuleCode.ALCOHOL_IMPACT)
        assert not verdict_for(with_alcohol(AlcoholLevel.OCCASIONAL)).has(RuleCode.ALCOHOL_IMPACT)

    def test_tobacco(self, make_profile):
        assert verdict_for(make_profile(lifestyle={"tobacco": True})).has(RuleCode.TOBACCO_IMPACT)

    def test_teen_weight_loss(self, make_profile):
        profile = make_profile(age=16, target_weight_kg=78.0, timeline_weeks=10)
        verdict = verdict_for(profile)
        assert verdict.has(RuleCode.TEEN_WEIGHT_LOSS)
        assert not verdict.has(RuleCode.TEEN_ATHLETE_RESTRICTION)

    def test_teen_athlete_restriction(self, make_profile):
        """Very active teens get the athlete notice instead."""
        profile = make_profile(
            age=16,
            occupation=OccupationClass.VERY_ACTIVE,
            target_weight_kg=78.0,
            timeline_weeks=10,
        )
        verdict = verdict_for(profile)
        assert verdict.has(RuleCode.TEEN_ATHLETE_RESTRICTION)
        assert not verdict.has(RuleCode.TEEN_WEIGHT_LOSS)

    def test_deficit_limit_standard(self, aggressive_cut_profile):
        verdict = verdict_for(aggressive_cut_profile)
        result = verdict.warnings[verdict.codes.index(RuleCode.DEFICIT_LIMITED_FOR_SAFETY)]
        assert "20% limit" in result.message
        weeks = result.alternatives[0].changed_fields["timeline_weeks"]
        assert weeks > aggressive_cut_profile.body.timeline_weeks

    def test_deficit_limit_high_stress(self, make_profile):
        """High stress lowers the advised deficit to 15%."""
        relaxed = make_profile(target_weight_kg=76.0, timeline_weeks=10)
        plan = run_stages(relaxed).plan
        assert plan.deficit_fraction == pytest.approx(440 / plan.true_tdee)
        assert not verdict_for(relaxed).has(RuleCode.DEFICIT_LIMITED_FOR_SAFETY)

        stressed = make_profile(
            target_weight_kg=76.0,
            timeline_weeks=10,
            lifestyle={"stress": StressLevel.HIGH},
        )
        verdict = verdict_for(stressed)
        assert verdict.can_proceed
        assert verdict.codes == [RuleCode.DEFICIT_LIMITED_FOR_SAFETY]
        result = verdict.warnings[0]
        assert "high stress" in result.message
        assert "Capped target: 1989 kcal/day" in result.recommendations
        assert result.alternatives[0].changed_fields == {"timeline_weeks": 13}

    def test_deficit_limit_medical_conditions(self, make_profile):
        profile = make_profile(
            target_weight_kg=76.0,
            timeline_weeks=10,
            lifestyle={"medical_conditions": frozenset({ConditionTag.HYPERTENSION})},
        )
        verdict = verdict_for(profile)
        result = verdict.warnings[verdict.codes.index(RuleCode.DEFICIT_LIMITED_FOR_SAFETY)]
        assert "medical conditions" in result.message

    def test_elderly(self, make_profile):
        assert verdict_for(make_profile(age=76)).has(RuleCode.ELDERLY_USER)

    def test_menopause(self, make_profile):
        profile = make_profile(age=50, gender=Gender.FEMALE, height_cm=165.0, weight_kg=70.0)
        assert verdict_for(profile).has(RuleCode.MENOPAUSE_AGE_RANGE)

    def test_concurrent_training(self, make_profile):
        profile = make_profile(goals=(GoalTag.MUSCLE_GAIN, GoalTag.ENDURANCE))
        assert verdict_for(profile).has(RuleCode.CONCURRENT_TRAINING_INTERFERENCE)

    def test_obesity_rates(self, make_profile):
        profile = make_profile(weight_kg=120.0, target_weight_kg=110.0, timeline_weeks=24)
        verdict = verdict_for(profile)
        assert verdict.can_proceed
        assert verdict.has(RuleCode.OBESITY_ADJUSTED_RATES)

    def test_no_exercise(self, make_profile):
        profile = make_profile(
            target_weight_kg=78.0, timeline_weeks=10, activity={"workout_frequency_per_week": 0}
        )
        verdict = verdict_for(profile)
        assert verdict.has(RuleCode.NO_EXERCISE_PLANNED)
        hint = verdict.warnings[verdict.codes.index(RuleCode.NO_EXERCISE_PLANNED)].alternatives[0]
        assert hint.changed_fields == {"workout_frequency_per_week": 2}

    def test_high_training_volume(self, make_profile):
        profile = make_profile(
            activity={
                "workout_frequency_per_week": 6,
                "session_minutes": 130,
                "intensity": Intensity.ADVANCED,
            }
        )
        verdict = verdict_for(profile)
        assert verdict.can_proceed
        assert verdict.has(RuleCode.HIGH_TRAINING_VOLUME)

    def test_limited_equipment(self, make_profile):
        profile = make_profile(
            goals=(GoalTag.MUSCLE_GAIN,),
            activity={"location": WorkoutLocation.HOME},
        )
        assert verdict_for(profile).has(RuleCode.LIMITED_EQUIPMENT_MUSCLE_GAIN)
        equipped = make_profile(
            goals=(GoalTag.MUSCLE_GAIN,),
            activity={"location": WorkoutLocation.HOME, "equipment": frozenset({"dumbbells"})},
        )
        assert not verdict_for(equipped).has(RuleCode.LIMITED_EQUIPMENT_MUSCLE_GAIN)

    def test_physical_limitations(self, make_profile):
        profile = make_profile(
            lifestyle={"physical_limitations": frozenset({LimitationTag.KNEE_ISSUES})},
            activity={"intensity": Intensity.ADVANCED},
        )
        assert verdict_for(profile).has(RuleCode.PHYSICAL_LIMITATION_INTENSITY)

    def test_vegan_protein(self, make_profile):
        profile = make_profile(
            weight_kg=100.0,
            diet={"diet_type": DietType.VEGAN, "allergies": ("Soy",)},
        )
        assert verdict_for(profile).has(RuleCode.LIMITED_VEGAN_PROTEIN)

    def test_medications(self, make_profile):
        profile = make_profile(lifestyle={"medications": ("Levothyroxine 50mcg",)})
        assert verdict_for(profile).has(RuleCode.MEDICATION_EFFECTS)

    def test_excessive_gain(self, make_profile):
        verdict = verdict_for(make_profile(target_weight_kg=86.0, timeline_weeks=6))
        assert verdict.can_proceed
        result = verdict.warnings[verdict.codes.index(RuleCode.EXCESSIVE_GAIN_RATE)]
        assert result.alternatives[0].changed_fields == {"timeline_weeks": 15}

    def test_multiple_lifestyle_factors(self, make_profile):
        profile = make_profile(lifestyle={"tobacco": True, "stress": StressLevel.HIGH})
        assert lifestyle_factors(profile) == ["tobacco use", "high stress"]
        assert verdict_for(profile).has(RuleCode.MULTIPLE_LIFESTYLE_FACTORS)

    def test_waist_hip_ratio(self, make_profile):
        profile = make_profile(body={"waist_cm": 95.0, "hip_cm": 100.0})
        assert verdict_for(profile).has(RuleCode.ELEVATED_WAIST_HIP_RATIO)
        assert not verdict_for(make_profile(body={"waist_cm": 95.0})).has(
            RuleCode.ELEVATED_WAIST_HIP_RATIO
        )
