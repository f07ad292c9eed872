"""Blocking and warning rule tables.

Each rule is a plain function taking a RuleContext and returning a
RuleResult or None. The engine runs BLOCKING_RULES in order, and
WARNING_RULES only when no blocking rule fired.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Optional

from fitplan.config.settings import RateBracket, Settings
from fitplan.planning.goal import KCAL_PER_KG
from fitplan.planning.models import AdjustedPlan, Direction
from fitplan.profiles.body_calc import RawMetrics, calculate_bmi
from fitplan.profiles.models import (
    ActivityLevel,
    AlcoholLevel,
    ConditionTag,
    DietType,
    Gender,
    GoalTag,
    Intensity,
    LimitationTag,
    OccupationClass,
    StressLevel,
    UserProfile,
    WorkoutLocation,
)
from fitplan.validation.models import (
    AlternativeRef,
    RuleCode,
    RuleResult,
    Severity,
    StrategyKind,
)

ESSENTIAL_BODY_FAT_PCT = {
    Gender.MALE: 5.0,
    Gender.FEMALE: 12.0,
    Gender.OTHER: 8.5,
}

ABSOLUTE_MINIMUM_KCAL = {
    Gender.MALE: 1500,
    Gender.FEMALE: 1200,
    Gender.OTHER: 1350,
}

UNDERWEIGHT_BMI = 17.5
HEALTHY_MIN_BMI = 18.5

SEVERE_SLEEP_HOURS = 5.0
OPTIMAL_SLEEP_HOURS = 7.0
LOW_SLEEP_HOURS = 6.0

MAX_WEEKLY_TRAINING_HOURS = 15.0
MAX_WEEKLY_TRAINING_HOURS_VERY_ACTIVE = 20.0
HIGH_TRAINING_HOURS = 12.0

MIN_SESSIONS_FOR_AGGRESSIVE_LOSS = 2
LOW_DIET_READINESS = 40
ELDERLY_AGE = 75
ADULT_AGE = 18
TEEN_MIN_AGE = 13
OBESITY_CLASS_II_BMI = 35.0
RECOMP_NOVICE_YEARS = 2.0
RECOMP_BODY_FAT_PCT = 20.0
VEGAN_PROTEIN_LIMIT_G = 150
LEAN_GAIN_PCT = 0.5

HIGH_RISK_CONDITIONS = frozenset(
    {
        ConditionTag.DIABETES_TYPE1,
        ConditionTag.DIABETES_TYPE2,
        ConditionTag.HEART_DISEASE,
        ConditionTag.HYPERTENSION,
    }
)

HIGH_IMPACT_LIMITATIONS = frozenset(
    {
        LimitationTag.KNEE_ISSUES,
        LimitationTag.BACK_PAIN,
        LimitationTag.ARTHRITIS,
        LimitationTag.JOINT_PROBLEMS,
    }
)

VEGAN_PROTEIN_SOURCES = ("soy", "tofu", "legumes", "beans", "nuts", "peanuts", "seeds")

METABOLISM_MEDICATIONS = (
    "levothyroxine",
    "synthroid",
    "antidepressant",
    "beta-blocker",
    "prednisone",
    "insulin",
)

HEAVY_DRINKING = frozenset({AlcoholLevel.REGULAR, AlcoholLevel.HEAVY})

ELEVATED_WHR = {
    Gender.MALE: 0.90,
    Gender.FEMALE: 0.85,
    Gender.OTHER: 0.875,
}

LIFESTYLE_FACTOR_IMPACT = 0.20
LIFESTYLE_IMPACT_CAP = 0.60

MAX_DEFICIT_FRACTION = 0.20
CONSERVATIVE_DEFICIT_FRACTION = 0.15


@dataclass(frozen=True)
class RuleContext:
    """Everything a rule may look at for one evaluation."""

    profile: UserProfile
    raw: RawMetrics
    plan: AdjustedPlan
    settings: Settings

    @property
    def weight_kg(self) -> float:
        return self.profile.weight_kg

    @property
    def pregnancy_override(self) -> bool:
        """True when a requested loss was replaced by maintenance calories."""
        return (
            self.profile.lifestyle.is_pregnant_or_breastfeeding
            and self.plan.direction != Direction.GAIN
        )

    @property
    def is_cutting(self) -> bool:
        return self.plan.direction == Direction.LOSS and not self.pregnancy_override

    @property
    def is_gaining(self) -> bool:
        return self.plan.direction == Direction.GAIN

    @property
    def rate_kg(self) -> float:
        """Weekly rate the plan actually pursues."""
        if self.pregnancy_override:
            return 0.0
        return self.plan.required_weekly_rate_kg

    @property
    def rate_pct(self) -> float:
        return self.rate_kg / self.weight_kg * 100

    @property
    def is_aggressive(self) -> bool:
        return self.rate_pct > self.settings.rates.optimal_pct

    @property
    def bracket(self) -> RateBracket:
        return self.settings.rates.bracket_for(self.raw.bmi)

    @property
    def goals(self) -> frozenset[GoalTag]:
        return self.profile.goals.primary_goals

    @property
    def weight_difference_kg(self) -> float:
        return abs(self.profile.body.target_weight_kg - self.weight_kg)

    def weeks_at_pct(self, pct: float) -> int:
        """Weeks needed to cover the weight difference at pct % per week."""
        return max(1, math.ceil(self.weight_difference_kg / (self.weight_kg * pct / 100)))

    def extended_weeks(self, pct: float) -> int:
        """Timeline at pct % per week, always longer than the current one."""
        return max(self.weeks_at_pct(pct), self.profile.body.timeline_weeks + 1)


Rule = Callable[[RuleContext], Optional[RuleResult]]


def _error(code: RuleCode, message: str, recommendations=(), alternatives=()) -> RuleResult:
    return RuleResult(
        code=code,
        severity=Severity.ERROR,
        message=message,
        recommendations=tuple(recommendations),
        alternatives=tuple(alternatives),
    )


def _warning(code: RuleCode, message: str, recommendations=(), alternatives=()) -> RuleResult:
    return RuleResult(
        code=code,
        severity=Severity.WARNING,
        message=message,
        recommendations=tuple(recommendations),
        alternatives=tuple(alternatives),
    )


def _extend_timeline_ref(ctx: RuleContext) -> AlternativeRef:
    weeks = ctx.extended_weeks(ctx.settings.rates.optimal_pct)
    return AlternativeRef(
        strategy=StrategyKind.EXTEND_TIMELINE,
        changed_fields={"timeline_weeks": weeks},
        description=f"Extend to {weeks} weeks for a sustainable rate",
    )


# =============================================================================
# Blocking rules
# =============================================================================


def check_essential_body_fat(ctx: RuleContext) -> Optional[RuleResult]:
    if not ctx.is_cutting:
        return None
    body_fat = ctx.raw.body_fat.value
    minimum = ESSENTIAL_BODY_FAT_PCT[ctx.profile.gender]
    if body_fat >= minimum:
        return None
    return _error(
        RuleCode.AT_ESSENTIAL_BODY_FAT,
        f"Body fat ({body_fat:.1f}%) is below the essential minimum of {minimum:g}%",
        [
            "Essential fat is required for hormone production and organ function",
            "Switch to maintenance or a lean bulk instead",
        ],
    )


def check_target_bmi(ctx: RuleContext) -> Optional[RuleResult]:
    if not ctx.is_cutting:
        return None
    body = ctx.profile.body
    target_bmi = calculate_bmi(body.target_weight_kg, body.height_cm)
    if target_bmi >= UNDERWEIGHT_BMI:
        return None
    height_m = body.height_cm / 100
    min_safe = HEALTHY_MIN_BMI * height_m * height_m
    return _error(
        RuleCode.TARGET_BMI_UNDERWEIGHT,
        f"Target BMI ({target_bmi:.1f}) is clinically underweight",
        [
            f"Minimum healthy BMI: {HEALTHY_MIN_BMI}",
            f"Minimum healthy weight: {round(min_safe)} kg",
        ],
        [
            AlternativeRef(
                strategy=StrategyKind.ADJUST_TARGET,
                changed_fields={"target_weight_kg": round(min_safe, 1)},
                description=f"Set target weight to at least {round(min_safe)} kg",
            )
        ],
    )


def check_below_bmr(ctx: RuleContext) -> Optional[RuleResult]:
    if not ctx.is_cutting:
        return None
    target = ctx.plan.target_calories
    bmr = ctx.raw.bmr
    if target >= bmr:
        return None
    return _error(
        RuleCode.BELOW_BMR,
        f"Target calories ({round(target)}) are below your BMR ({round(bmr)})",
        [
            "Extend the timeline to raise daily calories",
            "Add workouts to burn more energy",
            "Accept a slower, healthier rate",
        ],
        [
            _extend_timeline_ref(ctx),
            AlternativeRef(
                strategy=StrategyKind.ADD_EXERCISE,
                description="Increase weekly workout frequency",
            ),
        ],
    )


def check_absolute_minimum(ctx: RuleContext) -> Optional[RuleResult]:
    if not ctx.is_cutting:
        return None
    minimum = ABSOLUTE_MINIMUM_KCAL[ctx.profile.gender]
    target = ctx.plan.target_calories
    if target >= minimum:
        return None
    return _error(
        RuleCode.BELOW_ABSOLUTE_MINIMUM,
        f"Target ({round(target)}) is below the safe minimum of {minimum} kcal",
        ["Extend the timeline or reduce the deficit"],
        [_extend_timeline_ref(ctx)],
    )


def check_extreme_rate(ctx: RuleContext) -> Optional[RuleResult]:
    block_pct = ctx.bracket.block_pct
    if ctx.plan.direction == Direction.MAINTAIN or ctx.rate_pct <= block_pct:
        return None
    return _error(
        RuleCode.EXTREMELY_UNREALISTIC,
        f"Rate {ctx.rate_kg:.2f} kg/week exceeds {block_pct:g}% of body weight per week",
        ["Spread the change over more weeks"],
        [_extend_timeline_ref(ctx)],
    )


def check_insufficient_exercise(ctx: RuleContext) -> Optional[RuleResult]:
    frequency = ctx.profile.activity.workout_frequency_per_week
    if not (
        ctx.is_cutting
        and frequency < MIN_SESSIONS_FOR_AGGRESSIVE_LOSS
        and ctx.is_aggressive
        and ctx.plan.target_calories < ctx.raw.bmr
    ):
        return None
    return _error(
        RuleCode.INSUFFICIENT_EXERCISE,
        f"An aggressive goal with {frequency} workout(s)/week needs calories below BMR",
        [
            f"Current plan: {round(ctx.plan.target_calories)} kcal/day "
            f"(BMR {round(ctx.raw.bmr)})",
            "Train at least 3 times per week to create part of the deficit",
            "Or extend the timeline to reduce the daily deficit",
        ],
        [
            AlternativeRef(
                strategy=StrategyKind.ADD_EXERCISE,
                changed_fields={"workout_frequency_per_week": 3},
                description="Train 3 times per week",
            )
        ],
    )


def check_meals_enabled(ctx: RuleContext) -> Optional[RuleResult]:
    if ctx.profile.diet.meals_enabled:
        return None
    return _error(
        RuleCode.NO_MEALS_ENABLED,
        "At least one meal must be enabled to build a meal plan",
        ["Enable breakfast, lunch, dinner or snacks"],
    )


def check_severe_sleep(ctx: RuleContext) -> Optional[RuleResult]:
    sleep = ctx.profile.lifestyle.sleep_hours
    if sleep >= SEVERE_SLEEP_HOURS or not ctx.is_aggressive:
        return None
    return _error(
        RuleCode.SEVERE_SLEEP_DEPRIVATION,
        f"Sleep ({sleep:.1f}h) combined with an aggressive goal is unsafe",
        [
            "Severe sleep loss increases muscle loss and impairs recovery",
            "Improve sleep to 6+ hours or slow the rate",
        ],
        [_extend_timeline_ref(ctx)],
    )


def check_training_volume(ctx: RuleContext) -> Optional[RuleResult]:
    hours = ctx.profile.activity.weekly_hours
    limit = (
        MAX_WEEKLY_TRAINING_HOURS_VERY_ACTIVE
        if ctx.profile.demographics.occupation == OccupationClass.VERY_ACTIVE
        else MAX_WEEKLY_TRAINING_HOURS
    )
    if hours <= limit:
        return None
    return _error(
        RuleCode.EXCESSIVE_TRAINING_VOLUME,
        f"Training volume ({hours:.1f} h/week) exceeds safe limits",
        [
            f"Maximum for non-athletes: {limit:g} hours/week",
            "Reduce frequency or session duration",
        ],
    )


def check_pregnancy_deficit(ctx: RuleContext) -> Optional[RuleResult]:
    if not ctx.profile.lifestyle.is_pregnant_or_breastfeeding:
        return None
    if ctx.plan.target_calories >= ctx.plan.true_tdee:
        return None
    return _error(
        RuleCode.UNSAFE_PREGNANCY_BREASTFEEDING,
        "A calorie deficit during pregnancy or breastfeeding is not safe",
        ["Eat at maintenance or above", "Consult your doctor before dietary changes"],
    )


def check_conflicting_goals(ctx: RuleContext) -> Optional[RuleResult]:
    if not {GoalTag.WEIGHT_LOSS, GoalTag.WEIGHT_GAIN} <= ctx.goals:
        return None
    return _error(
        RuleCode.CONFLICTING_GOALS,
        "Cannot lose and gain weight at the same time",
        ["Choose weight loss or weight gain as the primary goal"],
        [
            AlternativeRef(
                strategy=StrategyKind.HYBRID,
                description="Cut first, then maintain or lean bulk",
            )
        ],
    )


BLOCKING_RULES: list[Rule] = [
    check_essential_body_fat,
    check_target_bmi,
    check_below_bmr,
    check_absolute_minimum,
    check_extreme_rate,
    check_insufficient_exercise,
    check_meals_enabled,
    check_severe_sleep,
    check_training_volume,
    check_pregnancy_deficit,
    check_conflicting_goals,
]


# =============================================================================
# Warning rules
# =============================================================================


def warn_aggressive_timeline(ctx: RuleContext) -> Optional[RuleResult]:
    if not ctx.is_cutting or ctx.rate_pct <= ctx.bracket.warn_pct:
        return None
    optimal_pct = ctx.settings.rates.optimal_pct
    optimal_kg = ctx.weight_kg * optimal_pct / 100
    return _warning(
        RuleCode.AGGRESSIVE_TIMELINE,
        f"Rate ({ctx.rate_kg:.2f} kg/week) is aggressive",
        [
            f"Recommended: {optimal_kg:.2f} kg/week for optimal results",
            "Faster loss increases muscle loss and metabolic adaptation",
        ],
        [_extend_timeline_ref(ctx)],
    )


def deficit_limit(profile: UserProfile) -> tuple[float, str]:
    """Largest deficit fraction advised for this profile, with the reason."""
    if profile.lifestyle.stress == StressLevel.HIGH:
        return CONSERVATIVE_DEFICIT_FRACTION, "high stress"
    if profile.lifestyle.medical_conditions:
        return CONSERVATIVE_DEFICIT_FRACTION, "medical conditions"
    return MAX_DEFICIT_FRACTION, "recommended safety limits"


def warn_deficit_limit(ctx: RuleContext) -> Optional[RuleResult]:
    if not ctx.is_cutting:
        return None
    cap, reason = deficit_limit(ctx.profile)
    deficit = ctx.plan.deficit_fraction
    if deficit <= cap:
        return None

    true_tdee = ctx.plan.true_tdee
    capped = max(round(true_tdee * (1 - cap)), round(ctx.raw.bmr))
    alternatives = []
    capped_rate_kg = (true_tdee - capped) * 7 / KCAL_PER_KG
    if capped_rate_kg > 0:
        weeks = max(
            math.ceil(ctx.weight_difference_kg / capped_rate_kg),
            ctx.profile.body.timeline_weeks + 1,
        )
        alternatives.append(
            AlternativeRef(
                strategy=StrategyKind.EXTEND_TIMELINE,
                changed_fields={"timeline_weeks": weeks},
                description=f"Extend to {weeks} weeks to keep the deficit at {cap:.0%}",
            )
        )
    return _warning(
        RuleCode.DEFICIT_LIMITED_FOR_SAFETY,
        f"Deficit of {deficit:.0%} is above the {cap:.0%} limit for {reason}",
        [
            f"Current target: {round(ctx.plan.target_calories)} kcal/day",
            f"Capped target: {capped} kcal/day",
            "A smaller deficit protects hormones and recovery",
        ],
        alternatives,
    )


def warn_insufficient_sleep(ctx: RuleContext) -> Optional[RuleResult]:
    sleep = ctx.profile.lifestyle.sleep_hours
    if sleep >= OPTIMAL_SLEEP_HOURS:
        return None
    impact = round((OPTIMAL_SLEEP_HOURS - sleep) * 10)
    return _warning(
        RuleCode.INSUFFICIENT_SLEEP,
        f"Sleep {sleep:g}h/night; optimal is 7-9h",
        [f"Fat loss about {impact}% slower", "Poor recovery and increased hunger"],
    )


def warn_medical_supervision(ctx: RuleContext) -> Optional[RuleResult]:
    present = ctx.profile.lifestyle.medical_conditions & HIGH_RISK_CONDITIONS
    if not present or not ctx.is_aggressive:
        return None
    names = ", ".join(sorted(c.value for c in present))
    return _warning(
        RuleCode.MEDICAL_SUPERVISION,
        f"Medical condition detected: {names}",
        ["Consult your doctor before starting", "Monitor health markers regularly"],
    )


def warn_heart_disease(ctx: RuleContext) -> Optional[RuleResult]:
    if ConditionTag.HEART_DISEASE not in ctx.profile.lifestyle.medical_conditions:
        return None
    return _warning(
        RuleCode.HEART_DISEASE_CLEARANCE,
        "Heart disease detected: medical clearance required before starting",
        [
            "Get doctor approval before beginning exercise",
            "Monitor heart rate during all sessions",
            "Intensity capped at intermediate",
        ],
    )


def warn_body_recomp(ctx: RuleContext) -> Optional[RuleResult]:
    if not {GoalTag.MUSCLE_GAIN, GoalTag.WEIGHT_LOSS} <= ctx.goals:
        return None
    novice = ctx.profile.activity.experience_years < RECOMP_NOVICE_YEARS
    overweight = ctx.raw.body_fat.value > RECOMP_BODY_FAT_PCT
    if novice or overweight:
        return _warning(
            RuleCode.BODY_RECOMP_POSSIBLE,
            "Body recomposition is possible",
            [
                "Eat near maintenance with very high protein (2.4 g/kg)",
                "Progressive strength training 4-5x/week",
            ],
        )
    return _warning(
        RuleCode.BODY_RECOMP_SLOW,
        "Body recomposition will be very slow",
        ["Cut to goal weight first, then bulk", "Or accept very slow recomposition"],
    )


def warn_alcohol(ctx: RuleContext) -> Optional[RuleResult]:
    if ctx.profile.lifestyle.alcohol not in HEAVY_DRINKING or not ctx.is_aggressive:
        return None
    return _warning(
        RuleCode.ALCOHOL_IMPACT,
        "Alcohol will slow progress 10-15%",
        ["Limit to 1-2 drinks per week"],
    )


def warn_tobacco(ctx: RuleContext) -> Optional[RuleResult]:
    if not ctx.profile.lifestyle.tobacco:
        return None
    return _warning(
        RuleCode.TOBACCO_IMPACT,
        "Smoking reduces cardio capacity by roughly 20-30%",
        ["Consider quitting", "Start with lower-intensity cardio"],
    )


def is_teen_athlete(ctx: RuleContext) -> bool:
    return (
        TEEN_MIN_AGE <= ctx.profile.age < ADULT_AGE
        and ctx.plan.activity_level == ActivityLevel.EXTREME
    )


def warn_teen_athlete(ctx: RuleContext) -> Optional[RuleResult]:
    if not ctx.is_cutting or not is_teen_athlete(ctx):
        return None
    return _warning(
        RuleCode.TEEN_ATHLETE_RESTRICTION,
        "Teen athletes should not restrict calories during growth",
        [
            "Growth plates stay open until about 18",
            "Training and development both need fuel",
            "Eat at maintenance or in a surplus",
        ],
    )


def warn_teen_weight_loss(ctx: RuleContext) -> Optional[RuleResult]:
    if ctx.profile.age >= ADULT_AGE or not ctx.is_cutting or is_teen_athlete(ctx):
        return None
    return _warning(
        RuleCode.TEEN_WEIGHT_LOSS,
        "Calorie restriction during growth needs care",
        [
            "Growth and development need adequate energy",
            "Prefer maintenance calories with more activity",
            "Involve a parent or doctor",
        ],
    )


def warn_elderly(ctx: RuleContext) -> Optional[RuleResult]:
    if ctx.profile.age < ELDERLY_AGE:
        return None
    return _warning(
        RuleCode.ELDERLY_USER,
        f"Age {ELDERLY_AGE}+ requires special considerations for safe exercise",
        [
            "Consult your doctor before starting",
            "Resistance training is critical for bone density",
            "Include balance work to prevent falls",
        ],
    )


def warn_menopause(ctx: RuleContext) -> Optional[RuleResult]:
    if ctx.profile.gender != Gender.FEMALE or not 45 <= ctx.profile.age <= 55:
        return None
    return _warning(
        RuleCode.MENOPAUSE_AGE_RANGE,
        "Potential perimenopause or menopause: special considerations apply",
        [
            "Resistance training 3-4x/week for bone density",
            "Higher protein for muscle preservation",
            "Timeline may need to be 10-15% longer",
        ],
    )


def warn_concurrent_training(ctx: RuleContext) -> Optional[RuleResult]:
    if not {GoalTag.MUSCLE_GAIN, GoalTag.ENDURANCE} <= ctx.goals:
        return None
    return _warning(
        RuleCode.CONCURRENT_TRAINING_INTERFERENCE,
        "Cardio plus muscle building: interference may slow progress",
        [
            "Prioritize one goal for faster results",
            "Do strength first, cardio after",
            "Limit cardio to 2-3 moderate sessions per week",
        ],
    )


def warn_obesity_rates(ctx: RuleContext) -> Optional[RuleResult]:
    if ctx.raw.bmi < OBESITY_CLASS_II_BMI or not ctx.is_cutting:
        return None
    max_rate = ctx.weight_kg * ctx.bracket.block_pct / 100
    return _warning(
        RuleCode.OBESITY_ADJUSTED_RATES,
        "Higher BMI allows faster initial weight loss",
        [
            f"Up to {max_rate:.2f} kg/week is tolerated at your BMI",
            "The rate will slow naturally as weight comes down",
            "Consider medical supervision",
        ],
    )


def warn_no_exercise(ctx: RuleContext) -> Optional[RuleResult]:
    if ctx.profile.activity.workout_frequency_per_week > 0 or not ctx.is_cutting:
        return None
    return _warning(
        RuleCode.NO_EXERCISE_PLANNED,
        "No exercise planned: weight loss relies entirely on diet",
        ["Add at least 2 resistance sessions per week to preserve muscle"],
        [
            AlternativeRef(
                strategy=StrategyKind.ADD_EXERCISE,
                changed_fields={"workout_frequency_per_week": 2},
                description="Train 2 times per week",
            )
        ],
    )


def warn_high_training_volume(ctx: RuleContext) -> Optional[RuleResult]:
    activity = ctx.profile.activity
    hours = activity.weekly_hours
    if hours <= HIGH_TRAINING_HOURS or activity.intensity != Intensity.ADVANCED:
        return None
    return _warning(
        RuleCode.HIGH_TRAINING_VOLUME,
        f"High volume ({hours:.1f} h/week) increases overtraining risk",
        ["Sleep 8-9 hours", "Include 1-2 full rest days", "Consider periodization"],
    )


def warn_low_diet_readiness(ctx: RuleContext) -> Optional[RuleResult]:
    score = ctx.raw.diet_readiness_score
    if score >= LOW_DIET_READINESS or not ctx.is_aggressive:
        return None
    return _warning(
        RuleCode.LOW_DIET_READINESS,
        f"Low diet readiness score ({score}/100) with an aggressive goal",
        [
            "Build habits for 4 weeks before the deficit",
            "Or reduce goal aggressiveness",
        ],
    )


def warn_limited_equipment(ctx: RuleContext) -> Optional[RuleResult]:
    activity = ctx.profile.activity
    if (
        GoalTag.MUSCLE_GAIN not in ctx.goals
        or activity.location != WorkoutLocation.HOME
        or activity.equipment
    ):
        return None
    return _warning(
        RuleCode.LIMITED_EQUIPMENT_MUSCLE_GAIN,
        "Building muscle at home with no equipment is challenging",
        [
            "Add dumbbells, resistance bands or a pull-up bar",
            "Or focus on calisthenics progressions",
        ],
    )


def warn_physical_limitations(ctx: RuleContext) -> Optional[RuleResult]:
    limitations = ctx.profile.lifestyle.physical_limitations
    if not limitations & HIGH_IMPACT_LIMITATIONS:
        return None
    if ctx.profile.activity.intensity != Intensity.ADVANCED:
        return None
    return _warning(
        RuleCode.PHYSICAL_LIMITATION_INTENSITY,
        "Physical limitations detected with advanced intensity selected",
        [
            "Use intermediate intensity",
            "Focus on low-impact exercises and proper form",
        ],
    )


def warn_vegan_protein(ctx: RuleContext) -> Optional[RuleResult]:
    diet = ctx.profile.diet
    if diet.diet_type != DietType.VEGAN or ctx.plan.protein_g <= VEGAN_PROTEIN_LIMIT_G:
        return None
    allergic = any(
        source in allergy.lower()
        for allergy in diet.allergies
        for source in VEGAN_PROTEIN_SOURCES
    )
    if not allergic:
        return None
    return _warning(
        RuleCode.LIMITED_VEGAN_PROTEIN,
        "Limited vegan protein sources due to allergies",
        [
            f"Target protein ({round(ctx.plan.protein_g)} g) may be difficult",
            "Consider pea or rice protein powder",
            "Focus on quinoa, hemp and chia",
        ],
    )


def warn_medications(ctx: RuleContext) -> Optional[RuleResult]:
    matched = [
        med
        for med in ctx.profile.lifestyle.medications
        if any(known in med.lower() for known in METABOLISM_MEDICATIONS)
    ]
    if not matched:
        return None
    return _warning(
        RuleCode.MEDICATION_EFFECTS,
        "Medications may affect metabolism and weight management",
        [
            f"Discuss the plan with your prescribing doctor ({', '.join(matched)})",
            "Dosages may need adjustment as weight changes",
        ],
    )


def warn_excessive_gain(ctx: RuleContext) -> Optional[RuleResult]:
    if not ctx.is_gaining or ctx.rate_pct <= ctx.settings.rates.gain_warning_pct:
        return None
    lean_kg = ctx.weight_kg * LEAN_GAIN_PCT / 100
    weeks = ctx.extended_weeks(LEAN_GAIN_PCT)
    return _warning(
        RuleCode.EXCESSIVE_GAIN_RATE,
        f"Gain rate ({ctx.rate_kg:.2f} kg/week) will be mostly fat",
        [f"Lean gain rate: {lean_kg:.2f} kg/week"],
        [
            AlternativeRef(
                strategy=StrategyKind.EXTEND_TIMELINE,
                changed_fields={"timeline_weeks": weeks},
                description=f"Extend to {weeks} weeks for a lean gain",
            )
        ],
    )


def lifestyle_factors(profile: UserProfile) -> list[str]:
    """Names of the habits that slow progress."""
    lifestyle = profile.lifestyle
    factors = []
    if lifestyle.sleep_hours < LOW_SLEEP_HOURS:
        factors.append("low sleep")
    if lifestyle.tobacco:
        factors.append("tobacco use")
    if lifestyle.alcohol in HEAVY_DRINKING:
        factors.append("alcohol consumption")
    if lifestyle.stress == StressLevel.HIGH:
        factors.append("high stress")
    return factors


def warn_multiple_lifestyle_factors(ctx: RuleContext) -> Optional[RuleResult]:
    factors = lifestyle_factors(ctx.profile)
    if len(factors) < 2:
        return None
    impact = min(len(factors) * LIFESTYLE_FACTOR_IMPACT, LIFESTYLE_IMPACT_CAP)
    return _warning(
        RuleCode.MULTIPLE_LIFESTYLE_FACTORS,
        f"{len(factors)} lifestyle factors will significantly impact results",
        [
            f"Factors detected: {', '.join(factors)}",
            f"Timeline may extend by up to {impact:.0%}",
            "Fix one habit at a time, starting with sleep",
        ],
    )


def warn_waist_hip_ratio(ctx: RuleContext) -> Optional[RuleResult]:
    ratio = ctx.raw.waist_hip_ratio
    if ratio is None:
        return None
    limit = ELEVATED_WHR[ctx.profile.gender]
    if ratio <= limit:
        return None
    return _warning(
        RuleCode.ELEVATED_WAIST_HIP_RATIO,
        f"Waist-to-hip ratio ({ratio:.2f}) is above {limit:.2f}",
        ["Abdominal fat raises cardiometabolic risk", "Combine cardio with strength work"],
    )


def warn_pregnancy_override(ctx: RuleContext) -> Optional[RuleResult]:
    if not ctx.profile.lifestyle.is_pregnant_or_breastfeeding:
        return None
    if ctx.plan.target_calories == ctx.plan.base.target_calories:
        return None
    return _warning(
        RuleCode.PREGNANCY_CALORIE_OVERRIDE,
        f"Calories set to {round(ctx.plan.target_calories)} kcal for pregnancy or breastfeeding",
        ["Weight loss goals are paused", "Consult your doctor before dietary changes"],
    )


WARNING_RULES: list[Rule] = [
    warn_aggressive_timeline,
    warn_deficit_limit,
    warn_insufficient_sleep,
    warn_medical_supervision,
    warn_heart_disease,
    warn_body_recomp,
    warn_alcohol,
    warn_tobacco,
    warn_teen_athlete,
    warn_teen_weight_loss,
    warn_elderly,
    warn_menopause,
    warn_concurrent_training,
    warn_obesity_rates,
    warn_no_exercise,
    warn_high_training_volume,
    warn_low_diet_readiness,
    warn_limited_equipment,
    warn_physical_limitations,
    warn_vegan_protein,
    warn_medications,
    warn_excessive_gain,
    warn_multiple_lifestyle_factors,
    warn_waist_hip_ratio,
    warn_pregnancy_override,
]
