"""Body composition and metabolic metrics calculator.

Turns a UserProfile into the base physiological quantities (BMR, base
TDEE, BMI, body fat, heart-rate zones, hydration, readiness scores) that
every later stage builds on. Nothing here depends on the weight goal.

Uses Mifflin-St Jeor equation for BMR as it's widely validated for
calculating resting metabolic rate. Base TDEE is BMR times an
occupation multiplier only; exercise energy is added by the goal
resolver so it is never counted twice.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from fitplan.profiles.models import (
    AlcoholLevel,
    ConditionTag,
    Gender,
    HabitFlag,
    Intensity,
    OccupationClass,
    UserProfile,
)


class BodyFatSource(Enum):
    """Where the body fat value came from (first non-null wins)."""

    USER_INPUT = "user_input"
    AI_ANALYSIS = "ai_analysis"
    BMI_ESTIMATION = "bmi_estimation"
    DEFAULT_ESTIMATE = "default_estimate"


# Base TDEE multipliers from occupation NEAT (no exercise)
OCCUPATION_MULTIPLIERS = {
    OccupationClass.DESK_JOB: 1.25,
    OccupationClass.LIGHT_ACTIVE: 1.35,
    OccupationClass.MODERATE_ACTIVE: 1.45,
    OccupationClass.HEAVY_LABOR: 1.60,
    OccupationClass.VERY_ACTIVE: 1.70,
}

# Mifflin-St Jeor constant term; OTHER is the mean of male and female
BMR_GENDER_CONSTANTS = {
    Gender.MALE: 5.0,
    Gender.FEMALE: -161.0,
    Gender.OTHER: -78.0,
}

# AI body fat estimates are only trusted above this confidence (0-100)
AI_CONFIDENCE_THRESHOLD = 70.0

# Coarse body fat defaults by BMI bracket: (bmi_upper_bound, male, female)
DEFAULT_BODY_FAT_BY_BMI = (
    (18.5, 12.0, 20.0),
    (25.0, 18.0, 26.0),
    (30.0, 24.0, 32.0),
    (float("inf"), 30.0, 38.0),
)

# Diet readiness points per habit. Negative habits subtract.
HABIT_POINTS = {
    HabitFlag.DRINKS_ENOUGH_WATER: 10,
    HabitFlag.LIMITS_SUGARY_DRINKS: 15,
    HabitFlag.EATS_REGULAR_MEALS: 25,        # Most predictive
    HabitFlag.AVOIDS_LATE_NIGHT_EATING: 10,
    HabitFlag.CONTROLS_PORTION_SIZES: 30,    # Highly predictive
    HabitFlag.READS_NUTRITION_LABELS: 20,
    HabitFlag.EATS_5_SERVINGS_FRUITS_VEGGIES: 20,
    HabitFlag.LIMITS_REFINED_SUGAR: 15,
    HabitFlag.INCLUDES_HEALTHY_FATS: 10,
    HabitFlag.EATS_PROCESSED_FOODS: -20,
}
ALCOHOL_READINESS_PENALTY = -10
TOBACCO_READINESS_PENALTY = -15

# Raw readiness range: max 155, min -45
READINESS_RAW_MIN = -45
READINESS_RAW_SPAN = 200

# Reference BMR by age band for metabolic age: (age_upper_inclusive, male, female)
REFERENCE_BMR_BY_AGE = (
    (24, 1750, 1400),
    (34, 1700, 1350),
    (44, 1650, 1300),
    (54, 1580, 1250),
    (64, 1500, 1200),
    (200, 1400, 1150),
)

# Healthy body fat ranges: (age_upper_exclusive, (male_min, male_max), (female_min, female_max))
HEALTHY_BODY_FAT_BY_AGE = (
    (25, (6, 17), (16, 24)),
    (35, (7, 18), (16, 25)),
    (45, (12, 21), (17, 28)),
    (55, (14, 23), (18, 30)),
    (200, (16, 25), (18, 31)),
)


@dataclass(frozen=True)
class WeightRange:
    min_kg: float
    max_kg: float


@dataclass(frozen=True)
class HeartRateZone:
    min_bpm: int
    max_bpm: int


@dataclass(frozen=True)
class HeartRateZones:
    fat_burn: HeartRateZone
    cardio: HeartRateZone
    peak: HeartRateZone


@dataclass(frozen=True)
class BodyFatEstimate:
    value: float
    source: BodyFatSource


@dataclass(frozen=True)
class RawMetrics:
    """Goal-independent physiological quantities for one profile."""

    bmi: float
    bmr: float
    base_tdee: float
    ideal_weight_range: WeightRange
    body_fat: BodyFatEstimate
    lean_mass_kg: float
    fat_mass_kg: float
    waist_hip_ratio: Optional[float]
    vo2max_estimate: float
    max_heart_rate: int
    hr_zones: HeartRateZones
    water_ml: int
    fiber_g: int
    diet_readiness_score: int

    # Supplementary scores
    metabolic_age: int
    healthy_body_fat_range: tuple[float, float]
    recommended_intensity: Intensity
    recommended_sleep_hours: float
    overall_health_score: int
    fitness_readiness_score: int


def calculate_bmi(weight_kg: float, height_cm: float) -> float:
    """Calculate Body Mass Index: weight(kg) / height(m)^2."""
    height_m = height_cm / 100
    return weight_kg / (height_m * height_m)


def calculate_bmr(
    weight_kg: float,
    height_cm: float,
    age: int,
    gender: Gender,
) -> float:
    """Calculate Basal Metabolic Rate using Mifflin-St Jeor equation.

    Args:
        weight_kg: Weight in kilograms
        height_cm: Height in centimeters
        age: Age in years
        gender: Gender; OTHER uses the mean of the male and female constants

    Returns:
        BMR in calories per day
    """
    base = (10 * weight_kg) + (6.25 * height_cm) - (5 * age)
    return base + BMR_GENDER_CONSTANTS[gender]


def calculate_base_tdee(bmr: float, occupation: OccupationClass) -> float:
    """Calculate base TDEE from occupation only.

    Args:
        bmr: Basal Metabolic Rate
        occupation: Occupation class

    Returns:
        Daily energy expenditure without any planned exercise
    """
    return bmr * OCCUPATION_MULTIPLIERS[occupation]


def estimate_body_fat_deurenberg(bmi: float, age: int, gender: Gender) -> float:
    """Estimate adult body fat percentage from BMI (Deurenberg formula)."""
    male = 1.2 * bmi + 0.23 * age - 16.2
    female = 1.2 * bmi + 0.23 * age - 5.4
    if gender == Gender.MALE:
        return male
    if gender == Gender.FEMALE:
        return female
    return (male + female) / 2


def default_body_fat_for_bmi(bmi: float, gender: Gender) -> float:
    """Coarse body fat default by BMI bracket."""
    for upper, male, female in DEFAULT_BODY_FAT_BY_BMI:
        if bmi < upper:
            if gender == Gender.MALE:
                return male
            if gender == Gender.FEMALE:
                return female
            return (male + female) / 2
    raise AssertionError("unreachable: last bracket is unbounded")


def resolve_body_fat(
    bmi: float,
    age: int,
    gender: Gender,
    user_value: Optional[float] = None,
    ai_value: Optional[float] = None,
    ai_confidence: Optional[float] = None,
) -> BodyFatEstimate:
    """Pick the body fat value by strict priority.

    User input, then a confident AI estimate, then Deurenberg for adults,
    then a BMI-bracket default.
    """
    if user_value is not None:
        return BodyFatEstimate(user_value, BodyFatSource.USER_INPUT)

    if (
        ai_value is not None
        and ai_confidence is not None
        and ai_confidence > AI_CONFIDENCE_THRESHOLD
    ):
        return BodyFatEstimate(ai_value, BodyFatSource.AI_ANALYSIS)

    # Deurenberg is validated for adults only
    if age >= 18:
        estimate = round(estimate_body_fat_deurenberg(bmi, age, gender), 1)
        if estimate > 0:
            return BodyFatEstimate(estimate, BodyFatSource.BMI_ESTIMATION)

    return BodyFatEstimate(default_body_fat_for_bmi(bmi, gender), BodyFatSource.DEFAULT_ESTIMATE)


def calculate_body_composition(weight_kg: float, body_fat_pct: float) -> tuple[float, float]:
    """Return (lean_mass_kg, fat_mass_kg)."""
    fat_mass = weight_kg * body_fat_pct / 100
    return round(weight_kg - fat_mass, 2), round(fat_mass, 2)


def calculate_waist_hip_ratio(
    waist_cm: Optional[float],
    hip_cm: Optional[float],
) -> Optional[float]:
    """Waist-to-hip ratio, or None unless both circumferences are known."""
    if waist_cm is None or hip_cm is None:
        return None
    return round(waist_cm / hip_cm, 2)


def calculate_ideal_weight_range(height_cm: float, gender: Gender) -> WeightRange:
    """Ideal weight range (Devine formula +/-10%, BMI band for OTHER)."""
    height_m = height_cm / 100

    if gender == Gender.OTHER:
        return WeightRange(
            round(18.5 * height_m * height_m, 2),
            round(24.9 * height_m * height_m, 2),
        )

    inches_over_5ft = max(0.0, height_cm / 2.54 - 60)
    base = 50.0 if gender == Gender.MALE else 45.5
    ideal = base + 2.3 * inches_over_5ft

    return WeightRange(round(ideal * 0.9, 2), round(ideal * 1.1, 2))


def estimate_vo2max(run_minutes: float, age: int, gender: Gender) -> float:
    """Rough VO2max (ml/kg/min) from continuous running ability and age."""
    peak, decline = {
        Gender.MALE: (50.0, 0.5),
        Gender.FEMALE: (40.0, 0.4),
        Gender.OTHER: (45.0, 0.45),
    }[gender]

    age_adjustment = (age - 20) * decline if age >= 20 else 0.0
    vo2 = peak - age_adjustment + run_minutes * 0.3

    return round(max(20.0, min(80.0, vo2)), 1)


def calculate_max_heart_rate(age: int) -> int:
    return 220 - age


def calculate_heart_rate_zones(max_heart_rate: int) -> HeartRateZones:
    """Training zones as fractions of max heart rate."""

    def zone(low: float, high: float) -> HeartRateZone:
        return HeartRateZone(round(max_heart_rate * low), round(max_heart_rate * high))

    return HeartRateZones(
        fat_burn=zone(0.60, 0.70),
        cardio=zone(0.70, 0.85),
        peak=zone(0.85, 0.95),
    )


def calculate_water_ml(weight_kg: float) -> int:
    """35 ml per kg body weight."""
    return round(weight_kg * 35)


def calculate_fiber_g(daily_calories: float) -> int:
    """14 g per 1000 kcal."""
    return round(daily_calories / 1000 * 14)


def calculate_diet_readiness_score(
    habits: frozenset[HabitFlag],
    alcohol: AlcoholLevel,
    tobacco: bool,
) -> int:
    """Score 0-100 predicting diet adherence from eating habits.

    Args:
        habits: Habit flags the user reported
        alcohol: Alcohol consumption level (any drinking is penalised)
        tobacco: Whether the user smokes

    Returns:
        Normalised readiness score
    """
    score = sum(HABIT_POINTS[habit] for habit in habits)
    if alcohol != AlcoholLevel.NONE:
        score += ALCOHOL_READINESS_PENALTY
    if tobacco:
        score += TOBACCO_READINESS_PENALTY

    normalized = round((score - READINESS_RAW_MIN) / READINESS_RAW_SPAN * 100)
    return max(0, min(100, normalized))


def calculate_metabolic_age(bmr: float, age: int, gender: Gender) -> int:
    """Compare BMR to the reference for the age band; clipped to 18-85."""
    for upper, male, female in REFERENCE_BMR_BY_AGE:
        if age <= upper:
            if gender == Gender.MALE:
                expected = male
            elif gender == Gender.FEMALE:
                expected = female
            else:
                expected = (male + female) / 2
            break

    cal_per_year = 10 if gender == Gender.MALE else 8
    metabolic_age = age + (expected - bmr) / cal_per_year
    return max(18, min(85, round(metabolic_age)))


def healthy_body_fat_range(age: int, gender: Gender) -> tuple[float, float]:
    for upper, male, female in HEALTHY_BODY_FAT_BY_AGE:
        if age < upper:
            if gender == Gender.MALE:
                return male
            if gender == Gender.FEMALE:
                return female
            return ((male[0] + female[0]) / 2, (male[1] + female[1]) / 2)
    raise AssertionError("unreachable: last band is unbounded")


def recommend_intensity(
    experience_years: float,
    pushups: int,
    run_minutes: float,
    age: int,
    gender: Gender,
) -> Intensity:
    """Recommended starting intensity from experience and fitness tests."""
    if experience_years >= 3:
        return Intensity.ADVANCED
    if experience_years < 1:
        return Intensity.BEGINNER

    if gender == Gender.MALE:
        pushup_threshold = 25 if age < 40 else 20
    else:
        pushup_threshold = 15 if age < 40 else 10

    meets_strength = pushups >= pushup_threshold
    meets_cardio = run_minutes >= 15

    if meets_strength and meets_cardio:
        return Intensity.ADVANCED
    if meets_strength or meets_cardio:
        return Intensity.INTERMEDIATE
    return Intensity.BEGINNER


def recommended_sleep_hours(age: int) -> float:
    if age < 18:
        return 8.5
    if age < 26:
        return 8.0
    if age < 65:
        return 7.5
    return 7.0


def calculate_overall_health_score(profile: UserProfile, bmi: float) -> int:
    """General health score 0-100 from BMI, habits, sleep and training."""
    score = 100

    if bmi < 18.5 or bmi > 25:
        score -= 10
    if bmi > 30:
        score -= 20
    if 18.5 <= bmi <= 24.9:
        score += 5

    habits = profile.diet.readiness_habits
    if HabitFlag.DRINKS_ENOUGH_WATER in habits:
        score += 5
    if HabitFlag.EATS_5_SERVINGS_FRUITS_VEGGIES in habits:
        score += 10
    if HabitFlag.LIMITS_REFINED_SUGAR in habits:
        score += 5
    if HabitFlag.EATS_PROCESSED_FOODS in habits:
        score -= 10

    lifestyle = profile.lifestyle
    if lifestyle.tobacco:
        score -= 25
    if lifestyle.alcohol != AlcoholLevel.NONE:
        score -= 5
    if 7 <= lifestyle.sleep_hours <= 9:
        score += 10
    if lifestyle.sleep_hours < 6:
        score -= 15

    activity = profile.activity
    if activity.experience_years > 0:
        score += 5
    if activity.workout_frequency_per_week >= 3:
        score += 10

    return max(0, min(100, round(score)))


def calculate_fitness_readiness_score(profile: UserProfile) -> int:
    """Training readiness 0-100 from experience, fitness tests and health."""
    activity = profile.activity
    score = 50.0

    score += min(activity.experience_years * 3, 15)
    score += min(activity.fitness_tests.pushups * 0.5, 15)
    score += min(activity.fitness_tests.run_minutes * 0.3, 15)

    conditions = profile.lifestyle.medical_conditions - {ConditionTag.OTHER}
    score -= len(conditions) * 5
    score -= len(profile.lifestyle.physical_limitations) * 3

    return max(0, min(100, round(score)))


def compute_raw_metrics(profile: UserProfile) -> RawMetrics:
    """Calculate every goal-independent metric for a profile.

    Args:
        profile: Complete onboarding profile

    Returns:
        RawMetrics for this profile
    """
    demo = profile.demographics
    body = profile.body

    bmi = calculate_bmi(body.weight_kg, body.height_cm)
    bmr = calculate_bmr(body.weight_kg, body.height_cm, demo.age, demo.gender)
    base_tdee = calculate_base_tdee(bmr, demo.occupation)

    body_fat = resolve_body_fat(
        bmi,
        demo.age,
        demo.gender,
        user_value=body.body_fat_pct,
        ai_value=body.ai_body_fat_pct,
        ai_confidence=body.ai_confidence,
    )
    lean_mass, fat_mass = calculate_body_composition(body.weight_kg, body_fat.value)

    max_hr = calculate_max_heart_rate(demo.age)
    tests = profile.activity.fitness_tests

    return RawMetrics(
        bmi=bmi,
        bmr=bmr,
        base_tdee=base_tdee,
        ideal_weight_range=calculate_ideal_weight_range(body.height_cm, demo.gender),
        body_fat=body_fat,
        lean_mass_kg=lean_mass,
        fat_mass_kg=fat_mass,
        waist_hip_ratio=calculate_waist_hip_ratio(body.waist_cm, body.hip_cm),
        vo2max_estimate=estimate_vo2max(tests.run_minutes, demo.age, demo.gender),
        max_heart_rate=max_hr,
        hr_zones=calculate_heart_rate_zones(max_hr),
        water_ml=calculate_water_ml(body.weight_kg),
        fiber_g=calculate_fiber_g(base_tdee),
        diet_readiness_score=calculate_diet_readiness_score(
            profile.diet.readiness_habits,
            profile.lifestyle.alcohol,
            profile.lifestyle.tobacco,
        ),
        metabolic_age=calculate_metabolic_age(bmr, demo.age, demo.gender),
        healthy_body_fat_range=healthy_body_fat_range(demo.age, demo.gender),
        recommended_intensity=recommend_intensity(
            profile.activity.experience_years,
            tests.pushups,
            tests.run_minutes,
            demo.age,
            demo.gender,
        ),
        recommended_sleep_hours=recommended_sleep_hours(demo.age),
        overall_health_score=calculate_overall_health_score(profile, bmi),
        fitness_readiness_score=calculate_fitness_readiness_score(profile),
    )
