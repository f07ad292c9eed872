"""Goal resolution: direction, weekly rate, calorie target and macros.

Exercise energy is computed here from MET values and added on top of the
occupation-only base TDEE, giving the "true" TDEE. No safety checks are
done at this stage so alternatives can be re-resolved cheaply.
"""

from __future__ import annotations

from fitplan.planning.models import Direction, GoalPlan
from fitplan.profiles.body_calc import RawMetrics
from fitplan.profiles.models import (
    DietStyle,
    GoalTag,
    Intensity,
    UserProfile,
    WorkoutType,
)

# 1 kg of adipose tissue ~ 7700 kcal
KCAL_PER_KG = 7700.0

# Differences smaller than this are treated as maintenance
WEIGHT_EPSILON_KG = 0.1

KCAL_PER_G_PROTEIN = 4.0
KCAL_PER_G_CARBS = 4.0
KCAL_PER_G_FAT = 9.0

# MET values by intensity and workout type
MET_VALUES = {
    Intensity.BEGINNER: {
        WorkoutType.STRENGTH: 3.5,
        WorkoutType.CARDIO: 5.0,
        WorkoutType.SPORTS: 4.5,
        WorkoutType.YOGA: 2.5,
        WorkoutType.HIIT: 6.0,
        WorkoutType.PILATES: 3.0,
        WorkoutType.FLEXIBILITY: 2.5,
        WorkoutType.FUNCTIONAL: 4.0,
        WorkoutType.MIXED: 4.0,
    },
    Intensity.INTERMEDIATE: {
        WorkoutType.STRENGTH: 5.0,
        WorkoutType.CARDIO: 7.0,
        WorkoutType.SPORTS: 6.5,
        WorkoutType.YOGA: 3.5,
        WorkoutType.HIIT: 8.0,
        WorkoutType.PILATES: 4.5,
        WorkoutType.FLEXIBILITY: 3.0,
        WorkoutType.FUNCTIONAL: 6.0,
        WorkoutType.MIXED: 6.0,
    },
    Intensity.ADVANCED: {
        WorkoutType.STRENGTH: 6.5,
        WorkoutType.CARDIO: 9.0,
        WorkoutType.SPORTS: 8.5,
        WorkoutType.YOGA: 4.5,
        WorkoutType.HIIT: 10.0,
        WorkoutType.PILATES: 6.0,
        WorkoutType.FLEXIBILITY: 4.0,
        WorkoutType.FUNCTIONAL: 7.5,
        WorkoutType.MIXED: 7.5,
    },
}

# Protein recommendations (grams per kg body weight)
PROTEIN_G_PER_KG = {
    "cutting": 2.2,
    "cutting_advanced": 2.4,
    "recomp": 2.4,
    "maintenance": 1.6,
    "bulking": 1.8,
    "weight_gain": 1.6,
}

# Carb share of non-protein calories that overrides the intensity split
DIET_STYLE_CARB_SHARE = {
    DietStyle.KETO: 0.10,
    DietStyle.LOW_CARB: 0.25,
}


def resolve_direction(weight_kg: float, target_weight_kg: float) -> Direction:
    if target_weight_kg < weight_kg - WEIGHT_EPSILON_KG:
        return Direction.LOSS
    if target_weight_kg > weight_kg + WEIGHT_EPSILON_KG:
        return Direction.GAIN
    return Direction.MAINTAIN


def session_met(workout_type: WorkoutType, intensity: Intensity) -> float:
    return MET_VALUES[intensity][workout_type]


def calculate_weekly_exercise_kcal(profile: UserProfile) -> float:
    """Sum MET x weight x hours over every planned session in a week.

    Sessions are assigned to the user's workout types in round-robin
    order; no listed type means mixed training.
    """
    activity = profile.activity
    types = activity.workout_types or (WorkoutType.MIXED,)
    hours = activity.session_minutes / 60

    total = 0.0
    for session in range(activity.workout_frequency_per_week):
        workout_type = types[session % len(types)]
        total += session_met(workout_type, activity.intensity) * profile.weight_kg * hours
    return total


def protein_profile(profile: UserProfile, direction: Direction) -> str:
    """Pick the protein requirement key for this goal."""
    goals = profile.goals.primary_goals
    wants_muscle = GoalTag.MUSCLE_GAIN in goals

    if direction == Direction.LOSS:
        if wants_muscle:
            return "recomp"
        if profile.activity.intensity == Intensity.ADVANCED:
            return "cutting_advanced"
        return "cutting"
    if direction == Direction.GAIN:
        return "bulking" if wants_muscle or GoalTag.STRENGTH in goals else "weight_gain"
    if wants_muscle and GoalTag.WEIGHT_LOSS in goals:
        return "recomp"
    return "maintenance"


def carb_share_for(profile: UserProfile) -> float:
    """Share of non-protein calories assigned to carbohydrate."""
    for style, share in DIET_STYLE_CARB_SHARE.items():
        if style in profile.diet.diet_styles:
            return share

    activity = profile.activity
    if activity.intensity == Intensity.ADVANCED and activity.workout_frequency_per_week >= 4:
        return 0.50  # High volume training
    if activity.workout_frequency_per_week >= 3:
        return 0.45
    return 0.40


def split_macros(
    target_calories: float,
    protein_g: float,
    carb_share: float,
) -> tuple[float, float]:
    """Split the non-protein calories into (carbs_g, fat_g)."""
    remaining = max(0.0, target_calories - protein_g * KCAL_PER_G_PROTEIN)
    carbs_g = remaining * carb_share / KCAL_PER_G_CARBS
    fat_g = remaining * (1 - carb_share) / KCAL_PER_G_FAT
    return carbs_g, fat_g


def resolve_goal(profile: UserProfile, raw: RawMetrics) -> GoalPlan:
    """Resolve direction, rate, calorie target and macros.

    Args:
        profile: Onboarding profile
        raw: Metrics from compute_raw_metrics

    Returns:
        GoalPlan (possibly unsafe; validation runs later)
    """
    body = profile.body
    direction = resolve_direction(body.weight_kg, body.target_weight_kg)

    exercise_weekly = calculate_weekly_exercise_kcal(profile)
    true_tdee = raw.base_tdee + exercise_weekly / 7

    weekly_rate = abs(body.target_weight_kg - body.weight_kg) / body.timeline_weeks
    if direction == Direction.MAINTAIN:
        weekly_rate = 0.0
    delta = weekly_rate * KCAL_PER_KG / 7

    if direction == Direction.LOSS:
        target = true_tdee - delta
    elif direction == Direction.GAIN:
        target = true_tdee + delta
    else:
        target = true_tdee

    protein_g = body.weight_kg * PROTEIN_G_PER_KG[protein_profile(profile, direction)]
    carb_share = carb_share_for(profile)
    carbs_g, fat_g = split_macros(target, protein_g, carb_share)

    return GoalPlan(
        direction=direction,
        required_weekly_rate_kg=weekly_rate,
        exercise_kcal_per_week=exercise_weekly,
        true_tdee=true_tdee,
        daily_kcal_delta=delta,
        target_calories=target,
        protein_g=protein_g,
        carbs_g=carbs_g,
        fat_g=fat_g,
        carb_share=carb_share,
    )
