"""Ordered, non-stacking modifier pipeline.

Each category contributes at most one modifier. Within the metabolic and
insulin-sensitivity categories only the most severe condition present is
applied; the rest are ignored. Energy factors act on true TDEE and are
bounded by TDEE_FLOOR_FRACTION, carbohydrate changes by CARB_FLOOR_FRACTION.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional

from fitplan.planning.goal import (
    KCAL_PER_G_CARBS,
    KCAL_PER_G_FAT,
    KCAL_PER_G_PROTEIN,
    split_macros,
)
from fitplan.planning.models import (
    AdjustedPlan,
    Direction,
    GoalPlan,
    RefeedSchedule,
    deficit_fraction,
)
from fitplan.profiles.models import (
    ActivityLevel,
    ConditionTag,
    Gender,
    Lifestyle,
    OccupationClass,
    UserProfile,
)

logger = logging.getLogger(__name__)

TDEE_FLOOR_FRACTION = 0.85
CARB_FLOOR_FRACTION = 0.70


@dataclass(frozen=True)
class ConditionModifier:
    """One entry of a priority-ordered condition table."""

    tag: ConditionTag
    rank: int
    factor: float
    note: str


# Metabolic category: factor multiplies true TDEE
METABOLIC_MODIFIERS = (
    ConditionModifier(
        ConditionTag.GRAVES_DISEASE, 3, 1.15,
        "Graves' disease: energy needs raised 15%",
    ),
    ConditionModifier(
        ConditionTag.HYPERTHYROID, 3, 1.15,
        "Hyperthyroidism: energy needs raised 15%",
    ),
    ConditionModifier(
        ConditionTag.HYPOTHYROID, 2, 0.90,
        "Hypothyroidism: energy needs lowered 10%",
    ),
)

# Insulin-sensitivity category: factor multiplies carbohydrate grams
INSULIN_MODIFIERS = (
    ConditionModifier(
        ConditionTag.DIABETES_TYPE1, 3, 0.75,
        "Type 1 diabetes: carbohydrates reduced 25%, energy moved to fat",
    ),
    ConditionModifier(
        ConditionTag.DIABETES_TYPE2, 2, 0.75,
        "Type 2 diabetes: carbohydrates reduced 25%, energy moved to fat",
    ),
    ConditionModifier(
        ConditionTag.PCOS, 1, 0.75,
        "PCOS: carbohydrates reduced 25%, energy moved to fat",
    ),
)

# (min_age, factor), checked from the oldest band down
AGE_DECLINE_FACTORS = (
    (60, 0.85),
    (50, 0.90),
    (40, 0.95),
    (30, 0.98),
)

MENOPAUSE_AGE_RANGE = (45, 55)
MENOPAUSE_FACTOR = 0.95

SLEEP_TARGET_HOURS = 7.0
SLEEP_DEBT_TIMELINE_PENALTY = 0.20  # per hour under target

PREGNANCY_ADDON_KCAL = {1: 0, 2: 340, 3: 450}
BREASTFEEDING_ADDON_KCAL = 500

# Minimum activity level implied by the occupation
OCCUPATION_ACTIVITY_FLOOR = {
    OccupationClass.DESK_JOB: ActivityLevel.SEDENTARY,
    OccupationClass.LIGHT_ACTIVE: ActivityLevel.LIGHT,
    OccupationClass.MODERATE_ACTIVE: ActivityLevel.MODERATE,
    OccupationClass.HEAVY_LABOR: ActivityLevel.ACTIVE,
    OccupationClass.VERY_ACTIVE: ActivityLevel.EXTREME,
}

CARDIOVASCULAR_CONDITIONS = frozenset(
    {ConditionTag.HYPERTENSION, ConditionTag.HEART_DISEASE}
)

REFEED_MIN_WEEKS = 12
REFEED_MIN_DEFICIT = 0.20
DIET_BREAK_MIN_WEEKS = 16


def select_most_impactful(
    conditions: frozenset[ConditionTag],
    table: tuple[ConditionModifier, ...],
) -> Optional[ConditionModifier]:
    """Return the highest-ranked modifier whose tag is present.

    Ties go to the earlier table entry.
    """
    best: Optional[ConditionModifier] = None
    for modifier in table:
        if modifier.tag in conditions and (best is None or modifier.rank > best.rank):
            best = modifier
    return best


def age_decline_factor(age: int) -> float:
    for min_age, factor in AGE_DECLINE_FACTORS:
        if age >= min_age:
            return factor
    return 1.0


def in_menopause_window(profile: UserProfile) -> bool:
    low, high = MENOPAUSE_AGE_RANGE
    return profile.gender == Gender.FEMALE and low <= profile.age <= high


def pregnancy_addon(lifestyle: Lifestyle) -> int:
    """Daily energy add-on for pregnancy or breastfeeding (largest applies)."""
    addon = 0
    if lifestyle.pregnancy_trimester is not None:
        addon = PREGNANCY_ADDON_KCAL[lifestyle.pregnancy_trimester]
    if lifestyle.breastfeeding:
        addon = max(addon, BREASTFEEDING_ADDON_KCAL)
    return addon


def occupation_activity_floor(
    reported: ActivityLevel,
    occupation: OccupationClass,
) -> ActivityLevel:
    """Raise a self-reported activity level to the occupation's minimum."""
    order = list(ActivityLevel)
    floor = OCCUPATION_ACTIVITY_FLOOR[occupation]
    if order.index(reported) < order.index(floor):
        return floor
    return reported


def projected_timeline(timeline_weeks: int, sleep_hours: float) -> int:
    """Expected timeline once sleep debt slows progress."""
    if sleep_hours >= SLEEP_TARGET_HOURS:
        return timeline_weeks
    debt = SLEEP_TARGET_HOURS - sleep_hours
    # Round first so float noise (e.g. 13.000000000000002) doesn't add a week
    return math.ceil(round(timeline_weeks * (1 + debt * SLEEP_DEBT_TIMELINE_PENALTY), 6))


def plan_refeeds(
    direction: Direction,
    timeline_weeks: int,
    deficit: float,
) -> Optional[RefeedSchedule]:
    """Schedule refeed days and a diet break for long, deep deficits."""
    if direction != Direction.LOSS:
        return None

    weekly_refeeds = timeline_weeks >= REFEED_MIN_WEEKS and deficit >= REFEED_MIN_DEFICIT
    diet_break_week = timeline_weeks // 2 if timeline_weeks >= DIET_BREAK_MIN_WEEKS else None
    if not weekly_refeeds and diet_break_week is None:
        return None

    explanation = []
    if weekly_refeeds:
        explanation.append(
            f"One maintenance-calorie refeed day per week "
            f"({deficit:.0%} deficit over {timeline_weeks} weeks)"
        )
    if diet_break_week is not None:
        explanation.append(f"Full diet break at maintenance during week {diet_break_week}")
    return RefeedSchedule(
        weekly_refeeds=weekly_refeeds,
        diet_break_week=diet_break_week,
        explanation=tuple(explanation),
    )


def apply_modifiers(profile: UserProfile, plan: GoalPlan) -> AdjustedPlan:
    """Apply the modifier categories in order to a resolved GoalPlan.

    Args:
        profile: Onboarding profile
        plan: Output of resolve_goal

    Returns:
        AdjustedPlan with one note per applied modifier
    """
    lifestyle = profile.lifestyle
    conditions = lifestyle.medical_conditions
    notes: list[str] = []

    true_tdee = plan.true_tdee
    tdee_floor = TDEE_FLOOR_FRACTION * true_tdee

    # Energy factors: metabolic condition, age decade, menopause
    factor = 1.0
    metabolic = select_most_impactful(conditions, METABOLIC_MODIFIERS)
    if metabolic is not None:
        factor *= metabolic.factor
        notes.append(metabolic.note)

    age_factor = age_decline_factor(profile.age)
    if age_factor < 1.0:
        factor *= age_factor
        notes.append(
            f"Age {profile.age}: metabolic decline, energy needs x{age_factor:.2f}"
        )

    if in_menopause_window(profile):
        factor *= MENOPAUSE_FACTOR
        notes.append(f"Menopause window: energy needs x{MENOPAUSE_FACTOR:.2f}")

    adjusted_tdee = true_tdee * factor
    if adjusted_tdee < tdee_floor:
        adjusted_tdee = tdee_floor
        notes.append(
            f"Combined adjustments capped at {1 - TDEE_FLOOR_FRACTION:.0%} below TDEE"
        )

    shift = adjusted_tdee - true_tdee
    target = plan.target_calories + shift
    if shift < 0:
        target = max(target, min(plan.target_calories, tdee_floor))

    # Sleep debt only stretches the expected timeline
    timeline = profile.body.timeline_weeks
    projected = timeline
    if plan.direction != Direction.MAINTAIN:
        projected = projected_timeline(timeline, lifestyle.sleep_hours)
        if projected > timeline:
            notes.append(
                f"Sleep {lifestyle.sleep_hours:g}h/night: expect about "
                f"{projected} weeks instead of {timeline}"
            )

    # Pregnancy and breastfeeding never run a deficit
    if lifestyle.is_pregnant_or_breastfeeding:
        addon = pregnancy_addon(lifestyle)
        required = true_tdee + addon
        if plan.direction == Direction.GAIN:
            target = max(target, required)
        else:
            target = required
        state = (
            f"trimester {lifestyle.pregnancy_trimester}"
            if lifestyle.pregnancy_trimester is not None
            else "breastfeeding"
        )
        notes.append(
            f"Pregnancy/breastfeeding ({state}): calories set to maintenance +{addon} kcal"
        )

    activity_level = occupation_activity_floor(
        profile.activity.activity_level, profile.demographics.occupation
    )
    if activity_level != profile.activity.activity_level:
        notes.append(
            f"Activity level raised from {profile.activity.activity_level.value} to "
            f"{activity_level.value} to match occupation"
        )

    if conditions & CARDIOVASCULAR_CONDITIONS:
        notes.append(
            "Cardiovascular condition: keep sessions at moderate intensity "
            "and monitor heart rate"
        )

    # Macros: re-split on the new target, then insulin modifier and carb floor
    protein_g = plan.protein_g
    carbs_g, _ = split_macros(target, protein_g, plan.carb_share)

    insulin = select_most_impactful(conditions, INSULIN_MODIFIERS)
    if insulin is not None:
        carbs_g *= insulin.factor
        notes.append(insulin.note)

    carb_floor = CARB_FLOOR_FRACTION * plan.carbs_g
    if carbs_g < carb_floor:
        carbs_g = carb_floor
        notes.append(
            f"Carbohydrates held at {CARB_FLOOR_FRACTION:.0%} of the unmodified target"
        )

    fat_kcal = target - protein_g * KCAL_PER_G_PROTEIN - carbs_g * KCAL_PER_G_CARBS
    fat_g = max(0.0, fat_kcal / KCAL_PER_G_FAT)

    deficit = deficit_fraction(true_tdee, target)
    refeed = None
    if not lifestyle.is_pregnant_or_breastfeeding:
        refeed = plan_refeeds(plan.direction, timeline, deficit)
    if refeed is not None:
        notes.extend(refeed.explanation)

    logger.debug(
        "Modifiers: factor=%.3f tdee %.0f -> %.0f target %.0f -> %.0f (%d notes)",
        factor, true_tdee, adjusted_tdee, plan.target_calories, target, len(notes),
    )

    return AdjustedPlan(
        base=plan,
        adjusted_tdee=adjusted_tdee,
        target_calories=target,
        protein_g=protein_g,
        carbs_g=carbs_g,
        fat_g=fat_g,
        activity_level=activity_level,
        projected_timeline_weeks=projected,
        refeed=refeed,
        modifier_notes=tuple(notes),
    )
