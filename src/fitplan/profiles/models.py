"""Data models for the onboarding profile fed into the engine.

The profile is assembled once from every onboarding tab and is immutable
for the duration of an evaluation. Multi-choice answers (conditions,
habits, goals, meal slots) are modelled as frozensets of enum tags.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class Gender(Enum):
    """Gender used to branch formulas. OTHER averages male/female constants."""

    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


class OccupationClass(Enum):
    """Daily occupation (non-exercise activity)."""

    DESK_JOB = "desk_job"                # Sitting most of day
    LIGHT_ACTIVE = "light_active"        # Standing, light movement
    MODERATE_ACTIVE = "moderate_active"  # On feet often
    HEAVY_LABOR = "heavy_labor"          # Physical work all day
    VERY_ACTIVE = "very_active"          # Constant intense activity


class ActivityLevel(Enum):
    """Self-reported overall activity level (ordered)."""

    SEDENTARY = "sedentary"
    LIGHT = "light"
    MODERATE = "moderate"
    ACTIVE = "active"
    EXTREME = "extreme"


class AlcoholLevel(Enum):
    NONE = "none"
    OCCASIONAL = "occasional"
    REGULAR = "regular"
    HEAVY = "heavy"


class StressLevel(Enum):
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"


class ConditionTag(Enum):
    """Medical conditions that change targets or trigger notices."""

    HYPOTHYROID = "hypothyroid"
    HYPERTHYROID = "hyperthyroid"
    GRAVES_DISEASE = "graves_disease"
    PCOS = "pcos"
    DIABETES_TYPE1 = "diabetes_type1"
    DIABETES_TYPE2 = "diabetes_type2"
    HYPERTENSION = "hypertension"
    HEART_DISEASE = "heart_disease"
    ASTHMA = "asthma"
    OTHER = "other"


class LimitationTag(Enum):
    """Physical limitations reported during onboarding."""

    KNEE_ISSUES = "knee_issues"
    BACK_PAIN = "back_pain"
    ARTHRITIS = "arthritis"
    JOINT_PROBLEMS = "joint_problems"
    SHOULDER_ISSUES = "shoulder_issues"
    OTHER = "other"


class Intensity(Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class WorkoutType(Enum):
    STRENGTH = "strength"
    CARDIO = "cardio"
    SPORTS = "sports"
    YOGA = "yoga"
    HIIT = "hiit"
    PILATES = "pilates"
    FLEXIBILITY = "flexibility"
    FUNCTIONAL = "functional"
    MIXED = "mixed"


class WorkoutLocation(Enum):
    HOME = "home"
    GYM = "gym"
    BOTH = "both"


class DietType(Enum):
    OMNIVORE = "omnivore"
    PESCATARIAN = "pescatarian"
    VEGETARIAN = "vegetarian"
    VEGAN = "vegan"


class DietStyle(Enum):
    """Diet-readiness toggles (styles the user is willing to follow)."""

    KETO = "keto"
    INTERMITTENT_FASTING = "intermittent_fasting"
    PALEO = "paleo"
    MEDITERRANEAN = "mediterranean"
    LOW_CARB = "low_carb"
    HIGH_PROTEIN = "high_protein"


class MealSlot(Enum):
    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"
    SNACKS = "snacks"


class HabitFlag(Enum):
    """Eating habits scored for diet readiness."""

    DRINKS_ENOUGH_WATER = "drinks_enough_water"
    LIMITS_SUGARY_DRINKS = "limits_sugary_drinks"
    EATS_REGULAR_MEALS = "eats_regular_meals"
    AVOIDS_LATE_NIGHT_EATING = "avoids_late_night_eating"
    CONTROLS_PORTION_SIZES = "controls_portion_sizes"
    READS_NUTRITION_LABELS = "reads_nutrition_labels"
    EATS_PROCESSED_FOODS = "eats_processed_foods"
    EATS_5_SERVINGS_FRUITS_VEGGIES = "eats_5_servings_fruits_veggies"
    LIMITS_REFINED_SUGAR = "limits_refined_sugar"
    INCLUDES_HEALTHY_FATS = "includes_healthy_fats"


class GoalTag(Enum):
    WEIGHT_LOSS = "weight_loss"
    WEIGHT_GAIN = "weight_gain"
    MUSCLE_GAIN = "muscle_gain"
    STRENGTH = "strength"
    ENDURANCE = "endurance"
    FLEXIBILITY = "flexibility"
    GENERAL_FITNESS = "general_fitness"


# Custom exceptions


class FitPlanError(Exception):
    """Base exception for fitplan errors."""

    pass


class InvalidProfileError(FitPlanError, ValueError):
    """Raised when a profile is structurally impossible (e.g. zero height)."""

    pass


@dataclass(frozen=True)
class Demographics:
    age: int
    gender: Gender
    occupation: OccupationClass = OccupationClass.DESK_JOB

    def __post_init__(self) -> None:
        if self.age < 1 or self.age > 120:
            raise InvalidProfileError(f"age must be between 1 and 120, got {self.age}")


@dataclass(frozen=True)
class BodyMeasurements:
    """Body measurements and the weight goal.

    Optional circumferences and body-fat values stay None when unknown;
    zero is never used as a "missing" marker.
    """

    height_cm: float
    weight_kg: float
    target_weight_kg: float
    timeline_weeks: int
    body_fat_pct: Optional[float] = None
    ai_body_fat_pct: Optional[float] = None
    ai_confidence: Optional[float] = None  # 0-100
    waist_cm: Optional[float] = None
    hip_cm: Optional[float] = None

    def __post_init__(self) -> None:
        if self.height_cm <= 0:
            raise InvalidProfileError(f"height_cm must be positive, got {self.height_cm}")
        if self.weight_kg <= 0:
            raise InvalidProfileError(f"weight_kg must be positive, got {self.weight_kg}")
        if self.target_weight_kg <= 0:
            raise InvalidProfileError(
                f"target_weight_kg must be positive, got {self.target_weight_kg}"
            )
        if self.timeline_weeks < 1:
            raise InvalidProfileError(
                f"timeline_weeks must be at least 1, got {self.timeline_weeks}"
            )
        for name in ("body_fat_pct", "ai_body_fat_pct"):
            value = getattr(self, name)
            if value is not None and not 0 < value < 75:
                raise InvalidProfileError(f"{name} must be between 0 and 75, got {value}")
        for name in ("waist_cm", "hip_cm"):
            value = getattr(self, name)
            if value is not None and value <= 0:
                raise InvalidProfileError(f"{name} must be positive, got {value}")


@dataclass(frozen=True)
class Lifestyle:
    sleep_hours: float = 7.5
    alcohol: AlcoholLevel = AlcoholLevel.NONE
    tobacco: bool = False
    stress: StressLevel = StressLevel.MODERATE
    medical_conditions: frozenset[ConditionTag] = frozenset()
    medications: tuple[str, ...] = ()
    physical_limitations: frozenset[LimitationTag] = frozenset()
    pregnancy_trimester: Optional[int] = None
    breastfeeding: bool = False

    def __post_init__(self) -> None:
        if not 0 <= self.sleep_hours <= 24:
            raise InvalidProfileError(
                f"sleep_hours must be between 0 and 24, got {self.sleep_hours}"
            )
        if self.pregnancy_trimester is not None and self.pregnancy_trimester not in (1, 2, 3):
            raise InvalidProfileError(
                f"pregnancy_trimester must be 1, 2 or 3, got {self.pregnancy_trimester}"
            )

    @property
    def is_pregnant_or_breastfeeding(self) -> bool:
        return self.pregnancy_trimester is not None or self.breastfeeding


@dataclass(frozen=True)
class FitnessTestResults:
    pushups: int = 0
    run_minutes: float = 0.0


@dataclass(frozen=True)
class ActivityProfile:
    """Workout history and preferences."""

    workout_frequency_per_week: int = 3
    session_minutes: int = 45
    experience_years: float = 0.0
    fitness_tests: FitnessTestResults = field(default_factory=FitnessTestResults)
    intensity: Intensity = Intensity.BEGINNER
    workout_types: tuple[WorkoutType, ...] = ()  # first entry is the primary type
    activity_level: ActivityLevel = ActivityLevel.LIGHT
    location: WorkoutLocation = WorkoutLocation.GYM
    equipment: frozenset[str] = frozenset()

    def __post_init__(self) -> None:
        if not 0 <= self.workout_frequency_per_week <= 14:
            raise InvalidProfileError(
                "workout_frequency_per_week must be between 0 and 14, "
                f"got {self.workout_frequency_per_week}"
            )
        if self.session_minutes < 0:
            raise InvalidProfileError(
                f"session_minutes must not be negative, got {self.session_minutes}"
            )
        if self.experience_years < 0:
            raise InvalidProfileError(
                f"experience_years must not be negative, got {self.experience_years}"
            )

    @property
    def weekly_hours(self) -> float:
        return self.workout_frequency_per_week * self.session_minutes / 60


@dataclass(frozen=True)
class DietProfile:
    diet_type: DietType = DietType.OMNIVORE
    diet_styles: frozenset[DietStyle] = frozenset()
    meals_enabled: frozenset[MealSlot] = frozenset(MealSlot)
    readiness_habits: frozenset[HabitFlag] = frozenset()
    allergies: tuple[str, ...] = ()


@dataclass(frozen=True)
class GoalProfile:
    primary_goals: frozenset[GoalTag] = frozenset()


@dataclass(frozen=True)
class UserProfile:
    """Complete onboarding record for one evaluation."""

    demographics: Demographics
    body: BodyMeasurements
    lifestyle: Lifestyle = field(default_factory=Lifestyle)
    activity: ActivityProfile = field(default_factory=ActivityProfile)
    diet: DietProfile = field(default_factory=DietProfile)
    goals: GoalProfile = field(default_factory=GoalProfile)

    @property
    def age(self) -> int:
        return self.demographics.age

    @property
    def gender(self) -> Gender:
        return self.demographics.gender

    @property
    def weight_kg(self) -> float:
        return self.body.weight_kg

    @property
    def height_cm(self) -> float:
        return self.body.height_cm
