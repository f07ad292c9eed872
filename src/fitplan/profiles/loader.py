"""Load onboarding profiles from YAML (or JSON) files."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any, Optional, TypeVar

import yaml

from fitplan.profiles.models import (
    ActivityLevel,
    ActivityProfile,
    AlcoholLevel,
    BodyMeasurements,
    ConditionTag,
    Demographics,
    DietProfile,
    DietStyle,
    DietType,
    FitnessTestResults,
    Gender,
    GoalProfile,
    GoalTag,
    HabitFlag,
    Intensity,
    InvalidProfileError,
    LimitationTag,
    Lifestyle,
    MealSlot,
    OccupationClass,
    StressLevel,
    UserProfile,
    WorkoutLocation,
    WorkoutType,
)

E = TypeVar("E", bound=Enum)


def _enum(enum_cls: type[E], value: Any, field_name: str) -> E:
    """Parse an enum value, accepting hyphens for underscores."""
    text = str(value).strip().lower().replace("-", "_")
    try:
        return enum_cls(text)
    except ValueError:
        valid = ", ".join(e.value for e in enum_cls)
        raise InvalidProfileError(
            f"Unknown {field_name} '{value}'. Valid values: {valid}"
        ) from None


def _enum_set(enum_cls: type[E], values: Optional[list], field_name: str) -> frozenset[E]:
    return frozenset(_enum(enum_cls, v, field_name) for v in values or [])


def _required(data: dict, key: str, section: str) -> Any:
    if key not in data or data[key] is None:
        raise InvalidProfileError(f"Missing required field '{section}.{key}'")
    return data[key]


def _number(value: Any, field_name: str, cast=float):
    try:
        return cast(value)
    except (TypeError, ValueError):
        raise InvalidProfileError(f"{field_name} must be a number, got {value!r}") from None


def _optional_number(data: dict, key: str) -> Optional[float]:
    value = data.get(key)
    return None if value is None else _number(value, key)


def profile_from_dict(data: dict[str, Any]) -> UserProfile:
    """Build a UserProfile from a nested dictionary.

    Args:
        data: Mapping with demographics, body, lifestyle, activity, diet
            and goals sections. Only demographics and body are required.

    Returns:
        UserProfile

    Raises:
        InvalidProfileError: On missing fields, unknown tags or bad values
    """
    if not isinstance(data, dict):
        raise InvalidProfileError("Profile must be a mapping")

    demo = data.get("demographics") or {}
    demographics = Demographics(
        age=_number(_required(demo, "age", "demographics"), "age", int),
        gender=_enum(Gender, _required(demo, "gender", "demographics"), "gender"),
        occupation=_enum(OccupationClass, demo.get("occupation", "desk_job"), "occupation"),
    )

    body_data = data.get("body") or {}
    body = BodyMeasurements(
        height_cm=_number(_required(body_data, "height_cm", "body"), "height_cm"),
        weight_kg=_number(_required(body_data, "weight_kg", "body"), "weight_kg"),
        target_weight_kg=_number(
            _required(body_data, "target_weight_kg", "body"), "target_weight_kg"
        ),
        timeline_weeks=_number(
            _required(body_data, "timeline_weeks", "body"), "timeline_weeks", int
        ),
        body_fat_pct=_optional_number(body_data, "body_fat_pct"),
        ai_body_fat_pct=_optional_number(body_data, "ai_body_fat_pct"),
        ai_confidence=_optional_number(body_data, "ai_confidence"),
        waist_cm=_optional_number(body_data, "waist_cm"),
        hip_cm=_optional_number(body_data, "hip_cm"),
    )

    life = data.get("lifestyle") or {}
    trimester = life.get("pregnancy_trimester")
    lifestyle = Lifestyle(
        sleep_hours=_number(life.get("sleep_hours", 7.5), "sleep_hours"),
        alcohol=_enum(AlcoholLevel, life.get("alcohol", "none"), "alcohol"),
        tobacco=bool(life.get("tobacco", False)),
        stress=_enum(StressLevel, life.get("stress", "moderate"), "stress"),
        medical_conditions=_enum_set(
            ConditionTag, life.get("medical_conditions"), "medical condition"
        ),
        medications=tuple(str(m) for m in life.get("medications") or []),
        physical_limitations=_enum_set(
            LimitationTag, life.get("physical_limitations"), "physical limitation"
        ),
        pregnancy_trimester=(
            None if trimester is None else _number(trimester, "pregnancy_trimester", int)
        ),
        breastfeeding=bool(life.get("breastfeeding", False)),
    )

    act = data.get("activity") or {}
    tests = act.get("fitness_tests") or {}
    activity = ActivityProfile(
        workout_frequency_per_week=_number(
            act.get("workout_frequency_per_week", 3), "workout_frequency_per_week", int
        ),
        session_minutes=_number(act.get("session_minutes", 45), "session_minutes", int),
        experience_years=_number(act.get("experience_years", 0.0), "experience_years"),
        fitness_tests=FitnessTestResults(
            pushups=_number(tests.get("pushups", 0), "pushups", int),
            run_minutes=_number(tests.get("run_minutes", 0.0), "run_minutes"),
        ),
        intensity=_enum(Intensity, act.get("intensity", "beginner"), "intensity"),
        workout_types=tuple(
            _enum(WorkoutType, t, "workout type") for t in act.get("workout_types") or []
        ),
        activity_level=_enum(ActivityLevel, act.get("activity_level", "light"), "activity level"),
        location=_enum(WorkoutLocation, act.get("location", "gym"), "location"),
        equipment=frozenset(str(e) for e in act.get("equipment") or []),
    )

    diet_data = data.get("diet") or {}
    meals = diet_data.get("meals_enabled")
    diet = DietProfile(
        diet_type=_enum(DietType, diet_data.get("diet_type", "omnivore"), "diet type"),
        diet_styles=_enum_set(DietStyle, diet_data.get("diet_styles"), "diet style"),
        meals_enabled=frozenset(MealSlot) if meals is None else _enum_set(MealSlot, meals, "meal"),
        readiness_habits=_enum_set(HabitFlag, diet_data.get("readiness_habits"), "habit"),
        allergies=tuple(str(a) for a in diet_data.get("allergies") or []),
    )

    goal_data = data.get("goals") or []
    if isinstance(goal_data, dict):
        goal_data = goal_data.get("primary_goals") or []
    goals = GoalProfile(primary_goals=_enum_set(GoalTag, goal_data, "goal"))

    return UserProfile(
        demographics=demographics,
        body=body,
        lifestyle=lifestyle,
        activity=activity,
        diet=diet,
        goals=goals,
    )


def load_profile(path: Path) -> UserProfile:
    """Parse a profile file into a UserProfile.

    Raises:
        FileNotFoundError: If the file doesn't exist
        InvalidProfileError: If the contents are not a valid profile
    """
    with open(path) as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise InvalidProfileError(f"Could not parse {path}: {e}") from e
    return profile_from_dict(data or {})


def _values(tags) -> list[str]:
    return sorted(t.value for t in tags)


def profile_to_dict(profile: UserProfile) -> dict[str, Any]:
    """Inverse of profile_from_dict, with tag sets as sorted lists."""
    body = profile.body
    life = profile.lifestyle
    act = profile.activity
    diet = profile.diet
    return {
        "demographics": {
            "age": profile.age,
            "gender": profile.gender.value,
            "occupation": profile.demographics.occupation.value,
        },
        "body": {
            "height_cm": body.height_cm,
            "weight_kg": body.weight_kg,
            "target_weight_kg": body.target_weight_kg,
            "timeline_weeks": body.timeline_weeks,
            "body_fat_pct": body.body_fat_pct,
            "ai_body_fat_pct": body.ai_body_fat_pct,
            "ai_confidence": body.ai_confidence,
            "waist_cm": body.waist_cm,
            "hip_cm": body.hip_cm,
        },
        "lifestyle": {
            "sleep_hours": life.sleep_hours,
            "alcohol": life.alcohol.value,
            "tobacco": life.tobacco,
            "stress": life.stress.value,
            "medical_conditions": _values(life.medical_conditions),
            "medications": list(life.medications),
            "physical_limitations": _values(life.physical_limitations),
            "pregnancy_trimester": life.pregnancy_trimester,
            "breastfeeding": life.breastfeeding,
        },
        "activity": {
            "workout_frequency_per_week": act.workout_frequency_per_week,
            "session_minutes": act.session_minutes,
            "experience_years": act.experience_years,
            "fitness_tests": {
                "pushups": act.fitness_tests.pushups,
                "run_minutes": act.fitness_tests.run_minutes,
            },
            "intensity": act.intensity.value,
            "workout_types": [t.value for t in act.workout_types],
            "activity_level": act.activity_level.value,
            "location": act.location.value,
            "equipment": sorted(act.equipment),
        },
        "diet": {
            "diet_type": diet.diet_type.value,
            "diet_styles": _values(diet.diet_styles),
            "meals_enabled": _values(diet.meals_enabled),
            "readiness_habits": _values(diet.readiness_habits),
            "allergies": list(diet.allergies),
        },
        "goals": _values(profile.goals.primary_goals),
    }
