"""Pytest fixtures for fitplan tests."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import pytest
import yaml

from fitplan.config.settings import Settings
from fitplan.profiles.models import (
    ActivityProfile,
    BodyMeasurements,
    Demographics,
    DietProfile,
    Gender,
    GoalProfile,
    GoalTag,
    Lifestyle,
    OccupationClass,
    UserProfile,
)


def build_profile(
    *,
    age: int = 28,
    gender: Gender = Gender.MALE,
    occupation: OccupationClass = OccupationClass.DESK_JOB,
    height_cm: float = 180.0,
    weight_kg: float = 80.0,
    target_weight_kg: Optional[float] = None,
    timeline_weeks: int = 12,
    body: Optional[dict] = None,
    lifestyle: Optional[dict] = None,
    activity: Optional[dict] = None,
    diet: Optional[dict] = None,
    goals: tuple[GoalTag, ...] = (),
) -> UserProfile:
    """Build a profile; unspecified sections use model defaults.

    Defaults describe a 28-year-old 180 cm / 80 kg man at a desk job,
    training 3x45 min at beginner intensity, maintaining weight.
    """
    return UserProfile(
        demographics=Demographics(age=age, gender=gender, occupation=occupation),
        body=BodyMeasurements(
            height_cm=height_cm,
            weight_kg=weight_kg,
            target_weight_kg=weight_kg if target_weight_kg is None else target_weight_kg,
            timeline_weeks=timeline_weeks,
            **(body or {}),
        ),
        lifestyle=Lifestyle(**(lifestyle or {})),
        activity=ActivityProfile(**(activity or {})),
        diet=DietProfile(**(diet or {})),
        goals=GoalProfile(primary_goals=frozenset(goals)),
    )


@pytest.fixture
def make_profile():
    """Factory fixture for profiles."""
    return build_profile


@pytest.fixture
def maintenance_profile() -> UserProfile:
    """Healthy maintenance profile that triggers no rules."""
    return build_profile()


@pytest.fixture
def aggressive_cut_profile() -> UserProfile:
    """88 -> 70 kg in 16 weeks with one workout per week.

    A very active occupation keeps the target above BMR, so the plan is
    aggressive (about 1.28%/week) but not blocked.
    """
    return build_profile(
        occupation=OccupationClass.VERY_ACTIVE,
        weight_kg=88.0,
        target_weight_kg=70.0,
        timeline_weeks=16,
        activity={"workout_frequency_per_week": 1},
        goals=(GoalTag.WEIGHT_LOSS,),
    )


@pytest.fixture
def below_bmr_profile() -> UserProfile:
    """60 -> 55 kg in 8 weeks at a desk job: target falls below BMR."""
    return build_profile(
        gender=Gender.FEMALE,
        height_cm=165.0,
        weight_kg=60.0,
        target_weight_kg=55.0,
        timeline_weeks=8,
        goals=(GoalTag.WEIGHT_LOSS,),
    )


@pytest.fixture
def pregnant_loss_profile() -> UserProfile:
    """Second-trimester profile that asks for weight loss."""
    return build_profile(
        gender=Gender.FEMALE,
        height_cm=165.0,
        weight_kg=65.0,
        target_weight_kg=60.0,
        timeline_weeks=20,
        lifestyle={"pregnancy_trimester": 2},
        goals=(GoalTag.WEIGHT_LOSS,),
    )


@pytest.fixture
def default_settings() -> Settings:
    return Settings()


@pytest.fixture
def config_file(tmp_path) -> Path:
    """Default settings written to a temporary config.yaml."""
    path = tmp_path / "config.yaml"
    Settings().save(path)
    return path


@pytest.fixture
def write_profile(tmp_path):
    """Write a profile dict to a YAML file and return its path."""

    def _write(data: dict, name: str = "profile.yaml") -> Path:
        path = tmp_path / name
        with open(path, "w") as f:
            yaml.dump(data, f)
        return path

    return _write
