"""Onboarding profile models, loading and body metrics."""

from __future__ import annotations

from fitplan.profiles.body_calc import RawMetrics, compute_raw_metrics
from fitplan.profiles.loader import load_profile, profile_from_dict, profile_to_dict
from fitplan.profiles.models import FitPlanError, InvalidProfileError, UserProfile

__all__ = [
    "FitPlanError",
    "InvalidProfileError",
    "RawMetrics",
    "UserProfile",
    "compute_raw_metrics",
    "load_profile",
    "profile_from_dict",
    "profile_to_dict",
]
