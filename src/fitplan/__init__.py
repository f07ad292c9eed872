"""Metabolic metrics and plan-safety engine for fitness onboarding."""

from __future__ import annotations

from fitplan.engine import EvaluationResult, evaluate

__version__ = "0.1.0"

__all__ = ["EvaluationResult", "evaluate", "__version__"]
