"""Alternative-plan search for blocked goals."""

from __future__ import annotations

from fitplan.adjust.strategies import AlternativePlan, PlanPhase, generate_alternatives

__all__ = ["AlternativePlan", "PlanPhase", "generate_alternatives"]
