"""Plan safety validation."""

from __future__ import annotations

from fitplan.validation.engine import validate
from fitplan.validation.models import (
    AlternativeRef,
    RuleCode,
    RuleResult,
    Severity,
    StrategyKind,
    ValidationVerdict,
)

__all__ = [
    "AlternativeRef",
    "RuleCode",
    "RuleResult",
    "Severity",
    "StrategyKind",
    "ValidationVerdict",
    "validate",
]
