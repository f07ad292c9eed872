"""Two-phase plan validation."""

from __future__ import annotations

import logging
from typing import Optional

from fitplan.config.settings import Settings
from fitplan.planning.models import AdjustedPlan
from fitplan.profiles.body_calc import RawMetrics
from fitplan.profiles.models import UserProfile
from fitplan.validation.models import RuleResult, ValidationVerdict
from fitplan.validation.rules import BLOCKING_RULES, WARNING_RULES, Rule, RuleContext

logger = logging.getLogger(__name__)


def _run_rules(rules: list[Rule], ctx: RuleContext) -> tuple[RuleResult, ...]:
    results = []
    for rule in rules:
        result = rule(ctx)
        if result is not None:
            results.append(result)
    return tuple(results)


def validate(
    profile: UserProfile,
    raw: RawMetrics,
    adjusted: AdjustedPlan,
    settings: Optional[Settings] = None,
) -> ValidationVerdict:
    """Check an adjusted plan for safety.

    Every blocking rule runs and results accumulate. Warning rules run
    only when nothing blocked, so a blocked verdict never carries warnings.

    Args:
        profile: Onboarding profile
        raw: Metrics for the profile
        adjusted: Plan after the modifier pipeline
        settings: Rate thresholds; defaults when omitted

    Returns:
        ValidationVerdict
    """
    ctx = RuleContext(
        profile=profile,
        raw=raw,
        plan=adjusted,
        settings=settings if settings is not None else Settings(),
    )

    errors = _run_rules(BLOCKING_RULES, ctx)
    if errors:
        logger.debug("Blocked by %s", ", ".join(e.code.value for e in errors))
        return ValidationVerdict(errors=errors)

    warnings = _run_rules(WARNING_RULES, ctx)
    logger.debug("Passed with %d warning(s)", len(warnings))
    return ValidationVerdict(warnings=warnings)
