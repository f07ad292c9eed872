"""Data models for plan safety verdicts."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Severity(Enum):
    ERROR = "error"
    WARNING = "warning"


class RuleCode(str, Enum):
    """Stable, machine-readable rule identifiers.

    New codes may be added; existing values must never be renamed or removed.
    """

    # Blocking
    AT_ESSENTIAL_BODY_FAT = "AT_ESSENTIAL_BODY_FAT"
    TARGET_BMI_UNDERWEIGHT = "TARGET_BMI_UNDERWEIGHT"
    BELOW_BMR = "BELOW_BMR"
    BELOW_ABSOLUTE_MINIMUM = "BELOW_ABSOLUTE_MINIMUM"
    EXTREMELY_UNREALISTIC = "EXTREMELY_UNREALISTIC"
    INSUFFICIENT_EXERCISE = "INSUFFICIENT_EXERCISE"
    NO_MEALS_ENABLED = "NO_MEALS_ENABLED"
    SEVERE_SLEEP_DEPRIVATION = "SEVERE_SLEEP_DEPRIVATION"
    EXCESSIVE_TRAINING_VOLUME = "EXCESSIVE_TRAINING_VOLUME"
    UNSAFE_PREGNANCY_BREASTFEEDING = "UNSAFE_PREGNANCY_BREASTFEEDING"
    CONFLICTING_GOALS = "CONFLICTING_GOALS"

    # Warnings
    AGGRESSIVE_TIMELINE = "AGGRESSIVE_TIMELINE"
    DEFICIT_LIMITED_FOR_SAFETY = "DEFICIT_LIMITED_FOR_SAFETY"
    INSUFFICIENT_SLEEP = "INSUFFICIENT_SLEEP"
    MEDICAL_SUPERVISION = "MEDICAL_SUPERVISION"
    HEART_DISEASE_CLEARANCE = "HEART_DISEASE_CLEARANCE"
    BODY_RECOMP_POSSIBLE = "BODY_RECOMP_POSSIBLE"
    BODY_RECOMP_SLOW = "BODY_RECOMP_SLOW"
    ALCOHOL_IMPACT = "ALCOHOL_IMPACT"
    TOBACCO_IMPACT = "TOBACCO_IMPACT"
    TEEN_ATHLETE_RESTRICTION = "TEEN_ATHLETE_RESTRICTION"
    TEEN_WEIGHT_LOSS = "TEEN_WEIGHT_LOSS"
    ELDERLY_USER = "ELDERLY_USER"
    MENOPAUSE_AGE_RANGE = "MENOPAUSE_AGE_RANGE"
    CONCURRENT_TRAINING_INTERFERENCE = "CONCURRENT_TRAINING_INTERFERENCE"
    OBESITY_ADJUSTED_RATES = "OBESITY_ADJUSTED_RATES"
    NO_EXERCISE_PLANNED = "NO_EXERCISE_PLANNED"
    HIGH_TRAINING_VOLUME = "HIGH_TRAINING_VOLUME"
    LOW_DIET_READINESS = "LOW_DIET_READINESS"
    LIMITED_EQUIPMENT_MUSCLE_GAIN = "LIMITED_EQUIPMENT_MUSCLE_GAIN"
    PHYSICAL_LIMITATION_INTENSITY = "PHYSICAL_LIMITATION_INTENSITY"
    LIMITED_VEGAN_PROTEIN = "LIMITED_VEGAN_PROTEIN"
    MEDICATION_EFFECTS = "MEDICATION_EFFECTS"
    EXCESSIVE_GAIN_RATE = "EXCESSIVE_GAIN_RATE"
    MULTIPLE_LIFESTYLE_FACTORS = "MULTIPLE_LIFESTYLE_FACTORS"
    ELEVATED_WAIST_HIP_RATIO = "ELEVATED_WAIST_HIP_RATIO"
    PREGNANCY_CALORIE_OVERRIDE = "PREGNANCY_CALORIE_OVERRIDE"

    @property
    def severity(self) -> "Severity":
        return Severity.ERROR if self in BLOCKING_CODES else Severity.WARNING


BLOCKING_CODES = frozenset(
    {
        RuleCode.AT_ESSENTIAL_BODY_FAT,
        RuleCode.TARGET_BMI_UNDERWEIGHT,
        RuleCode.BELOW_BMR,
        RuleCode.BELOW_ABSOLUTE_MINIMUM,
        RuleCode.EXTREMELY_UNREALISTIC,
        RuleCode.INSUFFICIENT_EXERCISE,
        RuleCode.NO_MEALS_ENABLED,
        RuleCode.SEVERE_SLEEP_DEPRIVATION,
        RuleCode.EXCESSIVE_TRAINING_VOLUME,
        RuleCode.UNSAFE_PREGNANCY_BREASTFEEDING,
        RuleCode.CONFLICTING_GOALS,
    }
)


class StrategyKind(Enum):
    """Adjustment strategies, in the order they are offered to the user."""

    EXTEND_TIMELINE = "extend_timeline"
    ADD_EXERCISE = "add_exercise"
    ADJUST_TARGET = "adjust_target"
    HYBRID = "hybrid"


@dataclass(frozen=True)
class AlternativeRef:
    """Hint attached to a rule result, expanded later into a full plan."""

    strategy: StrategyKind
    changed_fields: dict[str, Any] = field(default_factory=dict)
    description: str = ""


@dataclass(frozen=True)
class RuleResult:
    code: RuleCode
    severity: Severity
    message: str
    recommendations: tuple[str, ...] = ()
    alternatives: tuple[AlternativeRef, ...] = ()

    @property
    def is_blocking(self) -> bool:
        return self.severity == Severity.ERROR


@dataclass(frozen=True)
class ValidationVerdict:
    """Outcome of both validation phases.

    can_proceed is derived from errors so the two can never disagree.
    """

    errors: tuple[RuleResult, ...] = ()
    warnings: tuple[RuleResult, ...] = ()

    @property
    def can_proceed(self) -> bool:
        return not self.errors

    @property
    def codes(self) -> list[RuleCode]:
        return [r.code for r in self.errors + self.warnings]

    def has(self, code: RuleCode) -> bool:
        return code in self.codes
