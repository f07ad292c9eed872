"""Application settings and configuration management."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml


def _default_config_dir() -> Path:
    """Return the default configuration directory."""
    return Path.home() / ".fitplan"


def default_config_path() -> Path:
    return _default_config_dir() / "config.yaml"


@dataclass
class RateBracket:
    """Weekly loss-rate limits for users at or above min_bmi.

    Rates are percentages of current body weight per week.
    """

    min_bmi: float
    warn_pct: float
    block_pct: float


def _default_brackets() -> list[RateBracket]:
    return [
        RateBracket(min_bmi=0.0, warn_pct=1.0, block_pct=1.5),
        RateBracket(min_bmi=35.0, warn_pct=1.5, block_pct=1.5),
    ]


@dataclass
class RateThresholds:
    """Weight-change rate configuration."""

    optimal_pct: float = 0.75  # above this a rate counts as aggressive
    gain_warning_pct: float = 1.0
    brackets: list[RateBracket] = field(default_factory=_default_brackets)

    def bracket_for(self, bmi: float) -> RateBracket:
        """Return the bracket with the highest min_bmi not above bmi."""
        ordered = sorted(self.brackets, key=lambda b: b.min_bmi)
        chosen = ordered[0]
        for bracket in ordered:
            if bmi >= bracket.min_bmi:
                chosen = bracket
        return chosen


@dataclass
class AdjustmentConfig:
    """Bounds for the alternative-plan search."""

    max_probes: int = 20
    safe_max_frequency: int = 6
    max_alternatives: int = 4
    target_resolution_kg: float = 0.5
    max_timeline_weeks: int = 104


@dataclass
class DefaultsConfig:
    """Default values for various operations."""

    output_format: str = "table"  # "table", "json", "markdown"


@dataclass
class Settings:
    """Main application settings."""

    rates: RateThresholds = field(default_factory=RateThresholds)
    adjustment: AdjustmentConfig = field(default_factory=AdjustmentConfig)
    defaults: DefaultsConfig = field(default_factory=DefaultsConfig)

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> "Settings":
        """Load settings from YAML file or return defaults.

        Args:
            config_path: Path to config.yaml. If None, uses ~/.fitplan/config.yaml

        Returns:
            Settings instance
        """
        if config_path is None:
            config_path = default_config_path()

        if not config_path.exists():
            return cls()

        with open(config_path) as f:
            data = yaml.safe_load(f) or {}

        settings = cls()

        # Parse rate thresholds
        if "rates" in data:
            rate_data = data["rates"]
            if "optimal_pct" in rate_data:
                settings.rates.optimal_pct = float(rate_data["optimal_pct"])
            if "gain_warning_pct" in rate_data:
                settings.rates.gain_warning_pct = float(rate_data["gain_warning_pct"])
            if "brackets" in rate_data:
                if not rate_data["brackets"]:
                    raise ValueError(
                        f"{config_path}: rates.brackets must list at least one bracket"
                    )
                settings.rates.brackets = [
                    RateBracket(
                        min_bmi=float(b.get("min_bmi", 0.0)),
                        warn_pct=float(b["warn_pct"]),
                        block_pct=float(b["block_pct"]),
                    )
                    for b in rate_data["brackets"]
                ]

        # Parse adjustment search config
        if "adjustment" in data:
            adj_data = data["adjustment"]
            if "max_probes" in adj_data:
                settings.adjustment.max_probes = int(adj_data["max_probes"])
            if "safe_max_frequency" in adj_data:
                settings.adjustment.safe_max_frequency = int(
                    adj_data["safe_max_frequency"]
                )
            if "max_alternatives" in adj_data:
                settings.adjustment.max_alternatives = int(adj_data["max_alternatives"])
            if "target_resolution_kg" in adj_data:
                settings.adjustment.target_resolution_kg = float(
                    adj_data["target_resolution_kg"]
                )
            if "max_timeline_weeks" in adj_data:
                settings.adjustment.max_timeline_weeks = int(
                    adj_data["max_timeline_weeks"]
                )

        # Parse defaults
        if "defaults" in data:
            def_data = data["defaults"]
            if "output_format" in def_data:
                settings.defaults.output_format = def_data["output_format"]

        return settings

    def save(self, config_path: Optional[Path] = None) -> None:
        """Save current settings to YAML file.

        Args:
            config_path: Path to save config.yaml. If None, uses ~/.fitplan/config.yaml
        """
        if config_path is None:
            config_path = default_config_path()

        config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(config_path, "w") as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)

    def to_dict(self) -> dict:
        return {
            "rates": {
                "optimal_pct": self.rates.optimal_pct,
                "gain_warning_pct": self.rates.gain_warning_pct,
                "brackets": [
                    {
                        "min_bmi": b.min_bmi,
                        "warn_pct": b.warn_pct,
                        "block_pct": b.block_pct,
                    }
                    for b in self.rates.brackets
                ],
            },
            "adjustment": {
                "max_probes": self.adjustment.max_probes,
                "safe_max_frequency": self.adjustment.safe_max_frequency,
                "max_alternatives": self.adjustment.max_alternatives,
                "target_resolution_kg": self.adjustment.target_resolution_kg,
                "max_timeline_weeks": self.adjustment.max_timeline_weeks,
            },
            "defaults": {
                "output_format": self.defaults.output_format,
            },
        }


# Global settings instance (lazy loaded, CLI only)
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance, loading from disk if needed."""
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings


def reload_settings(config_path: Optional[Path] = None) -> Settings:
    """Force reload settings from disk."""
    global _settings
    _settings = Settings.load(config_path)
    return _settings
