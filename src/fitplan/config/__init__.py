"""Settings loading."""

from __future__ import annotations

from fitplan.config.settings import (
    AdjustmentConfig,
    RateBracket,
    RateThresholds,
    Settings,
    default_config_path,
    get_settings,
    reload_settings,
)

__all__ = [
    "AdjustmentConfig",
    "RateBracket",
    "RateThresholds",
    "Settings",
    "default_config_path",
    "get_settings",
    "reload_settings",
]
