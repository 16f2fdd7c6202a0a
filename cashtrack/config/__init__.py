"""Configuration package."""

from cashtrack.config.settings import (
    DashboardSettings,
    DisplaySettings,
    InsightSettings,
    NormalizationSettings,
    Settings,
    StoreSettings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "DashboardSettings",
    "DisplaySettings",
    "InsightSettings",
    "NormalizationSettings",
    "Settings",
    "StoreSettings",
    "get_settings",
    "validate_all_settings",
]
