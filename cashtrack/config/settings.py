"""
Configuration Management for CashTrack

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
The aggregation engine has no hidden global state: display currency,
clamp bounds and insight thresholds are read from these objects and
passed explicitly into the functions that need them.
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DisplaySettings(BaseSettings):
    """Display preferences (the injected display config)."""

    model_config = SettingsConfigDict(
        env_prefix="CASHTRACK_DISPLAY_",
        extra="ignore"
    )

    currency: str = Field(
        default="INR",
        description="Currency code used to render amounts (INR, USD, EUR)"
    )

    @field_validator('currency')
    @classmethod
    def normalize_currency(cls, v: str) -> str:
        """Currency codes are stored upper-case."""
        return v.strip().upper()


class NormalizationSettings(BaseSettings):
    """Bounds applied when coercing raw numbers."""

    model_config = SettingsConfigDict(
        env_prefix="CASHTRACK_NORMALIZATION_",
        extra="ignore"
    )

    amount_bound: float = Field(
        default=1_000_000_000.0,
        gt=0,
        description="Numbers are clamped to [-amount_bound, amount_bound]"
    )


class DashboardSettings(BaseSettings):
    """Limits used when building the dashboard view."""

    model_config = SettingsConfigDict(
        env_prefix="CASHTRACK_DASHBOARD_",
        extra="ignore"
    )

    top_categories: int = Field(
        default=5,
        ge=1,
        description="How many expense categories the breakdown shows"
    )
    trend_months: int = Field(
        default=6,
        ge=1,
        description="How many populated months the trend shows"
    )
    recent_per_kind: int = Field(
        default=5,
        ge=1,
        description="Most recent income/expense records merged into the recent list"
    )
    recent_limit: int = Field(
        default=5,
        ge=1,
        description="How many merged recent transactions the dashboard shows"
    )
    savings_target: float = Field(
        default=50000.0,
        description="Profile savings target the progress bar is measured against"
    )


class InsightSettings(BaseSettings):
    """Thresholds for the heuristic insight rules."""

    model_config = SettingsConfigDict(
        env_prefix="CASHTRACK_INSIGHTS_",
        extra="ignore"
    )

    window_days: int = Field(
        default=30,
        ge=1,
        description="Trailing window (days) the insights look at"
    )
    min_insights: int = Field(
        default=3,
        ge=0,
        description="Filler messages are added until this many exist"
    )
    max_insights: int = Field(
        default=5,
        ge=1,
        description="Output is truncated to this many insights"
    )
    weekly_change_threshold: float = Field(
        default=5.0,
        ge=0.0,
        description="Week-over-week change (%) must exceed this to be reported"
    )
    low_activity_per_day: float = Field(
        default=1.0,
        ge=0.0,
        description="Below this many transactions/day the user is nudged"
    )
    high_activity_per_day: float = Field(
        default=3.0,
        ge=0.0,
        description="Above this many transactions/day the user is praised"
    )


class StoreSettings(BaseSettings):
    """Retry policy for fetches from the transaction store."""

    model_config = SettingsConfigDict(
        env_prefix="CASHTRACK_STORE_",
        extra="ignore"
    )

    fetch_retry_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Attempts per collection fetch before giving up"
    )
    fetch_retry_multiplier: float = Field(
        default=1.0,
        ge=0.0,
        description="Exponential back-off multiplier (seconds)"
    )
    fetch_retry_min_wait: float = Field(
        default=0.5,
        ge=0.0,
        description="Minimum wait between attempts (seconds)"
    )
    fetch_retry_max_wait: float = Field(
        default=5.0,
        ge=0.0,
        description="Maximum wait between attempts (seconds)"
    )


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def display(self) -> DisplaySettings:
        return DisplaySettings()

    @property
    def normalization(self) -> NormalizationSettings:
        return NormalizationSettings()

    @property
    def dashboard(self) -> DashboardSettings:
        return DashboardSettings()

    @property
    def insights(self) -> InsightSettings:
        return InsightSettings()

    @property
    def store(self) -> StoreSettings:
        return StoreSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings load from the current environment.

    Returns a dict of {setting_name: is_valid}, with a
    `<name>_error` entry for each failure. Useful for startup checks.
    """
    results = {}
    settings = get_settings()

    for name in ("display", "normalization", "dashboard", "insights", "store"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
