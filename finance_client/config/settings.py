"""
Configuration Management for the Finance Client

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Every tunable the reconciliation layer depends on (server location,
page size, the weeks-per-month factor of the monthly budget view)
is validated once at startup instead of being scattered as literals.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ApiSettings(BaseSettings):
    """Remote finance server configuration."""

    model_config = SettingsConfigDict(
        env_prefix="FINANCE_API_",
        extra="ignore"
    )

    base_url: str = Field(
        default="https://finanzas-zdt0.onrender.com",
        description="Root URL of the finance server"
    )
    token: Optional[str] = Field(
        default=None,
        description="Bearer token sent with every private request"
    )
    timeout_seconds: float = Field(
        default=15.0,
        gt=0,
        le=120,
        description="Per-request timeout"
    )

    # Retries apply to idempotent reads only
    retry_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Attempts for a GET that fails at the transport level"
    )
    retry_wait_min: float = Field(
        default=1.0,
        ge=0.0,
        description="Minimum backoff between read attempts (seconds)"
    )
    retry_wait_max: float = Field(
        default=8.0,
        ge=0.0,
        description="Maximum backoff between read attempts (seconds)"
    )

    @field_validator('base_url')
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Paths are joined with a leading slash."""
        return v.rstrip("/")


class LedgerSettings(BaseSettings):
    """Paginated ledger configuration."""

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_",
        extra="ignore"
    )

    page_size: int = Field(
        default=10,
        ge=1,
        le=100,
        description="Movements requested per page"
    )


class BudgetSettings(BaseSettings):
    """Budget view configuration."""

    model_config = SettingsConfigDict(
        env_prefix="BUDGET_",
        extra="ignore"
    )

    weeks_per_month: int = Field(
        default=4,
        ge=1,
        le=5,
        description="Multiplier turning a weekly target into a monthly target"
    )


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        description="Minimum level for the structured log"
    )

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in allowed:
            raise ValueError(f"Unsupported log level: {v}. Allowed: {sorted(allowed)}")
        return v.upper()


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
    def api(self) -> ApiSettings:
        return ApiSettings()

    @property
    def ledger(self) -> LedgerSettings:
        return LedgerSettings()

    @property
    def budget(self) -> BudgetSettings:
        return BudgetSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, with an extra
    "<name>_error" entry for each section that failed.
    """
    results = {}
    settings = get_settings()

    for name in ("api", "ledger", "budget", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except ValueError as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
