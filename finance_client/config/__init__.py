"""Configuration package."""

from finance_client.config.settings import (
    ApiSettings,
    AppSettings,
    BudgetSettings,
    LedgerSettings,
    Settings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "ApiSettings",
    "AppSettings",
    "BudgetSettings",
    "LedgerSettings",
    "Settings",
    "get_settings",
    "validate_all_settings",
]
