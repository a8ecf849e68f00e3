"""Configuration package."""

from investment_returns.config.settings import (
    AppSettings,
    Settings,
    SolverSettings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "Settings",
    "SolverSettings",
    "get_settings",
    "validate_all_settings",
]
