"""
Configuration Management for Investment Returns

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
The solver itself never reads settings; its defaults are module constants.
Settings only feed the calculator and validator layers.
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class SolverSettings(BaseSettings):
    """XIRR solver configuration."""

    model_config = SettingsConfigDict(
        env_prefix="XIRR_",
        extra="ignore"
    )

    tolerance: float = Field(
        default=1e-6,
        gt=0.0,
        lt=1.0,
        description="Stop once two successive rates differ by less than this"
    )
    max_iterations: int = Field(
        default=100,
        ge=1,
        le=10000,
        description="Newton-Raphson steps before giving up"
    )
    default_guess: float = Field(
        default=0.1,
        gt=-1.0,
        description="Starting rate when the caller gives none (0.1 = 10%)"
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
        description="Minimum level for the local structured log"
    )

    # Display
    rate_display_precision: int = Field(
        default=2,
        ge=0,
        le=6,
        description="Decimal places when showing a rate as a percentage"
    )

    # Validation thresholds
    future_date_tolerance_days: int = Field(
        default=0,
        ge=0,
        description="How many days in the future a cash flow date can be"
    )

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Only accept standard logging level names."""
        level = v.strip().upper()
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if level not in allowed:
            raise ValueError(f"Unsupported log level: {v}. Allowed: {sorted(allowed)}")
        return level


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
    def solver(self) -> SolverSettings:
        return SolverSettings()

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

    Returns a dict of {setting_name: is_valid}, plus a
    "<name>_error" entry for every section that failed.
    Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    try:
        _ = settings.solver
        results["solver"] = True
    except Exception as e:
        results["solver"] = False
        results["solver_error"] = str(e)

    try:
        _ = settings.app
        results["app"] = True
    except Exception as e:
        results["app"] = False
        results["app_error"] = str(e)

    return results
