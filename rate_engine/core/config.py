"""
Application configuration loaded from environment variables with sensible
defaults for local development.

All settings are validated at startup via Pydantic ``BaseSettings``.
"""

from decimal import Decimal
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Central configuration for the rate engine service."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # -- Application --
    app_name: str = "Rate Engine API"
    app_version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"

    # -- API --
    api_v1_prefix: str = "/api/v1"

    # -- Money display --
    currency: str = "EUR"
    amount_quantum: str = "0.01"
    percentage_quantum: str = "0.01"

    # -- Rule set lifecycle --
    review_frequency_days: int = 90

    # -- Margin suggestions fallback --
    default_margin_percentage: Decimal = Decimal("15")
    default_minimum_margin: Decimal = Decimal("50")


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
