"""
Application settings - pydantic-settings configuration.

This module defines application configuration using pydantic-settings
for environment variable loading with validation and defaults.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Remote verification/registration service
    api_base_url: str = "http://localhost:5000"
    write_timeout_seconds: float = Field(default=10.0, gt=0)  # Profile saves and payment update

    # One-time code settings
    otp_resend_seconds: int = Field(default=60, ge=0)  # Cooldown before a code can be resent
    otp_length: int = Field(default=6, ge=1)

    # Guest pass settings
    pass_id_prefix: str = "VYM"

    # Flows not looked up for this long are dropped
    flow_idle_ttl_seconds: float = Field(default=1800.0, gt=0)

    # Runtime
    tick_interval_seconds: float = Field(default=1.0, gt=0)
    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
