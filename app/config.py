"""Application configuration settings."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_FILE = ".env"
ENV_FILE_ENCODING = "utf-8"


class Settings(BaseSettings):
    """Application configuration values loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=ENV_FILE, env_file_encoding=ENV_FILE_ENCODING, extra="ignore"
    )

    database_url: str = Field(
        default="sqlite:///./community.db",
        description="Database connection URL used by SQLAlchemy to connect to the DB",
        min_length=1,
    )
    secret_key: str = Field(
        description="Secret key used to verify bearer tokens", min_length=1
    )
    access_token_expire_minutes: int = Field(
        default=60,
        description="Number of minutes before access tokens expire",
        gt=0,
    )
    app_timezone: str = Field(
        default="UTC",
        description="Timezone used to decide which calendar day an event falls on",
    )
    store_max_retries: int = Field(
        default=5,
        description="Attempts made by read-modify-write helpers before giving up on a version conflict",
        gt=0,
    )
    push_delivery_enabled: bool = Field(
        default=True,
        description="Whether inbox appends are forwarded to the push service",
    )
    expo_push_url: str = Field(
        default="https://exp.host/--/api/v2/push/send",
        description="Endpoint of the Expo push service",
    )
    expo_access_token: str | None = Field(
        default=None,
        description="Optional Expo access token sent as a bearer credential",
    )
    push_max_attempts: int = Field(
        default=3,
        description="Number of attempts made for a single push delivery",
        gt=0,
    )
    push_timeout_seconds: float = Field(
        default=10.0,
        description="Timeout applied to each push HTTP request",
        gt=0,
    )
    service_api_key: str | None = Field(
        default=None,
        description="Key scheduled jobs present in X-Service-Key to trigger sweeps; unset disables them",
    )


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings instance."""

    return Settings()


def reset_settings_cache() -> None:
    """Clear the settings cache to force reloading from the environment."""

    get_settings.cache_clear()


__all__ = ["Settings", "get_settings", "reset_settings_cache"]
