"""Environment-driven configuration using pydantic-settings."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from ambient_weather.datasources.ambient.client import (
    API_BASE,
    API_VERSION,
    MIN_REQUEST_INTERVAL,
)
from ambient_weather.datasources.ambient.models import MAX_LIMIT, MIN_LIMIT
from ambient_weather.services.http import (
    DEFAULT_MAX_BACKOFF,
    DEFAULT_MIN_BACKOFF,
    DEFAULT_RETRY_COUNT,
    DEFAULT_TIMEOUT,
    TransportConfig,
)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="AMBIENT_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    app_name: str = "ambient-weather"

    # Credentials (https://ambientweather.net/account)
    api_key: str = Field(default="", description="Ambient Weather API key")
    application_key: str = Field(default="", description="Ambient Weather application key")

    # Endpoint
    base_url: str = Field(
        default=f"{API_BASE}{API_VERSION}", description="API base URL including version path"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Root log level (DEBUG, INFO, ...)")

    # Transport
    retry_count: int = Field(default=DEFAULT_RETRY_COUNT, ge=0)
    min_backoff: float = Field(default=DEFAULT_MIN_BACKOFF, ge=0, description="Seconds")
    max_backoff: float = Field(default=DEFAULT_MAX_BACKOFF, ge=0, description="Seconds")
    timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0, description="Per-request seconds")
    request_interval: float = Field(
        default=MIN_REQUEST_INTERVAL, ge=0, description="Minimum seconds between requests"
    )

    # History
    limit: int = Field(default=MAX_LIMIT, ge=MIN_LIMIT, le=MAX_LIMIT)

    @property
    def has_credentials(self) -> bool:
        return bool(self.api_key and self.application_key)

    def transport_config(self) -> TransportConfig:
        return TransportConfig(
            retry_count=self.retry_count,
            min_backoff=self.min_backoff,
            max_backoff=self.max_backoff,
            timeout=self.timeout,
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
