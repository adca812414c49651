"""
Application configuration via pydantic-settings.

All settings are loaded from environment variables (or a .env file in dev).
This is the single source of truth for configuration - cache sizing, TTLs
and logging behaviour are never hardcoded elsewhere.
"""

from __future__ import annotations

from enum import StrEnum
from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(StrEnum):
    DEV = "dev"
    PROD = "prod"
    TEST = "test"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ------------------------------------------------------------------ #
    # Application
    # ------------------------------------------------------------------ #
    environment: Environment = Environment.DEV
    debug: bool = False

    # ------------------------------------------------------------------ #
    # Logging
    # ------------------------------------------------------------------ #
    log_level: str = Field(
        default="INFO",
        description="Minimum log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )
    json_logs: bool | None = Field(
        default=None,
        description="Force JSON log output. Defaults to True in production only.",
    )

    # ------------------------------------------------------------------ #
    # CORS
    # ------------------------------------------------------------------ #
    cors_allowed_origins: list[str] = Field(
        default=["http://localhost:5173", "http://localhost:3000"],
        description="Origins allowed to fetch published pages from a browser.",
    )

    # ------------------------------------------------------------------ #
    # Site response cache
    # ------------------------------------------------------------------ #
    site_cache_max_size: int = Field(
        default=1000,
        ge=1,
        description="Maximum number of cached pages before LRU eviction kicks in",
    )
    site_cache_default_ttl_seconds: int = Field(
        default=3600,
        ge=0,
        description="TTL applied when set() is called without ttl_seconds",
    )
    site_cache_stale_window_seconds: int = Field(
        default=86400,
        ge=0,
        description=(
            "How long past expiry an entry may still be served as STALE. "
            "Entries older than expiry + window are purged on the next read."
        ),
    )
    site_cache_vary: list[str] = Field(
        default=["Accept-Encoding", "Accept"],
        description="Request dimensions listed in the Vary response header",
    )
    site_cache_warm_chunk_size: int = Field(
        default=100,
        ge=1,
        description="Pages stored per event-loop turn while warming a site",
    )

    # ------------------------------------------------------------------ #
    # Derived / Computed
    # ------------------------------------------------------------------ #
    @model_validator(mode="after")
    def _set_debug_from_env(self) -> Settings:
        if self.environment == Environment.DEV:
            self.debug = True
        return self

    @property
    def is_dev(self) -> bool:
        return self.environment in (Environment.DEV, Environment.TEST)

    @property
    def is_prod(self) -> bool:
        return self.environment == Environment.PROD

    @property
    def use_json_logs(self) -> bool:
        if self.json_logs is not None:
            return self.json_logs
        return self.is_prod


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings singleton.

    Use FastAPI dependency injection via Depends(get_settings) in endpoints,
    or call directly in non-request contexts (startup, scripts).
    """
    return Settings()
