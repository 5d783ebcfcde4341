"""Centralized application configuration using Pydantic settings."""
from functools import lru_cache
from typing import List, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-driven configuration for the dashboard service."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    database_url: str = Field(
        default="sqlite:///./escola.db",
        description="SQLAlchemy database URL backing the key-value storage.",
    )
    storage_backend: Literal["sql", "memory"] = Field(
        default="sql",
        description="Where the store persists its collections. 'memory' keeps everything in-process.",
    )
    jwt_secret: str = Field(default="super-secret", description="Session token signing secret")
    jwt_algorithm: str = Field(default="HS256", description="Session token signing algorithm")
    session_ttl_minutes: int = Field(default=480, description="Session lifetime in minutes")
    cors_origins: List[str] = Field(default_factory=lambda: ["*"], description="Allowed CORS origins")
    default_rate_limit: str = Field(default="60/minute", description="Global rate limiting rule")
    rate_limiting_enabled: bool = Field(default=True, description="Toggle to disable SlowAPI limits (useful in tests)")
    log_dir: str = Field(default="logs", description="Directory for the HTTP audit logs")

    dashboard_service_port: int = 8010


@lru_cache
def get_settings() -> Settings:
    """Return a cached instance of the Settings object."""

    return Settings()


def reset_settings_cache() -> None:
    """Clear the cached Settings instance (useful for tests)."""

    get_settings.cache_clear()
