"""
Application configuration from environment.
DATABASE_URL is required; everything else has a default.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment (and .env file)."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # HTTP listener
    host: str = "0.0.0.0"
    port: int = 3000

    # Database
    database_url: str = Field(min_length=1)
    db_pool_size: int = Field(10, ge=1)
    db_max_overflow: int = Field(0, ge=0)
    db_pool_timeout: float = Field(10.0, gt=0)
    db_echo: bool = False

    # Errors: include driver text in 500 responses
    expose_storage_errors: bool = True

    # Observability
    sentry_dsn: Optional[str] = None
    app_env: str = "development"
    log_level: str = "INFO"

    # API
    api_prefix: str = "/api"

    @field_validator("database_url", mode="before")
    @classmethod
    def _strip_database_url(cls, v):
        return v.strip() if isinstance(v, str) else v


@lru_cache
def get_settings() -> Settings:
    return Settings()
