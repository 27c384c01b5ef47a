"""
Application configuration using Pydantic Settings.

All configuration is loaded from environment variables (or a local .env file).
"""

import json
from functools import lru_cache
from typing import Any

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Application
    APP_NAME: str = "Vizu"
    APP_ENV: str = "development"
    DEBUG: bool = False
    SECRET_KEY: str = ""  # Required - loaded from environment

    # Authentication (tokens are issued by the account service)
    JWT_ALGORITHM: str = "HS256"

    # Database - PostgreSQL
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = "vizu"
    POSTGRES_PASSWORD: str = ""
    POSTGRES_DB: str = "vizu"
    DATABASE_URL_OVERRIDE: str | None = None
    DB_ECHO: bool = False

    @field_validator("SECRET_KEY")
    @classmethod
    def validate_required_secrets(cls, v: str, info: Any) -> str:
        """Validate that required secrets are set."""
        if not v:
            raise ValueError(f"{info.field_name} must be set in environment")
        return v

    @property
    def DATABASE_URL(self) -> str:
        """Async SQLAlchemy URL; an explicit override wins over the POSTGRES_* parts."""
        if self.DATABASE_URL_OVERRIDE:
            return self.DATABASE_URL_OVERRIDE
        return (
            f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )

    # CORS - stored as comma-separated string to avoid pydantic-settings JSON parsing issues
    CORS_ORIGINS: str = "http://localhost:3000"

    @property
    def cors_origins_list(self) -> list[str]:
        """Get CORS origins as a list."""
        try:
            return json.loads(self.CORS_ORIGINS)
        except json.JSONDecodeError:
            return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    # Karma rewards
    KARMA_PER_VOTE: int = 3  # Base reward for one accepted vote
    MAX_KARMA: int = 50  # Ceiling of a rater's karma balance

    # Voting flow
    SKIP_TTL_SECONDS: int = 3600  # How long a skipped photo stays hidden from the rater
    SESSION_IDLE_TIMEOUT_MINUTES: int = 30  # Voting sessions idle longer than this are discarded

    # Background jobs
    ENABLE_BACKGROUND_JOBS: bool = True
    SKIP_CLEANUP_INTERVAL_MINUTES: int = 15


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
