"""
Client configuration using Pydantic Settings.

Loaded from VIZU_-prefixed environment variables (or a local .env file).
"""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class ClientSettings(BaseSettings):
    """Vote queue and API client settings."""

    model_config = SettingsConfigDict(
        env_prefix="VIZU_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    API_URL: str = "http://localhost:8000/api/v1"
    REQUEST_TIMEOUT_SECONDS: float = 10.0

    # Local durable queue
    QUEUE_DB_PATH: str = "vizu_pending_votes.db"

    # Retry policy: 1s, 2s, 4s, 8s, 16s, capped at 30s
    MAX_ATTEMPTS: int = 5
    BASE_DELAY_MS: int = 1000
    MAX_DELAY_MS: int = 30000
    MAX_AGE_HOURS: int = 24  # Queued votes older than this are dropped
    SYNC_JITTER_MS: int = 2000  # Spread of re-attempts during a sync pass


@lru_cache
def get_client_settings() -> ClientSettings:
    """Get cached client settings instance."""
    return ClientSettings()
