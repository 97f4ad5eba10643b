"""
Configuration and settings for the backup service and its sync client.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-backed settings (FITBACKUP_* variables or .env)."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="FITBACKUP_",
        extra="ignore",
    )

    api_prefix: str = Field(default="/api")

    # Server-side database (Postgres expected, any SQLAlchemy URL works)
    database_url: Optional[str] = Field(default=None)
    use_in_memory_backends: bool = Field(default=False)
    server_max_backups: int = Field(default=5, ge=1)

    # Sync client
    backup_api_url: str = Field(default="http://localhost:8000/api")
    backup_prefix: str = Field(default="fitness-app-backup")
    local_max_backups: int = Field(default=5, ge=1)
    list_retry_attempts: int = Field(default=3, ge=0)
    list_retry_base_delay_seconds: float = Field(default=0.5, ge=0)
    request_timeout_seconds: float = Field(default=10.0, gt=0)
    backup_interval_seconds: float = Field(default=24 * 60 * 60, gt=0)
    prune_on_remote_failure: bool = Field(default=False)
    device_info: Optional[str] = Field(default=None)

    # Persisted key-value state (Redis); in-memory when unset
    redis_url: Optional[str] = Field(default=None)
    redis_state_key: str = Field(default="fitness-app:state")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
