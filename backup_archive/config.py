"""
Configuration and settings for the backup archive server.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # Document store. Neither value is validated at startup; a missing URI
    # simply makes the initial connection fail and the server runs degraded.
    mongo_uri: Optional[str] = Field(default=None)
    db_name: Optional[str] = Field(default=None)
    files_collection: str = Field(default="files")
    metadata_collection: str = Field(default="backup_metadata")

    # Connection footprint
    connect_timeout_ms: int = Field(default=5000)
    max_pool_size: int = Field(default=1)
    min_pool_size: int = Field(default=0)

    # Listing limits
    default_backup_limit: int = Field(default=50)
    default_file_limit: int = Field(default=100)
    max_list_limit: int = Field(default=1000)

    # Per-call timeout for store operations (unset means unbounded)
    query_timeout_seconds: Optional[float] = Field(default=None)

    # HTTP boundary
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=3000)
    max_json_body_bytes: int = Field(default=1024 * 1024)

    # Development toggles
    use_in_memory_backends: bool = Field(default=False)
    log_level: str = Field(default="INFO")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
