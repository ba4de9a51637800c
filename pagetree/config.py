"""
Application Configuration

Uses pydantic-settings for environment variable loading with validation.
All configuration is centralized here for easy management.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict

from pagetree.core.constants import AUTOSAVE_KEY, HISTORY_CAPACITY, REDIS_KEY_PREFIX


class Settings(BaseSettings):
    """
    Settings loaded from environment variables.

    Environment variables can be set directly or via .env file,
    e.g. ``PAGETREE_STORAGE_BACKEND=redis``.
    """

    model_config = SettingsConfigDict(
        env_prefix="PAGETREE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ==========================================================================
    # Environment
    # ==========================================================================
    environment: Literal["development", "testing", "production"] = Field(
        default="development",
        description="Runtime environment"
    )

    # ==========================================================================
    # History
    # ==========================================================================
    history_capacity: int = Field(
        default=HISTORY_CAPACITY,
        ge=1,
        description="Maximum number of past states kept for undo"
    )

    # ==========================================================================
    # Storage
    # ==========================================================================
    storage_backend: Literal["memory", "file", "redis"] = Field(
        default="memory",
        description="Key-value store used for layout autosave"
    )

    storage_key: str = Field(
        default=AUTOSAVE_KEY,
        description="Key the editor autosaves its layout under"
    )

    storage_dir: str = Field(
        default="/tmp/pagetree/layouts",
        description="Directory for the file storage backend"
    )

    redis_url: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL (redis storage backend)"
    )

    redis_key_prefix: str = Field(
        default=REDIS_KEY_PREFIX,
        description="Prefix applied to every layout key stored in Redis"
    )

    # ==========================================================================
    # Computed Properties
    # ==========================================================================
    @computed_field
    @property
    def is_testing(self) -> bool:
        """Check if running in testing mode."""
        return self.environment == "testing"

    @property
    def storage_path(self) -> Path:
        """Storage directory as a Path."""
        return Path(self.storage_dir)


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()
