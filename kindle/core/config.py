"""Configuration management using Pydantic Settings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="",
        case_sensitive=False,
        extra="ignore",
    )

    # Logging
    kindle_log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    kindle_debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )
    kindle_log_dir: str | None = Field(
        default=None,
        description="Directory for rotating log files (disabled when unset)",
    )

    # Extensions
    kindle_extension_group: str = Field(
        default="kindle.extensions",
        description="Entry point group scanned for extensions",
    )
    kindle_extensions: list[str] = Field(
        default_factory=list,
        description="Extra extension references (module:attr) always loaded",
    )
    kindle_task_group: str = Field(
        default="kindle.tasks",
        description="Entry point group scanned for runnable tasks",
    )

    # Sources
    kindle_source_globs: list[str] = Field(
        default_factory=lambda: ["**/*.py"],
        description="Globs used when including every project source",
    )
    kindle_scan_workers: int = Field(
        default=8,
        ge=1,
        le=64,
        description="Maximum number of files parsed concurrently by the scanner",
    )
    kindle_compile_workers: int = Field(
        default=1,
        ge=0,
        le=64,
        description="Worker processes for byte-compilation (0 = one per CPU)",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Returns:
        Settings instance loaded from environment.

    Example:
        >>> settings = get_settings()
        >>> settings.kindle_scan_workers
        8
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing)."""
    get_settings.cache_clear()
