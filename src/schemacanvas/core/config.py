"""Configuration management for SchemaCanvas.

This module uses Pydantic Settings to load and validate configuration from
environment variables and .env files. Configuration is loaded once and is
immutable during runtime.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration settings.

    Settings are loaded from environment variables and .env files.
    All configuration values are validated at startup.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="SCHEMACANVAS_",
        case_sensitive=False,
        extra="ignore",
    )

    # Application Settings
    app_name: str = "SchemaCanvas"
    app_version: str = "0.1.0"
    environment: Literal["development", "production", "testing"] = "development"

    # Logging Settings
    log_level: str = "INFO"
    log_format: Literal["json", "console"] = "json"

    # Code Generation Settings
    default_generator: str = "mongoose"

    # Export Settings
    schema_version: str = "1.0"
    export_indent: int = Field(default=2, ge=0, le=8)
    export_filename_prefix: str = "mongodb-schema"

    # Canvas Layout Settings
    grid_origin_x: float = 100
    grid_origin_y: float = 100
    grid_spacing: float = 220
    duplicate_offset: float = 50
    duplicate_suffix: str = " Copy"

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """Normalize and check the log level name."""
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Invalid log level '{v}'")
        return level

    @field_validator("default_generator")
    @classmethod
    def normalize_default_generator(cls, v: str) -> str:
        """Normalize generator keys to lowercase."""
        return v.strip().lower()

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"

    @property
    def is_testing(self) -> bool:
        """Check if running in testing environment."""
        return self.environment == "testing"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Returns:
        Settings: Cached application settings instance.
    """
    return Settings()
