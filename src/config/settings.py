"""Application settings using Pydantic Settings.

Centralized configuration for the classification and tax estimation engine.
Every value can be overridden through environment variables using the
prefix of its settings class (for example ``ENGINE_DEFAULT_COUNTRY=IN``).
"""

import logging
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

# Directory holding the jurisdiction YAML files shipped with the package
DEFAULT_TAX_PARAMETER_DIR = Path(__file__).parent / "tax_parameters"


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        extra="ignore",
    )

    level: str = Field(default="INFO", description="Root log level")
    json_output: bool = Field(default=False, description="Emit JSON formatted logs")
    log_file: Optional[Path] = Field(default=None, description="Optional JSON log file")

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Ensure the level is one logging understands."""
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Invalid log level: {v}")
        return level


class EngineSettings(BaseSettings):
    """Tax estimation engine configuration."""

    model_config = SettingsConfigDict(
        env_prefix="ENGINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    default_country: str = Field(
        default="US",
        description="Jurisdiction used when a profile does not name one"
    )
    default_tax_jar_rate: float = Field(
        default=0.25,
        ge=0.0,
        le=1.0,
        description="Set-aside rate used before any tax snapshot exists"
    )
    tax_parameter_dir: Path = Field(
        default=DEFAULT_TAX_PARAMETER_DIR,
        description="Directory containing jurisdiction YAML parameter files"
    )
    max_recommendations: int = Field(
        default=5,
        ge=1,
        description="Maximum number of recommendations attached to a snapshot"
    )

    @field_validator("default_country")
    @classmethod
    def normalize_country(cls, v: str) -> str:
        return v.strip().upper()


@lru_cache
def get_engine_settings() -> EngineSettings:
    """
    Get cached engine settings instance.

    Returns:
        EngineSettings: Cached settings loaded from environment.
    """
    return EngineSettings()


@lru_cache
def get_logging_settings() -> LoggingSettings:
    """
    Get cached logging settings instance.

    Returns:
        LoggingSettings: Cached settings loaded from environment.
    """
    return LoggingSettings()
