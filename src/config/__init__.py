"""Configuration module for the classification and tax estimation engine."""

from .settings import (
    EngineSettings,
    LoggingSettings,
    get_engine_settings,
    get_logging_settings,
)
from .tax_config_loader import TaxConfigLoader, get_config_loader, clear_config_cache

__all__ = [
    "EngineSettings",
    "LoggingSettings",
    "get_engine_settings",
    "get_logging_settings",
    "TaxConfigLoader",
    "get_config_loader",
    "clear_config_cache",
]
