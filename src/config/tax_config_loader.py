"""
Tax Configuration Loader.

Loads jurisdiction tax parameters from YAML configuration files, enabling:
- Annual updates without code changes
- Environment-specific overrides of scalar parameters
- A versioned metadata block per jurisdiction file
"""

from __future__ import annotations

import copy
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from domain.exceptions import TaxConfigurationError, UnsupportedJurisdictionError

logger = logging.getLogger(__name__)

# Default config directory
CONFIG_DIR = Path(__file__).parent / "tax_parameters"


@dataclass
class ConfigMetadata:
    """Metadata about a configuration file."""
    version: str
    tax_year: int
    effective_date: str
    source: str  # "IRS", "CBDT", "custom"
    irs_references: List[str] = field(default_factory=list)
    last_updated: str = ""
    updated_by: str = ""
    notes: str = ""


class TaxConfigLoader:
    """
    Loads and caches jurisdiction configuration from YAML files.

    Files are discovered as ``<jurisdiction>.yaml`` (lower-case country code)
    inside the config directory.
    """

    def __init__(self, config_dir: Optional[Path] = None):
        """
        Initialize the config loader.

        Args:
            config_dir: Directory containing YAML config files.
                       Defaults to src/config/tax_parameters/
        """
        self.config_dir = Path(config_dir) if config_dir else CONFIG_DIR
        self._configs: Dict[str, Dict[str, Any]] = {}
        self._metadata: Dict[str, ConfigMetadata] = {}

    def available_jurisdictions(self) -> List[str]:
        """Country codes that have a parameter file."""
        return sorted(p.stem.upper() for p in self.config_dir.glob("*.yaml"))

    def load_config(self, jurisdiction: str) -> Dict[str, Any]:
        """
        Load configuration for a jurisdiction.

        Args:
            jurisdiction: Country code (e.g., "US", "IN")

        Returns:
            Dictionary of tax parameters (a copy, safe to mutate)

        Raises:
            UnsupportedJurisdictionError: no parameter file exists
        """
        code = (jurisdiction or "").strip().upper()
        if code not in self._configs:
            config = self._load_from_file(code)
            config = self._apply_env_overrides(config, code)
            self._configs[code] = config
        return copy.deepcopy(self._configs[code])

    def _load_from_file(self, code: str) -> Dict[str, Any]:
        """Load configuration from the jurisdiction's YAML file."""
        path = self.config_dir / f"{code.lower()}.yaml"
        if not code or not path.exists():
            raise UnsupportedJurisdictionError(code or None, self.available_jurisdictions())

        logger.info(f"Loading tax config from {path}")
        with open(path, "r") as f:
            config = yaml.safe_load(f) or {}

        if not isinstance(config, dict):
            raise TaxConfigurationError(f"{path}: expected a mapping at top level")

        if "_metadata" in config:
            self._metadata[code] = ConfigMetadata(**config.pop("_metadata"))

        return config

    def _apply_env_overrides(self, config: Dict[str, Any], code: str) -> Dict[str, Any]:
        """Apply environment variable overrides to scalar parameters."""
        # Environment variables like TAX_US_SELF_EMPLOYMENT_TAX_RATE=0.15
        prefix = f"TAX_{code}_"

        for key, value in os.environ.items():
            if not key.startswith(prefix):
                continue
            param_name = key[len(prefix):].lower()
            current = config.get(param_name)
            if isinstance(current, (dict, list)):
                logger.warning(f"Ignoring env override for structured parameter: {key}")
                continue
            try:
                config[param_name] = float(value) if "." in value else int(value)
            except ValueError:
                config[param_name] = value
            logger.info(f"Applied env override: {param_name}={value}")

        return config

    def get_metadata(self, jurisdiction: str) -> Optional[ConfigMetadata]:
        """Get metadata for a jurisdiction's configuration."""
        code = (jurisdiction or "").strip().upper()
        self.load_config(code)  # Ensure loaded
        return self._metadata.get(code)


# Global singleton
_config_loader: Optional[TaxConfigLoader] = None


def get_config_loader() -> TaxConfigLoader:
    """Get the global config loader instance."""
    global _config_loader
    if _config_loader is None:
        from .settings import get_engine_settings

        _config_loader = TaxConfigLoader(get_engine_settings().tax_parameter_dir)
    return _config_loader


def clear_config_cache() -> None:
    """Clear the configuration cache (useful for testing)."""
    global _config_loader
    _config_loader = None
