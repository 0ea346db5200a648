"""
Domain layer for the classification and tax estimation engine.

Holds the repository interfaces the engine depends on and the exceptions it
raises.
"""

from .exceptions import (
    TaxEngineError,
    UnsupportedJurisdictionError,
    ProfileNotFoundError,
    InvalidTaxPeriodError,
    TaxConfigurationError,
)

__all__ = [
    "TaxEngineError",
    "UnsupportedJurisdictionError",
    "ProfileNotFoundError",
    "InvalidTaxPeriodError",
    "TaxConfigurationError",
]
