"""
Tax calculation for creators.

Bracket arithmetic, jurisdiction parameters and calculators, and the
period aggregator. The async TaxEstimationEngine lives in calculator.engine.
"""

from .brackets import TaxBracket, evaluate_brackets, validate_brackets
from .tax_year_config import IndiaTaxConfig, USTaxConfig, load_india_config, load_us_config
from .jurisdictions import (
    IndiaTaxCalculator,
    JurisdictionCalculator,
    USTaxCalculator,
    get_jurisdiction_calculator,
)
from .period_aggregator import aggregate_period

__all__ = [
    "TaxBracket",
    "evaluate_brackets",
    "validate_brackets",
    "IndiaTaxConfig",
    "USTaxConfig",
    "load_india_config",
    "load_us_config",
    "IndiaTaxCalculator",
    "JurisdictionCalculator",
    "USTaxCalculator",
    "get_jurisdiction_calculator",
    "aggregate_period",
]
