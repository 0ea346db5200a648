"""
Per-country tax calculators.

Calculators are looked up by the ISO country code of the user's profile.
"""

from typing import Dict, Optional, Type

from domain.exceptions import UnsupportedJurisdictionError

from .base import JurisdictionCalculator, JurisdictionTaxes
from .india import IndiaTaxCalculator
from .us import USTaxCalculator

JURISDICTIONS: Dict[str, Type[JurisdictionCalculator]] = {
    "US": USTaxCalculator,
    "IN": IndiaTaxCalculator,
}


def get_jurisdiction_calculator(country: Optional[str]) -> JurisdictionCalculator:
    """
    Instantiate the calculator for a country code.

    Raises:
        UnsupportedJurisdictionError: If no calculator exists for the country.
    """
    code = (country or "").strip().upper()
    calculator_cls = JURISDICTIONS.get(code)
    if calculator_cls is None:
        raise UnsupportedJurisdictionError(country or "", tuple(JURISDICTIONS))
    return calculator_cls()


__all__ = [
    "JURISDICTIONS",
    "JurisdictionCalculator",
    "JurisdictionTaxes",
    "IndiaTaxCalculator",
    "USTaxCalculator",
    "get_jurisdiction_calculator",
]
