"""
Decimal rounding helpers for money amounts.

Tax components are computed in float and rounded to cents (or paise) with
ROUND_HALF_UP through Decimal, so repeated calculations on the same inputs
produce identical snapshots and 0.1 + 0.2 style float noise never leaks
into reported figures.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Union

Numeric = Union[int, float, str, Decimal]

MONEY_PLACES = Decimal("0.01")
RATE_PLACES = Decimal("0.0001")

CURRENCY_SYMBOLS = {
    "US": "$",
    "IN": "₹",
}


def to_decimal(value: Numeric) -> Decimal:
    """
    Convert a numeric value to Decimal.

    Examples:
        >>> to_decimal(100.50)
        Decimal('100.5')
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        # Convert float to string first to preserve representation
        return Decimal(str(value))
    return Decimal(value)


def money(value: Numeric) -> Decimal:
    """
    Round to the smallest currency unit.

    Examples:
        >>> money(100.995)
        Decimal('101.00')
    """
    return to_decimal(value).quantize(MONEY_PLACES, rounding=ROUND_HALF_UP)


def round_money(value: Numeric) -> float:
    """money() as a float, the representation stored in snapshots."""
    return float(money(value))


def round_rate(value: Numeric) -> float:
    """Round a rate to four decimal places."""
    return float(to_decimal(value).quantize(RATE_PLACES, rounding=ROUND_HALF_UP))


def format_money(value: Numeric, country: str = "US") -> str:
    """
    Format an amount with the jurisdiction's currency symbol.

    Examples:
        >>> format_money(1234567.891)
        '$1,234,567.89'
        >>> format_money(2000000, "IN")
        '₹2,000,000.00'
    """
    symbol = CURRENCY_SYMBOLS.get(country.upper(), "")
    return f"{symbol}{money(value):,.2f}"


def format_percentage(value: Numeric, decimal_places: int = 1) -> str:
    """
    Format a rate as a percentage string.

    Examples:
        >>> format_percentage(0.1413, 2)
        '14.13%'
    """
    pct = to_decimal(value) * 100
    return f"{pct:.{decimal_places}f}%"
