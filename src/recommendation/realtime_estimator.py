"""
Real-Time Tax Jar Estimator

Instant set-aside guidance for a single new payment, derived from the
user's latest full-year snapshot, plus flat-rate set-aside breakdowns for
a gross amount.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

from calculator.decimal_math import format_money, round_money, round_rate
from models.tax_calculation import TaxCalculationResult
from models.transaction import TransactionType

logger = logging.getLogger(__name__)

# Breakdown lines per jurisdiction: output key -> rate key
SET_ASIDE_BREAKDOWN = {
    "US": {
        "federal": "federal_income",
        "state": "state_income",
        "self_employment": "self_employment",
    },
    "IN": {
        "income_tax": "income_tax",
        "gst": "gst",
    },
}


class RealTimeEstimator:
    """
    Per-payment tax jar guidance.

    Usage:
        estimator = RealTimeEstimator(default_rate=0.25)
        estimator.tax_jar_for_payment(latest_snapshot, 1200.0, "income")
    """

    def __init__(self, default_rate: float = 0.25):
        self.default_rate = default_rate

    def effective_rate(self, snapshot: Optional[TaxCalculationResult]) -> float:
        """Total tax owed over business income, or the default rate."""
        if snapshot is None or snapshot.income.business_income <= 0:
            return self.default_rate
        return max(0.0, min(1.0, snapshot.effective_rate))

    def tax_jar_for_payment(
        self,
        snapshot: Optional[TaxCalculationResult],
        amount: float,
        transaction_type: TransactionType,
        country: str = "US",
    ) -> Dict[str, Any]:
        """
        How much of a new payment to set aside.

        Args:
            snapshot: Latest full-year snapshot for the current year, if any.
            amount: Payment amount (sign ignored).
            transaction_type: Only income produces a set-aside.
            country: Currency used in the message.

        Returns:
            Dict with amount_to_set_aside, tax_rate, total_tax_jar and message.
        """
        transaction_type = TransactionType(transaction_type)
        rate = self.effective_rate(snapshot)
        payment = abs(amount)

        if transaction_type == TransactionType.INCOME:
            set_aside = round_money(payment * rate)
            message = (
                f"Set aside {format_money(set_aside, country)} from this "
                f"{format_money(payment, country)} payment for taxes"
            )
        else:
            set_aside = 0.0
            message = f"No tax set-aside needed for this {transaction_type.value}"

        current_jar = snapshot.recommendations.tax_jar_amount if snapshot else 0.0
        return {
            "amount_to_set_aside": set_aside,
            "tax_rate": round_rate(rate),
            "total_tax_jar": round_money(current_jar + set_aside),
            "message": message,
        }


def calculate_tax_set_aside(
    amount: float,
    country: str,
    rates: Mapping[str, float],
    overrides: Optional[Mapping[str, float]] = None,
) -> Dict[str, Any]:
    """
    Flat-rate set-aside breakdown for a gross amount.

    Args:
        amount: Gross income.
        country: Jurisdiction code selecting the breakdown lines.
        rates: Default rates, including total_recommended.
        overrides: Per-rate replacements keyed like ``rates``.

    Returns:
        Dict with gross_income, breakdown, total_set_aside, net_income,
        recommended_rate and country.

    Raises:
        ValueError: For an unknown override key or a rate outside [0, 1].
    """
    effective = dict(rates)
    for key, value in (overrides or {}).items():
        if key not in effective:
            raise ValueError(f"Unknown set-aside rate '{key}' for {country}")
        if value is None:
            continue
        if not 0.0 <= value <= 1.0:
            raise ValueError(f"Set-aside rate '{key}' must be between 0 and 1, got {value}")
        effective[key] = float(value)

    total_rate = effective.get("total_recommended", 0.0)
    lines = SET_ASIDE_BREAKDOWN.get(country.upper(), {})
    breakdown = {
        name: round_money(amount * effective.get(rate_key, 0.0))
        for name, rate_key in lines.items()
    }
    total = round_money(amount * total_rate)

    return {
        "gross_income": amount,
        "breakdown": breakdown,
        "total_set_aside": total,
        "net_income": round_money(amount - total),
        "recommended_rate": total_rate,
        "country": country.upper(),
    }
