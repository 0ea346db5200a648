"""
India income tax, GST and presumptive taxation for digital creators.

Covers the new and old personal income tax regimes with 4% health and
education cess, GST on digital services above the registration threshold,
Section 44ADA presumptive taxation and the professional tax ceiling.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

from calculator.brackets import evaluate_brackets
from calculator.decimal_math import format_percentage, round_money
from calculator.tax_year_config import IndiaTaxConfig, load_india_config
from models.tax_calculation import ExpenseBreakdown, IncomeBreakdown, TaxPeriod
from models.tax_profile import TaxProfile

from .base import JurisdictionCalculator, JurisdictionTaxes

logger = logging.getLogger(__name__)

DEFAULT_SERVICE_TYPE = "digital_services"


class IndiaTaxCalculator(JurisdictionCalculator):
    """
    Indian tax calculator.

    Usage:
        calc = IndiaTaxCalculator()
        calc.presumptive_tax(3_000_000)["presumptive_profit"]  # 1_500_000
    """

    code = "IN"
    currency = "INR"

    def __init__(self, config: Optional[IndiaTaxConfig] = None):
        self.config = config or load_india_config()

    def itemized_deductions(self, profile: TaxProfile) -> Dict[str, float]:
        """Chapter VI-A deductions from the profile, capped at the statutory limits."""
        limit_80d = (
            self.config.section_80d_senior_limit
            if profile.senior_citizen
            else self.config.section_80d_limit
        )
        return {
            "section_80c": min(profile.section_80c, self.config.section_80c_limit),
            "section_80d": min(profile.section_80d, limit_80d),
            "section_80e": profile.section_80e,
        }

    def income_tax(
        self,
        income: float,
        regime: str = "new",
        deductions: Optional[Mapping[str, float]] = None,
    ) -> Dict[str, Any]:
        """
        Income tax and cess under a regime.

        The new regime subtracts only the standard deduction; the old regime
        subtracts itemized deductions, never more than the income itself.

        Returns:
            Dict with income_tax, cess, total_tax, effective_income,
            effective_rate and regime.
        """
        regime_config = self.config.regime(regime)

        if regime_config.allows_itemized_deductions:
            total_deductions = min(sum((deductions or {}).values()), max(income, 0.0))
            effective_income = max(0.0, income - total_deductions)
        else:
            effective_income = max(0.0, income - regime_config.standard_deduction)

        tax = evaluate_brackets(effective_income, regime_config.brackets)
        cess = tax * self.config.cess_rate
        total = tax + cess
        return {
            "income_tax": tax,
            "cess": cess,
            "total_tax": total,
            "effective_income": effective_income,
            "effective_rate": total / effective_income if effective_income > 0 else 0.0,
            "regime": regime_config.name,
        }

    def gst(self, gross_income: float, service_type: str = DEFAULT_SERVICE_TYPE) -> Dict[str, Any]:
        """GST on gross service income above the registration threshold."""
        if gross_income <= self.config.gst_threshold:
            return {
                "gst_required": False,
                "gst_amount": 0.0,
                "rate": 0.0,
                "message": "GST registration not required (under ₹20 lakh threshold)",
            }

        rate = self.config.gst_rates.get(
            service_type, self.config.gst_rates.get(DEFAULT_SERVICE_TYPE, 0.18)
        )
        return {
            "gst_required": True,
            "gst_amount": gross_income * rate,
            "rate": rate,
            "service_type": service_type,
            "message": f"GST applicable at {format_percentage(rate, 0)} on income above ₹20 lakh",
        }

    def presumptive_tax(self, gross_income: float) -> Dict[str, Any]:
        """
        Section 44ADA presumptive taxation.

        Up to the threshold, a fixed share of gross receipts is deemed profit
        and taxed under the presumptive regime's table.
        """
        if gross_income > self.config.presumptive_threshold:
            return {
                "applicable": False,
                "message": "Income exceeds ₹50 lakh threshold for presumptive taxation",
            }

        profit = gross_income * self.config.presumptive_profit_rate
        return {
            "applicable": True,
            "gross_income": gross_income,
            "presumptive_profit": profit,
            "profit_rate": self.config.presumptive_profit_rate,
            "tax_calculation": self.income_tax(profit, self.config.presumptive_regime),
            "message": (
                f"Under Section 44ADA: {format_percentage(self.config.presumptive_profit_rate, 0)} "
                f"of income treated as profit"
            ),
        }

    def professional_tax(self, gross_income: float) -> float:
        if gross_income <= 0:
            return 0.0
        return min(self.config.professional_tax_max, gross_income * self.config.professional_tax_rate)

    def calculate(
        self,
        income: IncomeBreakdown,
        expenses: ExpenseBreakdown,
        profile: TaxProfile,
    ) -> JurisdictionTaxes:
        gross = income.business_income
        net_income = gross - expenses.deductible_expenses
        presumptive = (
            profile.presumptive_taxation and gross <= self.config.presumptive_threshold
        )

        if presumptive:
            income_tax = self.presumptive_tax(gross)["tax_calculation"]
            regime = self.config.presumptive_regime
        else:
            regime = profile.tax_regime
            income_tax = self.income_tax(
                max(0.0, net_income), regime, self.itemized_deductions(profile)
            )

        gst = self.gst(gross)
        components = {
            "income_tax": round_money(income_tax["income_tax"]),
            "cess": round_money(income_tax["cess"]),
            "gst": round_money(gst["gst_amount"]),
            "professional_tax": round_money(self.professional_tax(gross)),
        }
        logger.debug(f"IN components for gross {gross:.2f} ({regime} regime): {components}")

        return JurisdictionTaxes(
            adjusted_gross_income=round_money(net_income),
            taxable_income=round_money(income_tax["effective_income"]),
            components=components,
            tax_regime=regime,
            presumptive_taxation=presumptive,
            gst_advice=gst["message"],
        )

    def tax_jar_amount(
        self,
        income: IncomeBreakdown,
        total_tax_owed: float,
        period: TaxPeriod,
    ) -> float:
        """A flat share of gross business income."""
        return round_money(income.business_income * self.config.tax_jar_gross_income_rate)

    def set_aside_rates(self) -> Dict[str, float]:
        return dict(self.config.set_aside_rates)
