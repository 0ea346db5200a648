"""
United States estimated tax for self-employed creators.

Federal income tax on AGI less the standard deduction, a flat state rate
and self-employment tax including the additional Medicare surcharge.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from calculator.brackets import bracket_breakdown, evaluate_brackets, marginal_rate
from calculator.decimal_math import format_money, round_money
from calculator.tax_year_config import USTaxConfig, load_us_config
from models.tax_calculation import ExpenseBreakdown, IncomeBreakdown, TaxPeriod
from models.tax_profile import TaxProfile

from .base import JurisdictionCalculator, JurisdictionTaxes

logger = logging.getLogger(__name__)


class USTaxCalculator(JurisdictionCalculator):
    """
    US federal, state and self-employment tax.

    Usage:
        calc = USTaxCalculator()
        calc.federal_income_tax(85000, "single")
    """

    code = "US"
    currency = "USD"

    def __init__(self, config: Optional[USTaxConfig] = None):
        self.config = config or load_us_config()

    def federal_income_tax(self, adjusted_gross_income: float, filing_status: str = "single") -> float:
        if adjusted_gross_income <= 0:
            return 0.0
        taxable = max(0.0, adjusted_gross_income - self.config.standard_deduction_for(filing_status))
        return evaluate_brackets(taxable, self.config.brackets_for(filing_status))

    def state_tax_rate(self, state: Optional[str], custom_rate: Optional[float] = None) -> float:
        if custom_rate is not None:
            return custom_rate
        if state:
            return self.config.state_tax_rates.get(state.upper(), self.config.default_state_tax_rate)
        return self.config.default_state_tax_rate

    def state_tax(
        self,
        adjusted_gross_income: float,
        state: Optional[str] = None,
        custom_rate: Optional[float] = None,
    ) -> float:
        """Flat-rate state income tax."""
        if adjusted_gross_income <= 0:
            return 0.0
        return adjusted_gross_income * self.state_tax_rate(state, custom_rate)

    def self_employment_tax(self, self_employment_income: float) -> float:
        """SE tax plus 0.9% additional Medicare on the portion above the threshold."""
        if self_employment_income <= 0:
            return 0.0
        tax = self_employment_income * self.config.self_employment_tax_rate
        threshold = self.config.additional_medicare_threshold
        if self_employment_income > threshold:
            tax += (self_employment_income - threshold) * self.config.additional_medicare_rate
        return tax

    def calculate(
        self,
        income: IncomeBreakdown,
        expenses: ExpenseBreakdown,
        profile: TaxProfile,
    ) -> JurisdictionTaxes:
        agi = income.business_income - expenses.deductible_expenses
        se_income = max(0.0, agi)
        taxable = max(0.0, agi - self.config.standard_deduction_for(profile.filing_status))

        components = {
            "federal_income_tax": round_money(self.federal_income_tax(agi, profile.filing_status)),
            "state_tax": round_money(self.state_tax(agi, profile.state, profile.state_tax_rate)),
            "self_employment_tax": round_money(self.self_employment_tax(se_income)),
        }
        logger.debug(f"US components for AGI {agi:.2f}: {components}")
        if logger.isEnabledFor(logging.DEBUG):
            brackets = self.config.brackets_for(profile.filing_status)
            logger.debug(
                f"Federal brackets at marginal rate {marginal_rate(taxable, brackets):.0%}: "
                f"{bracket_breakdown(taxable, brackets)}"
            )

        return JurisdictionTaxes(
            adjusted_gross_income=round_money(agi),
            taxable_income=round_money(taxable),
            components=components,
        )

    def tax_jar_amount(
        self,
        income: IncomeBreakdown,
        total_tax_owed: float,
        period: TaxPeriod,
    ) -> float:
        """max(owed * 1.10, total income * 25%), projected onto the full year."""
        factor = period.annualization_factor
        return round_money(max(
            total_tax_owed * factor * self.config.tax_jar_owed_multiplier,
            income.total_income * factor * self.config.tax_jar_income_floor_rate,
        ))

    def set_aside_rates(self) -> Dict[str, float]:
        return dict(self.config.set_aside_rates)

    def home_office_deduction(
        self,
        office_sqft: float,
        home_sqft: Optional[float] = None,
    ) -> Dict[str, Any]:
        """
        Simplified-method home office deduction.

        Args:
            office_sqft: Square footage used exclusively for the business.
            home_sqft: Total home square footage, for the business-use share.

        Returns:
            Dict with simplified_method, percentage and a recommendation.
        """
        if office_sqft < 0 or (home_sqft is not None and home_sqft < 0):
            raise ValueError("Square footage cannot be negative")

        eligible_sqft = min(office_sqft, self.config.home_office_max_sqft)
        deduction = min(
            eligible_sqft * self.config.home_office_rate_per_sqft,
            self.config.home_office_max_deduction,
        )
        percentage = min(office_sqft / home_sqft, 1.0) if home_sqft else 0.0

        if deduction > 0:
            recommendation = (
                f"You could deduct {format_money(deduction)} using the simplified "
                f"home office method."
            )
        else:
            recommendation = "Consider setting up a dedicated home office space for tax deductions."

        return {
            "simplified_method": round_money(deduction),
            "percentage": percentage,
            "recommendation": recommendation,
        }
