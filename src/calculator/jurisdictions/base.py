"""
Jurisdiction calculator interface.

Each jurisdiction turns a period's aggregated income and expenses plus the
user's TaxProfile into a set of named tax components.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, Optional

from calculator.decimal_math import round_money
from models.tax_calculation import ExpenseBreakdown, IncomeBreakdown, TaxPeriod
from models.tax_profile import TaxProfile


@dataclass
class JurisdictionTaxes:
    """Tax components computed for one period."""
    adjusted_gross_income: float
    taxable_income: float
    components: Dict[str, float] = field(default_factory=dict)
    tax_regime: Optional[str] = None
    presumptive_taxation: bool = False
    gst_advice: Optional[str] = None

    @property
    def total_tax_owed(self) -> float:
        return round_money(sum(self.components.values()))


class JurisdictionCalculator(ABC):
    """Base class for per-country tax calculators."""

    code: str = ""
    currency: str = ""

    @abstractmethod
    def calculate(
        self,
        income: IncomeBreakdown,
        expenses: ExpenseBreakdown,
        profile: TaxProfile,
    ) -> JurisdictionTaxes:
        """Compute every tax component for the aggregated period."""
        pass

    @abstractmethod
    def tax_jar_amount(
        self,
        income: IncomeBreakdown,
        total_tax_owed: float,
        period: TaxPeriod,
    ) -> float:
        """Recommended cash reserve for the period's liability."""
        pass

    @abstractmethod
    def set_aside_rates(self) -> Dict[str, float]:
        """Default per-tax set-aside rates, including total_recommended."""
        pass

    def annual_liability(
        self,
        income: IncomeBreakdown,
        expenses: ExpenseBreakdown,
        profile: TaxProfile,
    ) -> float:
        """Total tax owed on already annualized aggregates."""
        return self.calculate(income, expenses, profile).total_tax_owed
