"""
Tax calculation snapshot models.

A TaxCalculationResult is an immutable-by-convention snapshot: it is
recomputed on demand and every computed snapshot is saved, so history is
retained by the store.
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Tuple

from domain.exceptions import InvalidTaxPeriodError


@dataclass(frozen=True)
class TaxPeriod:
    """A full tax year, or one calendar quarter of it."""

    year: int
    quarter: Optional[int] = None

    def __post_init__(self):
        if not isinstance(self.year, int) or self.year < 1900 or self.year > 9999:
            raise InvalidTaxPeriodError(f"Invalid tax year: {self.year!r}")
        if self.quarter is not None and self.quarter not in (1, 2, 3, 4):
            raise InvalidTaxPeriodError(f"Quarter must be 1-4, got {self.quarter!r}")

    @property
    def is_full_year(self) -> bool:
        return self.quarter is None

    @property
    def annualization_factor(self) -> float:
        """Multiplier projecting year-to-date figures onto the full year."""
        return 4 / self.quarter if self.quarter else 1.0

    def date_range(self) -> Tuple[date, date]:
        """Inclusive first and last day of the period."""
        if self.quarter is None:
            return date(self.year, 1, 1), date(self.year, 12, 31)
        first_month = (self.quarter - 1) * 3 + 1
        last_month = first_month + 2
        last_day = calendar.monthrange(self.year, last_month)[1]
        return date(self.year, first_month, 1), date(self.year, last_month, last_day)

    @property
    def label(self) -> str:
        return f"Q{self.quarter} {self.year}" if self.quarter else str(self.year)

    def to_dict(self) -> Dict[str, Any]:
        return {"year": self.year, "quarter": self.quarter}


@dataclass
class IncomeBreakdown:
    """Income totals for a period."""
    total_income: float = 0.0
    business_income: float = 0.0
    other_income: float = 0.0
    transaction_count: int = 0
    by_category: Dict[str, float] = field(default_factory=dict)

    def scaled(self, factor: float) -> "IncomeBreakdown":
        return IncomeBreakdown(
            total_income=self.total_income * factor,
            business_income=self.business_income * factor,
            other_income=self.other_income * factor,
            transaction_count=self.transaction_count,
            by_category={k: v * factor for k, v in self.by_category.items()},
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_income": round(self.total_income, 2),
            "business_income": round(self.business_income, 2),
            "other_income": round(self.other_income, 2),
            "transaction_count": self.transaction_count,
            "by_category": {k: round(v, 2) for k, v in self.by_category.items()},
        }


@dataclass
class ExpenseBreakdown:
    """Expense totals for a period."""
    total_expenses: float = 0.0
    deductible_expenses: float = 0.0
    personal_expenses: float = 0.0
    flagged_deductible: float = 0.0  # transactions the classifier marked deductible
    transaction_count: int = 0
    by_category: Dict[str, float] = field(default_factory=dict)

    def scaled(self, factor: float) -> "ExpenseBreakdown":
        return ExpenseBreakdown(
            total_expenses=self.total_expenses * factor,
            deductible_expenses=self.deductible_expenses * factor,
            personal_expenses=self.personal_expenses * factor,
            flagged_deductible=self.flagged_deductible * factor,
            transaction_count=self.transaction_count,
            by_category={k: v * factor for k, v in self.by_category.items()},
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_expenses": round(self.total_expenses, 2),
            "deductible_expenses": round(self.deductible_expenses, 2),
            "personal_expenses": round(self.personal_expenses, 2),
            "flagged_deductible": round(self.flagged_deductible, 2),
            "transaction_count": self.transaction_count,
            "by_category": {k: round(v, 2) for k, v in self.by_category.items()},
        }


@dataclass
class Recommendation:
    """A single tax-saving suggestion."""
    priority: str  # high, medium, low
    title: str
    description: str
    estimated_savings: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "priority": self.priority,
            "title": self.title,
            "description": self.description,
            "estimated_savings": (
                round(self.estimated_savings, 2) if self.estimated_savings is not None else None
            ),
        }


@dataclass
class TaxRecommendations:
    """Recommendations attached to a snapshot."""
    tax_jar_amount: float = 0.0
    next_due_date: Optional[date] = None
    suggested_deductions: List[str] = field(default_factory=list)
    tax_strategy: str = ""
    gst_advice: Optional[str] = None
    tips: List[Recommendation] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tax_jar_amount": round(self.tax_jar_amount, 2),
            "next_due_date": self.next_due_date.isoformat() if self.next_due_date else None,
            "suggested_deductions": list(self.suggested_deductions),
            "tax_strategy": self.tax_strategy,
            "gst_advice": self.gst_advice,
            "tips": [t.to_dict() for t in self.tips],
        }


@dataclass
class TaxCalculationResult:
    """Periodic, jurisdiction-aware tax liability snapshot."""

    user_id: str
    period: TaxPeriod
    jurisdiction: str
    income: IncomeBreakdown
    expenses: ExpenseBreakdown
    adjusted_gross_income: float
    taxable_income: float
    tax_components: Dict[str, float]
    total_tax_owed: float
    estimated_quarterly_payment: float
    recommendations: TaxRecommendations = field(default_factory=TaxRecommendations)
    tax_regime: Optional[str] = None
    presumptive_taxation: bool = False
    calculated_at: datetime = field(default_factory=datetime.utcnow)

    @property
    def effective_rate(self) -> float:
        """Total tax owed as a share of business income (0 when there is none)."""
        if self.income.business_income <= 0:
            return 0.0
        return self.total_tax_owed / self.income.business_income

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "user_id": self.user_id,
            "period": self.period.to_dict(),
            "jurisdiction": self.jurisdiction,
            "income": self.income.to_dict(),
            "expenses": self.expenses.to_dict(),
            "tax_calculations": {
                "adjusted_gross_income": round(self.adjusted_gross_income, 2),
                "taxable_income": round(self.taxable_income, 2),
                **{k: round(v, 2) for k, v in self.tax_components.items()},
                "total_tax_owed": round(self.total_tax_owed, 2),
                "estimated_quarterly_payment": round(self.estimated_quarterly_payment, 2),
                "tax_regime": self.tax_regime,
                "presumptive_taxation": self.presumptive_taxation,
            },
            "recommendations": self.recommendations.to_dict(),
            "calculated_at": self.calculated_at.isoformat(),
        }
