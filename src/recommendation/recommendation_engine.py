"""Creator Tax Recommendation Engine.

Heuristic savings suggestions, deduction reminders and a one-line tax
strategy derived from a computed tax snapshot.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from calculator.decimal_math import format_money
from config.settings import EngineSettings, get_engine_settings
from models.tax_calculation import (
    Recommendation,
    TaxCalculationResult,
    TaxRecommendations,
)

logger = logging.getLogger(__name__)

PRIORITY_ORDER = {"high": 0, "medium": 1, "low": 2}

# Thresholds on projected annual figures
LOW_EXPENSE_RATIO = 0.15
HIGH_TAX_BURDEN_RATIO = 0.30
US_QUARTERLY_PAYMENT_INCOME = 50000
US_RETIREMENT_INCOME = 25000
US_ENTITY_ELECTION_INCOME = 100000
IN_REGIME_CHOICE_INCOME = 300000
IN_GST_REGISTRATION_INCOME = 2000000
IN_PRESUMPTIVE_INCOME = 5000000
IN_ADVANCE_TAX_INCOME = 1000000


class CreatorTaxRecommendationEngine:
    """
    Builds the recommendations block of a tax snapshot.

    Usage:
        engine = CreatorTaxRecommendationEngine()
        result.recommendations = engine.generate(result)
    """

    def __init__(self, settings: Optional[EngineSettings] = None):
        self.settings = settings or get_engine_settings()

    def generate(self, result: TaxCalculationResult) -> TaxRecommendations:
        """
        Generate recommendations for a snapshot.

        The snapshot's tax jar amount, next due date and GST advice are
        carried over unchanged.
        """
        factor = result.period.annualization_factor
        business_income = result.income.business_income
        projected_income = business_income * factor
        projected_net = max(0.0, result.adjusted_gross_income * factor)
        country = result.jurisdiction

        tips: List[Recommendation] = []

        expense_ratio = (
            result.expenses.deductible_expenses / business_income if business_income > 0 else 0.0
        )
        if business_income > 0 and expense_ratio < LOW_EXPENSE_RATIO:
            tips.append(Recommendation(
                priority="high",
                title="Track More Business Expenses",
                description=(
                    "Your deductible expenses are under 15% of business income. Equipment, "
                    "software, internet and phone costs are commonly missed deductions."
                ),
                estimated_savings=projected_net * 0.1,
            ))

        if business_income > 0 and result.total_tax_owed > business_income * HIGH_TAX_BURDEN_RATIO:
            tips.append(Recommendation(
                priority="high",
                title="Consult a Tax Professional",
                description=(
                    "Your estimated tax exceeds 30% of business income. A professional "
                    "review may uncover deductions or a better structure."
                ),
            ))

        if country == "IN":
            tips.extend(self._india_tips(projected_income))
        else:
            tips.extend(self._us_tips(projected_net))

        tips.append(Recommendation(
            priority="low",
            title="Separate Business Banking",
            description="Use a dedicated business account for cleaner bookkeeping and easier deductions.",
        ))

        tips.sort(key=lambda r: PRIORITY_ORDER.get(r.priority, len(PRIORITY_ORDER)))
        tips = tips[:self.settings.max_recommendations]

        previous = result.recommendations
        return TaxRecommendations(
            tax_jar_amount=previous.tax_jar_amount,
            next_due_date=previous.next_due_date,
            suggested_deductions=self._suggested_deductions(result, expense_ratio),
            tax_strategy=self._tax_strategy(result, projected_income),
            gst_advice=previous.gst_advice,
            tips=tips,
        )

    def _us_tips(self, projected_net: float) -> List[Recommendation]:
        tips = []
        if projected_net > US_QUARTERLY_PAYMENT_INCOME:
            tips.append(Recommendation(
                priority="high",
                title="Make Quarterly Estimated Payments",
                description=(
                    "Your projected income suggests quarterly estimated tax payments "
                    "to avoid underpayment penalties."
                ),
                estimated_savings=2500,
            ))
        if projected_net > US_RETIREMENT_INCOME:
            tips.append(Recommendation(
                priority="medium",
                title="Retirement Contributions",
                description=(
                    "A SEP-IRA or Solo 401(k) contribution reduces this year's taxable income."
                ),
                estimated_savings=6000 * 0.25,
            ))
        if projected_net > US_ENTITY_ELECTION_INCOME:
            tips.append(Recommendation(
                priority="medium",
                title="Consider an Entity Election",
                description=(
                    "At this income an LLC taxed as an S-Corp can reduce self-employment tax."
                ),
            ))
        return tips

    def _india_tips(self, projected_income: float) -> List[Recommendation]:
        tips = []
        if projected_income > IN_GST_REGISTRATION_INCOME:
            tips.append(Recommendation(
                priority="high",
                title="Register for GST",
                description=(
                    f"Income above {format_money(IN_GST_REGISTRATION_INCOME, 'IN')} requires GST "
                    "registration; charge 18% GST and file returns by the 20th of each month."
                ),
            ))
        if projected_income > IN_ADVANCE_TAX_INCOME:
            tips.append(Recommendation(
                priority="high",
                title="Pay Advance Tax",
                description="Pay advance tax in quarterly instalments to avoid interest.",
            ))
        if projected_income > IN_REGIME_CHOICE_INCOME:
            tips.append(Recommendation(
                priority="medium",
                title="Compare Tax Regimes",
                description=(
                    "Compare the new regime (lower rates, no deductions) with the old regime "
                    "(80C/80D deductions) before filing."
                ),
            ))
        if projected_income < IN_PRESUMPTIVE_INCOME:
            tips.append(Recommendation(
                priority="medium",
                title="Presumptive Taxation (Section 44ADA)",
                description="You can opt to have 50% of gross receipts treated as profit.",
            ))
        return tips

    def _suggested_deductions(self, result: TaxCalculationResult, expense_ratio: float) -> List[str]:
        if result.jurisdiction == "IN":
            return [
                "Maximize Section 80C deductions (₹1.5 lakh)",
                "Claim home office and equipment expenses",
                "Keep GST input credit receipts",
            ]

        suggestions = []
        if result.income.business_income > 0 and expense_ratio < LOW_EXPENSE_RATIO:
            suggestions.append(
                "Consider tracking more business expenses - you may be missing deductions"
            )
        suggestions.extend([
            "Home office deduction (simplified method, up to $1,500)",
            "Equipment, software and subscriptions used for content",
            "Business share of internet and phone bills",
        ])
        return suggestions

    def _tax_strategy(self, result: TaxCalculationResult, projected_income: float) -> str:
        if result.jurisdiction == "IN":
            if result.presumptive_taxation:
                return "Presumptive Taxation (Section 44ADA)"
            return "Regular Business Taxation"
        if projected_income > US_ENTITY_ELECTION_INCOME:
            return "Consider entity election (LLC/S-Corp) for tax optimization"
        return "Focus on maximizing business deductions"
