"""
Period aggregation of classified transactions.

Splits a period's transactions into business and other income and into
deductible and personal expenses using the same category taxonomy the
classifier uses. Pure: the caller fetches the transactions.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, Iterable, Optional

from ml.taxonomy import CategoryGroup, Taxonomy, load_taxonomy
from models.classification import BusinessClassification
from models.tax_calculation import ExpenseBreakdown, IncomeBreakdown
from models.transaction import ClassifiedTransaction, TransactionType


@dataclass
class PeriodAggregates:
    income: IncomeBreakdown
    expenses: ExpenseBreakdown

    def scaled(self, factor: float) -> "PeriodAggregates":
        return PeriodAggregates(self.income.scaled(factor), self.expenses.scaled(factor))


def aggregate_income(
    transactions: Iterable[ClassifiedTransaction],
    taxonomy: Optional[Taxonomy] = None,
) -> IncomeBreakdown:
    """
    Sum income transactions.

    Income is business income when its category belongs to the taxonomy's
    income group or the classifier tagged it as business.
    """
    taxonomy = taxonomy or load_taxonomy()
    income_categories = taxonomy.names(CategoryGroup.INCOME)

    breakdown = IncomeBreakdown()
    by_category: Dict[str, float] = defaultdict(float)
    for txn in transactions:
        if txn.type != TransactionType.INCOME:
            continue
        amount = txn.amount
        breakdown.total_income += amount
        breakdown.transaction_count += 1
        by_category[txn.category] += amount

        is_business = (
            txn.category in income_categories
            or txn.classification.business_classification == BusinessClassification.BUSINESS.value
        )
        if is_business:
            breakdown.business_income += amount
        else:
            breakdown.other_income += amount

    breakdown.by_category = dict(by_category)
    return breakdown


def aggregate_expenses(
    transactions: Iterable[ClassifiedTransaction],
    taxonomy: Optional[Taxonomy] = None,
) -> ExpenseBreakdown:
    """
    Sum expense transactions.

    Business expense categories are deductible, weighted by the category's
    deduction percentage; the rest of each amount counts as personal.
    """
    taxonomy = taxonomy or load_taxonomy()

    breakdown = ExpenseBreakdown()
    by_category: Dict[str, float] = defaultdict(float)
    for txn in transactions:
        if txn.type != TransactionType.EXPENSE:
            continue
        amount = txn.amount
        breakdown.total_expenses += amount
        breakdown.transaction_count += 1
        by_category[txn.category] += amount

        category = taxonomy.get(txn.category)
        if category is not None and category.group == CategoryGroup.BUSINESS_EXPENSE:
            deductible = amount * category.deduction_percentage
        else:
            deductible = 0.0
        breakdown.deductible_expenses += deductible
        breakdown.personal_expenses += amount - deductible

        flag = txn.classification.tax_deductible
        if flag.is_deductible:
            breakdown.flagged_deductible += amount * flag.deduction_percentage

    breakdown.by_category = dict(by_category)
    return breakdown


def aggregate_period(
    transactions: Iterable[ClassifiedTransaction],
    taxonomy: Optional[Taxonomy] = None,
) -> PeriodAggregates:
    """Aggregate income and expenses in one call. Transfers are ignored."""
    rows = list(transactions)
    return PeriodAggregates(
        income=aggregate_income(rows, taxonomy),
        expenses=aggregate_expenses(rows, taxonomy),
    )
