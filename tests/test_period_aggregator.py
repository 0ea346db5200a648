"""Tests for period aggregation of classified transactions."""

from datetime import date

import pytest

from calculator.period_aggregator import aggregate_expenses, aggregate_income, aggregate_period
from models.transaction import TransactionType


@pytest.fixture
def transactions(make_classified):
    on = date(2024, 2, 1)
    return [
        make_classified("YouTube AdSense", 1_000, on, "ad_revenue", TransactionType.INCOME),
        make_classified("Gift from family", 200, on, "other", TransactionType.INCOME,
                        business="personal"),
        make_classified("Sold camera gear", 300, on, "other", TransactionType.INCOME),
        make_classified("Adobe CC", 100, on, "software", TransactionType.EXPENSE,
                        deductible=True),
        make_classified("Client lunch", 80, on, "meals", TransactionType.EXPENSE,
                        deductible=True, deduction_percentage=0.5),
        make_classified("Weekly groceries", 50, on, "groceries", TransactionType.EXPENSE,
                        business="personal"),
        make_classified("To savings", 500, on, "other", TransactionType.TRANSFER,
                        business="unknown"),
    ]


class TestIncome:

    def test_business_and_other_income(self, transactions, taxonomy):
        income = aggregate_income(transactions, taxonomy)
        assert income.total_income == pytest.approx(1_500)
        assert income.business_income == pytest.approx(1_300)
        assert income.other_income == pytest.approx(200)
        assert income.transaction_count == 3

    def test_by_category(self, transactions, taxonomy):
        income = aggregate_income(transactions, taxonomy)
        assert income.by_category == {"ad_revenue": 1_000, "other": 500}


class TestExpenses:

    def test_deductible_weighted_by_category(self, transactions, taxonomy):
        expenses = aggregate_expenses(transactions, taxonomy)
        assert expenses.total_expenses == pytest.approx(230)
        # software in full, half of meals
        assert expenses.deductible_expenses == pytest.approx(140)
        assert expenses.personal_expenses == pytest.approx(90)
        assert expenses.transaction_count == 3

    def test_flagged_deductible(self, transactions, taxonomy):
        expenses = aggregate_expenses(transactions, taxonomy)
        assert expenses.flagged_deductible == pytest.approx(140)

    def test_unknown_category_is_personal(self, make_classified, taxonomy):
        rows = [make_classified("Mystery", 40, date(2024, 1, 1), "food_and_drink",
                                TransactionType.EXPENSE, deductible=True)]
        expenses = aggregate_expenses(rows, taxonomy)
        assert expenses.deductible_expenses == 0.0
        assert expenses.personal_expenses == pytest.approx(40)
        assert expenses.flagged_deductible == pytest.approx(40)


class TestPeriod:

    def test_transfers_ignored(self, transactions, taxonomy):
        aggregates = aggregate_period(transactions, taxonomy)
        assert aggregates.income.transaction_count + aggregates.expenses.transaction_count == 6

    def test_empty(self, taxonomy):
        aggregates = aggregate_period([], taxonomy)
        assert aggregates.income.total_income == 0.0
        assert aggregates.expenses.total_expenses == 0.0

    def test_scaled(self, transactions, taxonomy):
        scaled = aggregate_period(transactions, taxonomy).scaled(4)
        assert scaled.income.business_income == pytest.approx(5_200)
        assert scaled.expenses.deductible_expenses == pytest.approx(560)
        assert scaled.income.transaction_count == 3
