"""Tests for the async tax estimation engine."""

from datetime import date

import pytest

from calculator.engine import TaxEstimationEngine
from calculator.jurisdictions.india import IndiaTaxCalculator
from domain.exceptions import (
    InvalidTaxPeriodError,
    ProfileNotFoundError,
    UnsupportedJurisdictionError,
)
from models.tax_profile import TaxProfile
from models.transaction import TransactionType


@pytest.fixture
def engine(transaction_store, profile_store, taxonomy, engine_settings, fixed_today):
    return TaxEstimationEngine(
        transaction_store,
        profile_store,
        taxonomy=taxonomy,
        settings=engine_settings,
        today=lambda: fixed_today,
    )


@pytest.fixture
def us_creator(transaction_store, profile_store, make_classified):
    """A US creator with one quarter of activity."""
    profile_store.put("user-1", TaxProfile(country="US", filing_status="single"))
    transaction_store.add_many("user-1", [
        make_classified("YouTube AdSense", 20_000, date(2024, 1, 15), "ad_revenue",
                        TransactionType.INCOME),
        make_classified("Adobe CC annual", 2_000, date(2024, 2, 1), "software",
                        TransactionType.EXPENSE, deductible=True),
        make_classified("Rent", 1_500, date(2024, 2, 1), "rent_mortgage",
                        TransactionType.EXPENSE, business="personal"),
        make_classified("Last year payout", 9_999, date(2023, 12, 31), "ad_revenue",
                        TransactionType.INCOME),
    ])
    return "user-1"


class TestCalculateTaxes:

    @pytest.mark.asyncio
    async def test_quarter_snapshot(self, engine, us_creator):
        result = await engine.calculate_taxes(us_creator, 2024, quarter=1)

        assert result.jurisdiction == "US"
        assert result.period.label == "Q1 2024"
        assert result.income.business_income == pytest.approx(20_000)
        assert result.expenses.deductible_expenses == pytest.approx(2_000)
        assert result.expenses.personal_expenses == pytest.approx(1_500)
        assert result.adjusted_gross_income == 18_000.0
        assert result.taxable_income == 4_150.0
        assert result.tax_components == {
            "federal_income_tax": 415.0,
            "state_tax": 900.0,
            "self_employment_tax": 2_543.4,
        }
        assert result.total_tax_owed == pytest.approx(3_858.4)

    @pytest.mark.asyncio
    async def test_quarterly_payment_uses_annualized_liability(self, engine, us_creator):
        result = await engine.calculate_taxes(us_creator, 2024, quarter=1)
        # Annualized AGI 72,000: federal 8,100.50 + state 3,600 + SE 10,173.60
        assert result.estimated_quarterly_payment == pytest.approx(21_874.1 / 4, abs=0.01)

    @pytest.mark.asyncio
    async def test_full_year_quarterly_payment(self, engine, us_creator):
        result = await engine.calculate_taxes(us_creator, 2024)
        assert result.period.is_full_year
        assert result.estimated_quarterly_payment == pytest.approx(3_858.4 / 4, abs=0.01)

    @pytest.mark.asyncio
    async def test_recommendations(self, engine, us_creator):
        result = await engine.calculate_taxes(us_creator, 2024, quarter=1)
        recommendations = result.recommendations
        # max(3,858.40 * 4 * 1.10, 20,000 * 4 * 25%)
        assert recommendations.tax_jar_amount == pytest.approx(20_000.0)
        assert recommendations.next_due_date == date(2024, 6, 17)
        assert recommendations.tips
        assert recommendations.tax_strategy

    @pytest.mark.asyncio
    async def test_snapshots_saved(self, engine, us_creator, transaction_store):
        await engine.calculate_taxes(us_creator, 2024, quarter=1)
        await engine.calculate_taxes(us_creator, 2024)

        assert len(await transaction_store.history(us_creator)) == 2
        assert (await transaction_store.latest(us_creator, 2024, 1)).period.quarter == 1
        assert (await transaction_store.latest(us_creator, 2024)).period.quarter is None

    @pytest.mark.asyncio
    async def test_recalculation_is_deterministic(self, engine, us_creator, transaction_store):
        first = await engine.calculate_taxes(us_creator, 2024, quarter=1)
        second = await engine.calculate_taxes(us_creator, 2024, quarter=1)

        assert first.tax_components == second.tax_components
        assert first.total_tax_owed == second.total_tax_owed
        assert first.estimated_quarterly_payment == second.estimated_quarterly_payment
        assert len(await transaction_store.history(us_creator)) == 2

    @pytest.mark.asyncio
    async def test_empty_period(self, engine, us_creator):
        result = await engine.calculate_taxes(us_creator, 2024, quarter=3)
        assert result.total_tax_owed == 0.0
        assert result.estimated_quarterly_payment == 0.0
        assert result.effective_rate == 0.0

    @pytest.mark.asyncio
    async def test_to_dict(self, engine, us_creator):
        data = (await engine.calculate_taxes(us_creator, 2024, quarter=1)).to_dict()
        assert data["period"] == {"year": 2024, "quarter": 1}
        assert data["tax_calculations"]["federal_income_tax"] == 415.0
        assert data["recommendations"]["next_due_date"] == "2024-06-17"

    @pytest.mark.asyncio
    async def test_missing_profile(self, engine):
        with pytest.raises(ProfileNotFoundError):
            await engine.calculate_taxes("nobody", 2024)

    @pytest.mark.asyncio
    async def test_unsupported_country(self, engine, profile_store):
        profile_store.put("user-de", TaxProfile(country="DE"))
        with pytest.raises(UnsupportedJurisdictionError):
            await engine.calculate_taxes("user-de", 2024)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("year,quarter", [(2024, 0), (2024, 5), (1800, None)])
    async def test_invalid_period(self, engine, us_creator, year, quarter):
        with pytest.raises(InvalidTaxPeriodError):
            await engine.calculate_taxes(us_creator, year, quarter)


class TestIndiaEstimation:

    @pytest.mark.asyncio
    async def test_india_snapshot(self, engine, profile_store, transaction_store, make_classified):
        profile_store.put("user-in", TaxProfile(country="IN", tax_regime="new"))
        transaction_store.add_many("user-in", [
            make_classified("Sponsorship", 1_200_000, date(2024, 5, 10), "sponsorship",
                            TransactionType.INCOME),
            make_classified("Camera", 200_000, date(2024, 6, 1), "equipment",
                            TransactionType.EXPENSE, deductible=True),
        ])

        result = await engine.calculate_taxes("user-in", 2024)

        assert result.jurisdiction == "IN"
        assert result.tax_regime == "new"
        assert result.tax_components["income_tax"] == 45_000.0
        assert result.tax_components["cess"] == 1_800.0
        assert result.total_tax_owed == pytest.approx(48_000)
        assert result.recommendations.tax_jar_amount == pytest.approx(360_000)
        assert result.recommendations.gst_advice is not None
        assert result.recommendations.next_due_date == date(2024, 6, 17)


class TestRealTimeTaxJar:

    @pytest.mark.asyncio
    async def test_without_snapshot(self, engine, us_creator):
        result = await engine.calculate_real_time_tax_jar(us_creator, 1_000.0, TransactionType.INCOME)
        assert result["tax_rate"] == 0.25
        assert result["amount_to_set_aside"] == 250.0
        assert result["total_tax_jar"] == 250.0

    @pytest.mark.asyncio
    async def test_uses_latest_full_year_snapshot(self, engine, us_creator):
        await engine.calculate_taxes(us_creator, 2024)
        result = await engine.calculate_real_time_tax_jar(us_creator, 1_000.0, "income")

        # 3,858.40 / 20,000
        assert result["tax_rate"] == 0.1929
        assert result["amount_to_set_aside"] == 192.92
        # full-year jar max(3,858.40 * 1.10, 20,000 * 25%) = 5,000
        assert result["total_tax_jar"] == 5_192.92

    @pytest.mark.asyncio
    async def test_quarter_snapshot_ignored(self, engine, us_creator):
        await engine.calculate_taxes(us_creator, 2024, quarter=1)
        result = await engine.calculate_real_time_tax_jar(us_creator, 1_000.0, "income")
        assert result["tax_rate"] == 0.25

    @pytest.mark.asyncio
    async def test_expense(self, engine, us_creator):
        result = await engine.calculate_real_time_tax_jar(us_creator, 80.0, "expense")
        assert result["amount_to_set_aside"] == 0.0


class TestSetAsideAndSummary:

    def test_set_aside_defaults(self, engine):
        result = engine.calculate_tax_set_aside(1_000.0)
        assert result["total_set_aside"] == 300.0
        assert result["breakdown"]["self_employment"] == 141.3

    def test_set_aside_india(self, engine):
        result = engine.calculate_tax_set_aside(100_000.0, "IN")
        assert result["total_set_aside"] == 25_000.0

    def test_set_aside_unsupported(self, engine):
        with pytest.raises(UnsupportedJurisdictionError):
            engine.calculate_tax_set_aside(1_000.0, "DE")

    def test_calculator_cached(self, engine):
        assert engine.calculator_for("in") is engine.calculator_for("IN")
        assert isinstance(engine.calculator_for("IN"), IndiaTaxCalculator)

    @pytest.mark.asyncio
    async def test_quarterly_summary(self, engine, us_creator):
        summary = await engine.get_quarterly_tax_summary(us_creator, 2024)

        assert list(summary) == ["Q1", "Q2", "Q3", "Q4"]
        q1 = summary["Q1"]
        assert q1["period"] == {"start_date": date(2024, 1, 1), "end_date": date(2024, 3, 31)}
        assert q1["gross_income"] == 20_000.0
        assert q1["business_expenses"] == 2_000.0
        assert q1["deductible_amount"] == 2_000.0
        assert q1["net_income"] == 18_000.0
        assert q1["estimated_tax"] == 5_400.0
        assert q1["due_date"] == date(2024, 4, 15)
        assert q1["transaction_count"] == 3

        assert summary["Q2"]["estimated_tax"] == 0.0
        assert summary["Q2"]["due_date"] == date(2024, 6, 17)
        assert summary["Q4"]["due_date"] == date(2025, 1, 15)

    @pytest.mark.asyncio
    async def test_summary_never_negative(self, engine, profile_store, transaction_store, make_classified):
        profile_store.put("user-2", TaxProfile(country="US"))
        transaction_store.add("user-2", make_classified(
            "New camera", 3_000, date(2024, 2, 1), "equipment", TransactionType.EXPENSE,
            deductible=True,
        ))
        q1 = (await engine.get_quarterly_tax_summary("user-2", 2024))["Q1"]
        assert q1["net_income"] == -3_000.0
        assert q1["estimated_tax"] == 0.0
