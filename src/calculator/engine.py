from __future__ import annotations

import logging
from datetime import date
from typing import Any, Callable, Dict, Mapping, Optional

from calculator.decimal_math import round_money
from calculator.jurisdictions import JurisdictionCalculator, get_jurisdiction_calculator
from calculator.period_aggregator import aggregate_period
from config.settings import EngineSettings, get_engine_settings
from domain.exceptions import ProfileNotFoundError
from domain.repositories import ProfileStore, TransactionStore
from ml.taxonomy import Taxonomy, load_taxonomy
from models.tax_calculation import TaxCalculationResult, TaxPeriod, TaxRecommendations
from models.tax_profile import TaxProfile
from models.transaction import TransactionType
from recommendation.due_dates import DueDateTracker
from recommendation.realtime_estimator import RealTimeEstimator, calculate_tax_set_aside
from recommendation.recommendation_engine import CreatorTaxRecommendationEngine
from services.logging_config import CalculationLogger

logger = logging.getLogger(__name__)


class TaxEstimationEngine:
    """
    Periodic, jurisdiction-aware tax estimation for a user.

    Fetches the period's classified transactions, aggregates them, dispatches
    on the profile's country and saves every computed snapshot. All tax
    arithmetic is synchronous; store calls are the only awaits.
    """

    def __init__(
        self,
        transaction_store: TransactionStore,
        profile_store: ProfileStore,
        taxonomy: Optional[Taxonomy] = None,
        recommendation_engine: Optional[CreatorTaxRecommendationEngine] = None,
        due_date_tracker: Optional[DueDateTracker] = None,
        settings: Optional[EngineSettings] = None,
        today: Callable[[], date] = date.today,
    ):
        self.settings = settings or get_engine_settings()
        self.transaction_store = transaction_store
        self.profile_store = profile_store
        self.taxonomy = taxonomy or load_taxonomy()
        self.recommendation_engine = recommendation_engine or CreatorTaxRecommendationEngine(self.settings)
        self.due_date_tracker = due_date_tracker or DueDateTracker()
        self.realtime_estimator = RealTimeEstimator(self.settings.default_tax_jar_rate)
        self.today = today
        self._calculators: Dict[str, JurisdictionCalculator] = {}

    def calculator_for(self, country: Optional[str]) -> JurisdictionCalculator:
        """Cached calculator for a country (raises UnsupportedJurisdictionError)."""
        code = (country or self.settings.default_country).strip().upper()
        if code not in self._calculators:
            self._calculators[code] = get_jurisdiction_calculator(code)
        return self._calculators[code]

    async def _require_profile(self, user_id: str) -> TaxProfile:
        profile = await self.profile_store.get(user_id)
        if profile is None:
            raise ProfileNotFoundError(user_id)
        return profile

    async def calculate_taxes(
        self,
        user_id: str,
        year: int,
        quarter: Optional[int] = None,
    ) -> TaxCalculationResult:
        """
        Compute and save a tax snapshot for a year or one quarter.

        Args:
            user_id: User to estimate.
            year: Tax year.
            quarter: 1-4, or None for the full year.

        Returns:
            The saved TaxCalculationResult.

        Raises:
            InvalidTaxPeriodError: For an out-of-range year or quarter.
            ProfileNotFoundError: If the user has no tax profile.
            UnsupportedJurisdictionError: If the profile's country is unsupported.
        """
        period = TaxPeriod(year, quarter)
        profile = await self._require_profile(user_id)
        calculator = self.calculator_for(profile.country)

        calc_log = CalculationLogger(user_id, period.label, calculator.code)
        calc_log.start_calculation(filing_status=profile.filing_status, tax_regime=profile.tax_regime)

        start, end = period.date_range()
        transactions = await self.transaction_store.query(user_id, start, end)

        step = calc_log.log_step("aggregate", transactions=len(transactions))
        aggregates = aggregate_period(transactions, self.taxonomy)
        calc_log.complete_step("aggregate", step)
        calc_log.log_aggregates(
            aggregates.income.business_income,
            aggregates.expenses.deductible_expenses,
            aggregates.income.transaction_count + aggregates.expenses.transaction_count,
        )

        taxes = calculator.calculate(aggregates.income, aggregates.expenses, profile)
        total_tax_owed = taxes.total_tax_owed
        calc_log.log_components(taxes.components)

        if period.is_full_year:
            quarterly_payment = round_money(total_tax_owed / 4)
        else:
            annualized = aggregates.scaled(period.annualization_factor)
            annual_liability = calculator.annual_liability(
                annualized.income, annualized.expenses, profile
            )
            quarterly_payment = round_money(annual_liability / 4)

        result = TaxCalculationResult(
            user_id=user_id,
            period=period,
            jurisdiction=calculator.code,
            income=aggregates.income,
            expenses=aggregates.expenses,
            adjusted_gross_income=taxes.adjusted_gross_income,
            taxable_income=taxes.taxable_income,
            tax_components=taxes.components,
            total_tax_owed=total_tax_owed,
            estimated_quarterly_payment=quarterly_payment,
            recommendations=TaxRecommendations(
                tax_jar_amount=calculator.tax_jar_amount(aggregates.income, total_tax_owed, period),
                next_due_date=self.due_date_tracker.next_due_date(calculator.code, self.today()),
                gst_advice=taxes.gst_advice,
            ),
            tax_regime=taxes.tax_regime,
            presumptive_taxation=taxes.presumptive_taxation,
        )
        result.recommendations = self.recommendation_engine.generate(result)

        await self.transaction_store.save(result)
        calc_log.log_result(total_tax_owed, quarterly_payment, result.effective_rate)
        return result

    async def calculate_real_time_tax_jar(
        self,
        user_id: str,
        amount: float,
        transaction_type: TransactionType,
    ) -> Dict[str, Any]:
        """
        Set-aside guidance for a single new payment.

        Uses the latest full-year snapshot of the current year; without one
        the default rate applies.
        """
        snapshot = await self.transaction_store.latest(user_id, self.today().year)
        profile = await self.profile_store.get(user_id)
        country = profile.country if profile else self.settings.default_country
        return self.realtime_estimator.tax_jar_for_payment(
            snapshot, amount, TransactionType(transaction_type), country
        )

    def calculate_tax_set_aside(
        self,
        amount: float,
        country: Optional[str] = None,
        overrides: Optional[Mapping[str, float]] = None,
    ) -> Dict[str, Any]:
        """Flat-rate set-aside breakdown using the jurisdiction's default rates."""
        calculator = self.calculator_for(country)
        return calculate_tax_set_aside(
            amount, calculator.code, calculator.set_aside_rates(), overrides
        )

    async def get_quarterly_tax_summary(self, user_id: str, year: int) -> Dict[str, Dict[str, Any]]:
        """
        Per-quarter business income, expenses and set-aside estimate.

        Returns:
            Mapping of "Q1".."Q4" to the quarter's summary.
        """
        profile = await self.profile_store.get(user_id)
        calculator = self.calculator_for(profile.country if profile else None)
        rates = calculator.set_aside_rates()

        summary: Dict[str, Dict[str, Any]] = {}
        for quarter in range(1, 5):
            period = TaxPeriod(year, quarter)
            start, end = period.date_range()
            transactions = await self.transaction_store.query(user_id, start, end)
            aggregates = aggregate_period(transactions, self.taxonomy)

            gross_income = aggregates.income.business_income
            business_expenses = aggregates.expenses.deductible_expenses
            net_income = gross_income - business_expenses
            set_aside = calculate_tax_set_aside(max(net_income, 0.0), calculator.code, rates)

            summary[f"Q{quarter}"] = {
                "period": {"start_date": start, "end_date": end},
                "gross_income": round_money(gross_income),
                "business_expenses": round_money(business_expenses),
                "deductible_amount": round_money(aggregates.expenses.flagged_deductible),
                "net_income": round_money(net_income),
                "estimated_tax": set_aside["total_set_aside"],
                "due_date": self.due_date_tracker.due_date_for(calculator.code, year, quarter),
                "transaction_count": (
                    aggregates.income.transaction_count + aggregates.expenses.transaction_count
                ),
            }
        return summary
