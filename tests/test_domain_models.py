"""Tests for transaction, classification and snapshot models."""

from datetime import date

import pytest
from pydantic import ValidationError

from domain.exceptions import InvalidTaxPeriodError
from models.classification import (
    CategoryAssignment,
    ClassificationResult,
    TaxDeductibility,
)
from models.tax_calculation import TaxPeriod
from models.tax_profile import TaxProfile
from models.transaction import TransactionInput, TransactionType, transaction_text


class TestTransactionInput:

    def test_positive_amount_is_expense(self):
        txn = TransactionInput(description="Camera", amount=500, date="2024-01-01")
        assert txn.type == TransactionType.EXPENSE

    def test_negative_amount_is_income(self):
        txn = TransactionInput(description="Payout", amount=-500, date="2024-01-01")
        assert txn.type == TransactionType.INCOME

    def test_explicit_type_kept(self):
        txn = TransactionInput(description="Move", amount=-500, date="2024-01-01", type="transfer")
        assert txn.type == TransactionType.TRANSFER

    def test_text_includes_merchant(self):
        txn = TransactionInput(description=" Plan ", merchant_name="Adobe", amount=5, date="2024-01-01")
        assert txn.description == "Plan"
        assert txn.text == "Plan Adobe"

    def test_transaction_text_without_merchant(self):
        assert transaction_text("Monthly plan") == "Monthly plan"
        assert transaction_text("Monthly plan", "Adobe") == "Monthly plan Adobe"

    def test_blank_external_categories_dropped(self):
        txn = TransactionInput(
            description="x", amount=1, date="2024-01-01", external_categories=["Shops", " ", ""]
        )
        assert txn.external_categories == ["Shops"]

    def test_infinite_amount_rejected(self):
        with pytest.raises(ValidationError):
            TransactionInput(description="x", amount=float("inf"), date="2024-01-01")

    def test_boolean_amount_rejected(self):
        with pytest.raises(ValidationError):
            TransactionInput.model_validate({"description": "x", "amount": True, "date": "2024-01-01"})

    @pytest.mark.parametrize("value", [0, 1_704_067_200, 1.5])
    def test_numeric_date_rejected(self, value):
        with pytest.raises(ValidationError):
            TransactionInput.model_validate({"description": "x", "amount": 10, "date": value})

    def test_plain_numbers_and_iso_dates_accepted(self):
        txn = TransactionInput.model_validate({"description": "x", "amount": 10, "date": "2024-02-29"})
        assert txn.amount == 10.0
        assert txn.date == date(2024, 2, 29)

    def test_unknown_type_rejected(self):
        with pytest.raises(ValidationError):
            TransactionInput(description="x", amount=1, date="2024-01-01", type="refund")


class TestClassificationResult:

    def test_confidence_clamped(self):
        assert CategoryAssignment(primary="x", detailed="y", confidence=1.7).confidence == 1.0
        assert TaxDeductibility(confidence=-0.2, deduction_percentage=3).deduction_percentage == 1.0

    def test_unknown_business_classification(self):
        result = ClassificationResult(business_classification="hobby")
        assert result.business_classification == "unknown"

    def test_uncategorized(self):
        result = ClassificationResult.uncategorized("rule_based")
        assert result.is_uncategorized
        assert result.to_dict()["category"] == {
            "primary": "other",
            "detailed": "uncategorized",
            "confidence": 0.0,
        }

    def test_copy_is_deep(self):
        result = ClassificationResult.uncategorized()
        clone = result.copy()
        clone.tax_deductible.is_deductible = True
        assert result.tax_deductible.is_deductible is False


class TestTaxPeriod:

    def test_quarter_range(self):
        assert TaxPeriod(2024, 1).date_range() == (date(2024, 1, 1), date(2024, 3, 31))
        assert TaxPeriod(2024, 4).date_range() == (date(2024, 10, 1), date(2024, 12, 31))

    def test_full_year(self):
        period = TaxPeriod(2024)
        assert period.date_range() == (date(2024, 1, 1), date(2024, 12, 31))
        assert period.annualization_factor == 1.0
        assert period.label == "2024"

    def test_annualization(self):
        assert TaxPeriod(2024, 2).annualization_factor == 2.0

    @pytest.mark.parametrize("quarter", [0, 5, -1])
    def test_invalid_quarter(self, quarter):
        with pytest.raises(InvalidTaxPeriodError):
            TaxPeriod(2024, quarter)

    def test_invalid_period_is_value_error(self):
        with pytest.raises(ValueError):
            TaxPeriod(2024, 9)


class TestTaxProfile:

    def test_codes_upper_cased(self):
        profile = TaxProfile(country=" in ", state="ca")
        assert profile.country == "IN"
        assert profile.state == "CA"

    def test_invalid_regime(self):
        with pytest.raises(ValidationError):
            TaxProfile(tax_regime="legacy")

    def test_state_rate_bounds(self):
        with pytest.raises(ValidationError):
            TaxProfile(state_tax_rate=1.5)
