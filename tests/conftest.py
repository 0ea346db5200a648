"""Pytest configuration and fixtures for test suite."""

import sys
from datetime import date
from pathlib import Path

import pytest

# Add src to path for imports
src_path = Path(__file__).parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from config.settings import EngineSettings
from config.tax_config_loader import clear_config_cache
from database.in_memory import (
    InMemoryCorrectionStore,
    InMemoryProfileStore,
    InMemoryTransactionStore,
)
from ml.settings import MLSettings
from ml.taxonomy import load_taxonomy
from models.classification import (
    BusinessClassification,
    CategoryAssignment,
    ClassificationResult,
    TaxDeductibility,
)
from models.transaction import ClassifiedTransaction, TransactionInput, TransactionType


@pytest.fixture(autouse=True)
def reset_config_cache():
    """Reset the global tax config loader between tests."""
    clear_config_cache()
    yield
    clear_config_cache()


@pytest.fixture
def taxonomy():
    return load_taxonomy()


@pytest.fixture
def ml_settings():
    return MLSettings()


@pytest.fixture
def engine_settings():
    return EngineSettings()


@pytest.fixture
def transaction_store():
    return InMemoryTransactionStore()


@pytest.fixture
def correction_store():
    return InMemoryCorrectionStore()


@pytest.fixture
def profile_store():
    return InMemoryProfileStore()


@pytest.fixture
def fixed_today():
    """Reference day used by engine and due date tests."""
    return date(2024, 5, 1)


@pytest.fixture
def make_classified():
    """
    Factory for stored, already classified transactions.

    Usage:
        txn = make_classified("YouTube payout", 1000, date(2024, 1, 15),
                              "ad_revenue", TransactionType.INCOME)
    """
    def _make(
        description,
        amount,
        on,
        category,
        transaction_type,
        business=BusinessClassification.BUSINESS.value,
        deductible=False,
        deduction_percentage=1.0,
    ):
        signed = -abs(amount) if transaction_type == TransactionType.INCOME else abs(amount)
        transaction = TransactionInput(
            description=description,
            amount=signed,
            date=on,
            type=transaction_type,
        )
        classification = ClassificationResult(
            category=CategoryAssignment(primary=category, detailed=category, confidence=0.9),
            business_classification=business,
            tax_deductible=TaxDeductibility(
                is_deductible=deductible,
                deduction_type="business_expense" if deductible else None,
                confidence=0.9 if deductible else 0.0,
                deduction_percentage=deduction_percentage if deductible else 0.0,
            ),
            classifier_used="rule_based",
        )
        return ClassifiedTransaction(transaction=transaction, classification=classification)

    return _make


@pytest.fixture
def correction_payload():
    """A transaction and the user's correction of it."""
    transaction = {
        "description": "Blue Yeti microphone",
        "merchant_name": "Best Buy",
        "amount": 129.99,
        "date": "2024-03-01",
    }
    correction = {
        "category": {"primary": "equipment", "detailed": "audio"},
        "business_classification": "business",
        "tax_deductible": {"is_deductible": True, "deduction_type": "equipment"},
    }
    return transaction, correction
