"""Domain models for transactions, classifications, profiles and tax snapshots."""

from .classification import (
    BusinessClassification,
    CategoryAssignment,
    ClassificationResult,
    TaxDeductibility,
    UNCATEGORIZED_PRIMARY,
    UNCATEGORIZED_DETAILED,
)
from .transaction import (
    ClassifiedTransaction,
    CorrectedCategory,
    CorrectedDeductibility,
    TransactionInput,
    TransactionType,
    UserCorrection,
)
from .tax_profile import TaxProfile
from .tax_calculation import (
    ExpenseBreakdown,
    IncomeBreakdown,
    Recommendation,
    TaxCalculationResult,
    TaxPeriod,
    TaxRecommendations,
)

__all__ = [
    "BusinessClassification",
    "CategoryAssignment",
    "ClassificationResult",
    "TaxDeductibility",
    "UNCATEGORIZED_PRIMARY",
    "UNCATEGORIZED_DETAILED",
    "ClassifiedTransaction",
    "CorrectedCategory",
    "CorrectedDeductibility",
    "TransactionInput",
    "TransactionType",
    "UserCorrection",
    "TaxProfile",
    "ExpenseBreakdown",
    "IncomeBreakdown",
    "Recommendation",
    "TaxCalculationResult",
    "TaxPeriod",
    "TaxRecommendations",
]
