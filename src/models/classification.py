"""
Transaction classification results.

A ClassificationResult is always well formed: confidences and deduction
percentages are clamped to [0, 1] on construction, and the
"other / uncategorized" result with confidence 0 stands in for "no match".
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class BusinessClassification(str, Enum):
    """Whether a transaction belongs to the creator's business."""
    BUSINESS = "business"
    PERSONAL = "personal"
    MIXED = "mixed"
    UNKNOWN = "unknown"


UNCATEGORIZED_PRIMARY = "other"
UNCATEGORIZED_DETAILED = "uncategorized"


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, float(value)))


@dataclass
class CategoryAssignment:
    """Predicted spending/income category."""

    primary: str = UNCATEGORIZED_PRIMARY
    detailed: str = UNCATEGORIZED_DETAILED
    confidence: float = 0.0  # 0.0 - 1.0

    def __post_init__(self):
        self.confidence = _clamp(self.confidence)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "primary": self.primary,
            "detailed": self.detailed,
            "confidence": self.confidence,
        }


@dataclass
class TaxDeductibility:
    """Tax-deductibility verdict for a transaction."""

    is_deductible: bool = False
    deduction_type: Optional[str] = None
    confidence: float = 0.0
    deduction_percentage: float = 0.0

    def __post_init__(self):
        self.confidence = _clamp(self.confidence)
        self.deduction_percentage = _clamp(self.deduction_percentage)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "is_deductible": self.is_deductible,
            "deduction_type": self.deduction_type,
            "confidence": self.confidence,
            "deduction_percentage": self.deduction_percentage,
        }


@dataclass
class ClassificationResult:
    """Result of classifying one transaction."""

    category: CategoryAssignment = field(default_factory=CategoryAssignment)
    business_classification: str = BusinessClassification.UNKNOWN.value
    tax_deductible: TaxDeductibility = field(default_factory=TaxDeductibility)
    classifier_used: str = ""

    def __post_init__(self):
        """Normalize the business classification to a known value."""
        value = self.business_classification
        if isinstance(value, BusinessClassification):
            value = value.value
        if value not in {b.value for b in BusinessClassification}:
            value = BusinessClassification.UNKNOWN.value
        self.business_classification = value

    @classmethod
    def uncategorized(cls, classifier_used: str = "") -> "ClassificationResult":
        """The not-found sentinel: other / uncategorized, confidence 0."""
        return cls(classifier_used=classifier_used)

    @property
    def confidence(self) -> float:
        """Shortcut for the category confidence."""
        return self.category.confidence

    @property
    def is_uncategorized(self) -> bool:
        return (
            self.category.primary == UNCATEGORIZED_PRIMARY
            and self.category.confidence == 0.0
        )

    def copy(self) -> "ClassificationResult":
        return copy.deepcopy(self)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "category": self.category.to_dict(),
            "business_classification": self.business_classification,
            "tax_deductible": self.tax_deductible.to_dict(),
            "classifier_used": self.classifier_used,
        }
