"""User correction records, the retraining signal for per-user classifiers."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from models.transaction import transaction_text


class CorrectionType(str, Enum):
    CATEGORY = "category_correction"
    BUSINESS_CLASSIFICATION = "business_classification_correction"
    TAX_DEDUCTIBLE = "tax_deductible_correction"
    NEW_CLASSIFICATION = "new_classification"


class AmountBucket(str, Enum):
    LOW = "low"              # < 50
    MEDIUM = "medium"        # < 500
    HIGH = "high"            # < 2000
    VERY_HIGH = "very_high"


@dataclass(frozen=True)
class CorrectionFeatures:
    """Features extracted from the corrected transaction."""
    tokens: List[str]
    stems: List[str]
    patterns: List[str]
    merchant_type: str
    amount_range: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "keywords": list(self.tokens),
            "stems": list(self.stems),
            "patterns": list(self.patterns),
            "merchant_type": self.merchant_type,
            "amount_range": self.amount_range,
        }


@dataclass(frozen=True)
class CorrectionRecord:
    """One user override of a prior classification. Append-only per user."""

    user_id: str
    description: str
    merchant_name: Optional[str]
    amount: float
    transaction_type: str

    # User's manual classification
    category: str
    detailed_category: Optional[str]
    business_classification: str
    is_deductible: bool
    deduction_type: Optional[str]

    # System's original prediction, as a serialized ClassificationResult
    system_prediction: Dict[str, Any]

    correction_type: CorrectionType
    features: CorrectionFeatures
    confidence: float = 1.0
    notes: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.utcnow)

    @property
    def training_text(self) -> str:
        return transaction_text(self.description, self.merchant_name)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "user_id": self.user_id,
            "transaction_data": {
                "description": self.description,
                "merchant_name": self.merchant_name,
                "amount": self.amount,
                "type": self.transaction_type,
            },
            "user_classification": {
                "category": {"primary": self.category, "detailed": self.detailed_category},
                "business_classification": self.business_classification,
                "tax_deductible": {
                    "is_deductible": self.is_deductible,
                    "deduction_type": self.deduction_type,
                    "notes": self.notes,
                },
            },
            "system_prediction": self.system_prediction,
            "correction_type": self.correction_type.value,
            "confidence": self.confidence,
            "features": self.features.to_dict(),
            "created_at": self.created_at.isoformat(),
        }
