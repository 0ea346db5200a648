"""
Main transaction classifier interface.

Arbitrates between a user's adaptive model and the rule-based classifier,
falls back to bank-feed categories for low-confidence results and always
finishes with the creator override rules.
"""

import logging
import re
from typing import Any, Mapping, Optional, Union

from ml.classifiers.adaptive_classifier import AdaptiveClassifier
from ml.classifiers.rule_based_classifier import RuleBasedClassifier
from ml.settings import MLSettings, get_ml_settings
from ml.text import analyze_text
from models.classification import CategoryAssignment, ClassificationResult
from models.transaction import TransactionInput

logger = logging.getLogger(__name__)

_NON_WORD = re.compile(r"[^\w]+")


def _snake_case(value: str) -> str:
    return _NON_WORD.sub("_", value.strip().lower()).strip("_")


class TransactionClassifier:
    """
    Classification arbiter.

    Usage:
        classifier = TransactionClassifier(rule_classifier, adaptive_classifier)
        result = classifier.classify({"description": "Adobe Creative Cloud",
                                      "amount": 54.99, "date": "2024-03-01"})
    """

    def __init__(
        self,
        rule_classifier: Optional[RuleBasedClassifier] = None,
        adaptive_classifier: Optional[AdaptiveClassifier] = None,
        settings: Optional[MLSettings] = None,
    ):
        self.settings = settings or get_ml_settings()
        self.rule_classifier = rule_classifier or RuleBasedClassifier()
        self.adaptive_classifier = adaptive_classifier

    def classify(
        self,
        transaction: Union[TransactionInput, Mapping[str, Any]],
        user_id: Optional[str] = None,
    ) -> ClassificationResult:
        """
        Classify one transaction.

        Args:
            transaction: Validated input or a mapping to validate.
            user_id: Enables the user's adaptive model when one is trained.

        Returns:
            A well-formed ClassificationResult (never None).

        Raises:
            pydantic.ValidationError: If a mapping fails validation.
        """
        if not isinstance(transaction, TransactionInput):
            transaction = TransactionInput.model_validate(transaction)

        features = analyze_text(transaction.text)
        transaction_type = transaction.transaction_type
        result: Optional[ClassificationResult] = None

        if user_id and self.adaptive_classifier is not None:
            predicted = self.adaptive_classifier.predict(user_id, transaction.text)
            if (
                predicted is not None
                and predicted.confidence > self.settings.adaptive_accept_threshold
            ):
                result = predicted
            elif predicted is not None:
                logger.debug(
                    f"Adaptive prediction for user {user_id} below threshold "
                    f"({predicted.confidence:.2f}), using rules"
                )

        if result is None:
            result = self.rule_classifier.classify(features, transaction_type)

        if (
            result.confidence < self.settings.external_category_threshold
            and transaction.external_categories
        ):
            result = self._apply_external_categories(result, transaction.external_categories)

        return self.rule_classifier.apply_creator_rules(
            result, features.normalized, transaction_type
        )

    def _apply_external_categories(self, result: ClassificationResult, external) -> ClassificationResult:
        """Replace the category with the bank feed's, keeping the rest."""
        updated = result.copy()
        updated.category = CategoryAssignment(
            primary=_snake_case(external[0]) or result.category.primary,
            detailed=" > ".join(external),
            confidence=self.settings.external_category_confidence,
        )
        return updated
