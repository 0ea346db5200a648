"""
Adaptive per-user transaction classifier.

Learns from a user's stored corrections. A model is trained once at least
``min_training_examples`` corrections exist and is fully replaced on every
retrain; prediction never raises.
"""

import asyncio
import logging
import weakref
from typing import Any, Callable, Dict, Optional

from domain.repositories import CorrectionStore
from ml.model_cache import UserClassifierModel, UserModelCache
from ml.settings import MLSettings, get_ml_settings
from ml.taxonomy import Taxonomy, load_taxonomy
from ml.text import analyze_text
from models.classification import (
    BusinessClassification,
    CategoryAssignment,
    ClassificationResult,
    TaxDeductibility,
)

from .base import TextClassifier, decode_label, encode_label
from .naive_bayes_classifier import NaiveBayesTextClassifier

logger = logging.getLogger(__name__)


class AdaptiveClassifier:
    """
    Per-user classifier trained on that user's corrections.

    Usage:
        adaptive = AdaptiveClassifier(correction_store)
        await adaptive.train_model("user-1")
        result = adaptive.predict("user-1", "Blue Yeti mic")
    """

    name = "adaptive"

    def __init__(
        self,
        correction_store: CorrectionStore,
        cache: Optional[UserModelCache] = None,
        taxonomy: Optional[Taxonomy] = None,
        settings: Optional[MLSettings] = None,
        classifier_factory: Callable[[], TextClassifier] = NaiveBayesTextClassifier,
    ):
        self.settings = settings or get_ml_settings()
        self.correction_store = correction_store
        self.cache = cache if cache is not None else UserModelCache(self.settings.model_cache_size)
        self.taxonomy = taxonomy or load_taxonomy(self.settings.taxonomy_path)
        self.classifier_factory = classifier_factory
        self._train_locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = (
            weakref.WeakValueDictionary()
        )

    def _lock_for(self, user_id: str) -> asyncio.Lock:
        lock = self._train_locks.get(user_id)
        if lock is None:
            lock = asyncio.Lock()
            self._train_locks[user_id] = lock
        return lock

    async def train_model(self, user_id: str) -> bool:
        """
        Train (or retrain) a user's model from their recent corrections.

        Args:
            user_id: User whose corrections to learn from.

        Returns:
            True if a new model was cached, False when there is not enough data.
        """
        lock = self._lock_for(user_id)
        async with lock:
            records = await self.correction_store.recent(
                user_id, self.settings.max_training_examples
            )
            if len(records) < self.settings.min_training_examples:
                logger.info(
                    f"Not enough corrections to train user {user_id}: "
                    f"{len(records)} < {self.settings.min_training_examples}"
                )
                return False

            examples = []
            for record in records:
                features = analyze_text(record.training_text)
                if not features.tokens:
                    continue
                label = encode_label(
                    record.category, record.business_classification, record.is_deductible
                )
                examples.append((features, label))

            if not examples:
                logger.warning(f"Corrections for user {user_id} contain no usable text")
                return False

            classifier = self.classifier_factory()
            classifier.train(examples)
            self.cache.put(UserClassifierModel(
                user_id=user_id,
                classifier=classifier,
                training_examples=len(examples),
                labels=classifier.labels,
            ))
            logger.info(
                f"Trained classifier for user {user_id} on {len(examples)} corrections"
            )
            return True

    def has_model(self, user_id: str) -> bool:
        return user_id in self.cache

    def model_info(self, user_id: str) -> Optional[Dict[str, Any]]:
        model = self.cache.get(user_id)
        return model.info() if model else None

    def predict(self, user_id: str, text: str) -> Optional[ClassificationResult]:
        """
        Classify text with the user's model.

        Returns:
            None when the user has no model; the uncategorized result when
            prediction fails.
        """
        model = self.cache.get(user_id)
        if model is None:
            return None

        try:
            label, confidence = model.classifier.classify(analyze_text(text))
            category_name, business, is_deductible = decode_label(label)
        except Exception as e:
            logger.error(f"Adaptive prediction failed for user {user_id}: {e}")
            return ClassificationResult.uncategorized(classifier_used=self.name)

        category = self.taxonomy.get(category_name)
        deductibility = TaxDeductibility()
        if is_deductible:
            deductibility = TaxDeductibility(
                is_deductible=True,
                deduction_type=(
                    category.deduction_type if category and category.deductible
                    else "business_expense"
                ),
                confidence=confidence,
                deduction_percentage=(
                    category.deduction_percentage if category and category.deductible
                    else 1.0
                ),
            )

        return ClassificationResult(
            category=CategoryAssignment(
                primary=category_name,
                detailed=category_name,
                confidence=confidence,
            ),
            business_classification=business or BusinessClassification.UNKNOWN.value,
            tax_deductible=deductibility,
            classifier_used=self.name,
        )
