"""
User correction recording and retraining schedule.

A correction is appended to the user's log by the CorrectionRecorder; the
RetrainScheduler then decides whether the accumulated count warrants a
retrain of the user's adaptive model.
"""

import asyncio
import logging
import re
from collections import defaultdict
from typing import Any, Dict, Mapping, Optional, Union

from domain.repositories import CorrectionStore
from ml.classifiers.adaptive_classifier import AdaptiveClassifier
from ml.settings import MLSettings, get_ml_settings
from ml.text import analyze_text
from models.classification import ClassificationResult
from models.correction import (
    AmountBucket,
    CorrectionFeatures,
    CorrectionRecord,
    CorrectionType,
)
from models.transaction import TransactionInput, UserCorrection

logger = logging.getLogger(__name__)


# Checked in order; the first merchant type whose pattern matches wins
MERCHANT_TYPE_PATTERNS = [
    ("ecommerce", re.compile(r"\b(amazon|ebay|etsy|shopify|aliexpress|online)\b")),
    ("retail", re.compile(r"\b(walmart|target|costco|best buy|store|shop|mart)\b")),
    ("food", re.compile(r"\b(restaurant|cafe|coffee|starbucks|pizza|burger|mcdonalds|doordash|grubhub)\b")),
    ("gas_station", re.compile(r"\b(shell|exxon|chevron|bp|mobil|gas station|fuel)\b")),
    ("travel", re.compile(r"\b(airline|airlines|hotel|airbnb|expedia|booking|flight)\b")),
    ("transportation", re.compile(r"\b(uber|lyft|taxi|transit|metro|parking)\b")),
]

_DIGITS = re.compile(r"\d")
_ACRONYM = re.compile(r"\b[A-Z]{2,}\b")
_COMPANY_SUFFIX = re.compile(r"\b(inc|llc|ltd|corp|gmbh|pvt)\b|\bco$")
_RETAIL_PAYMENT = re.compile(r"\b(pos|purchase|payment|debit|card|checkout)\b")


def amount_bucket(amount: float) -> AmountBucket:
    value = abs(amount)
    if value < 50:
        return AmountBucket.LOW
    if value < 500:
        return AmountBucket.MEDIUM
    if value < 2000:
        return AmountBucket.HIGH
    return AmountBucket.VERY_HIGH


def merchant_type(normalized_text: str) -> str:
    for name, pattern in MERCHANT_TYPE_PATTERNS:
        if pattern.search(normalized_text):
            return name
    return "other"


def extract_features(transaction: TransactionInput) -> CorrectionFeatures:
    """
    Extract training features from a corrected transaction.

    Args:
        transaction: The transaction the user corrected.

    Returns:
        CorrectionFeatures with tokens, stems, pattern flags, merchant type
        and amount bucket.
    """
    raw = transaction.text
    features = analyze_text(raw)

    patterns = []
    if _DIGITS.search(raw):
        patterns.append("contains_digits")
    if _ACRONYM.search(raw):
        patterns.append("contains_acronym")
    if _COMPANY_SUFFIX.search(features.normalized):
        patterns.append("company_suffix")
    if _RETAIL_PAYMENT.search(features.normalized):
        patterns.append("retail_payment_keyword")

    return CorrectionFeatures(
        tokens=list(features.tokens),
        stems=list(features.stems),
        patterns=patterns,
        merchant_type=merchant_type(features.normalized),
        amount_range=amount_bucket(transaction.amount).value,
    )


def determine_correction_type(
    prediction: ClassificationResult,
    correction: UserCorrection,
) -> CorrectionType:
    """Classify what the user changed, most significant difference first."""
    if prediction.category.primary != correction.category.primary:
        return CorrectionType.CATEGORY
    if prediction.business_classification != correction.business_classification:
        return CorrectionType.BUSINESS_CLASSIFICATION
    if prediction.tax_deductible.is_deductible != correction.tax_deductible.is_deductible:
        return CorrectionType.TAX_DEDUCTIBLE
    return CorrectionType.NEW_CLASSIFICATION


class CorrectionRecorder:
    """Persists user corrections. Has no retraining side effects."""

    def __init__(self, correction_store: CorrectionStore):
        self.correction_store = correction_store

    async def record_correction(
        self,
        user_id: str,
        original: Union[TransactionInput, Mapping[str, Any]],
        user_correction: Union[UserCorrection, Mapping[str, Any]],
        system_prediction: Optional[ClassificationResult] = None,
    ) -> CorrectionRecord:
        """
        Append a correction to the user's log.

        Raises:
            pydantic.ValidationError: If the transaction or correction is malformed.
        """
        if not isinstance(original, TransactionInput):
            original = TransactionInput.model_validate(original)
        if not isinstance(user_correction, UserCorrection):
            user_correction = UserCorrection.model_validate(user_correction)
        prediction = system_prediction or ClassificationResult.uncategorized()

        record = CorrectionRecord(
            user_id=user_id,
            description=original.description,
            merchant_name=original.merchant_name,
            amount=original.amount,
            transaction_type=original.transaction_type.value,
            category=user_correction.category.primary,
            detailed_category=user_correction.category.detailed,
            business_classification=user_correction.business_classification,
            is_deductible=user_correction.tax_deductible.is_deductible,
            deduction_type=user_correction.tax_deductible.deduction_type,
            system_prediction=prediction.to_dict(),
            correction_type=determine_correction_type(prediction, user_correction),
            features=extract_features(original),
            notes=user_correction.tax_deductible.notes,
        )
        await self.correction_store.append(record)
        logger.info(
            f"Recorded {record.correction_type.value} for user {user_id}: "
            f"{prediction.category.primary} -> {record.category}"
        )
        return record


class RetrainScheduler:
    """
    Triggers a retrain each time a user's correction count crosses a
    multiple of the retrain interval.

    Appends and counts are separate store calls, so concurrent corrections
    can skip past an exact multiple. The scheduler remembers the last
    interval it retrained for and serializes the check per user.
    """

    def __init__(
        self,
        correction_store: CorrectionStore,
        adaptive_classifier: AdaptiveClassifier,
        settings: Optional[MLSettings] = None,
    ):
        self.settings = settings or get_ml_settings()
        self.correction_store = correction_store
        self.adaptive_classifier = adaptive_classifier
        self._retrained_interval: Dict[str, int] = {}
        self._locks: Dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    def should_retrain(self, correction_count: int, last_interval: int = 0) -> bool:
        return correction_count // self.settings.retrain_interval > last_interval

    async def on_correction_recorded(self, user_id: str) -> bool:
        """
        Retrain the user's model when the count reaches a new interval.

        Returns:
            True if a retrain ran and produced a model.
        """
        async with self._locks[user_id]:
            count = await self.correction_store.count(user_id)
            last_interval = self._retrained_interval.get(user_id, 0)
            if not self.should_retrain(count, last_interval):
                return False
            self._retrained_interval[user_id] = count // self.settings.retrain_interval

            logger.info(f"User {user_id} reached {count} corrections, retraining")
            return await self.adaptive_classifier.train_model(user_id)
