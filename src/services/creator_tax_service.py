"""
Creator Tax Service - Application service for classification and tax estimation.

The in-process surface of the engine:
- Classifying transactions and suggesting categories
- Recording user corrections and retraining per-user models
- Computing tax snapshots, tax jar guidance and set-aside breakdowns
- Upcoming quarterly due dates

Storage is injected through the repository interfaces in domain.repositories.
"""

from datetime import date
from typing import Any, Dict, List, Mapping, Optional, Union

from calculator.engine import TaxEstimationEngine
from config.settings import EngineSettings, get_engine_settings
from domain.repositories import CorrectionStore, ProfileStore, TransactionStore
from ml.classifiers.adaptive_classifier import AdaptiveClassifier
from ml.classifiers.rule_based_classifier import RuleBasedClassifier
from ml.settings import MLSettings, get_ml_settings
from ml.taxonomy import Taxonomy, load_taxonomy
from ml.training.corrections import CorrectionRecorder, RetrainScheduler
from ml.transaction_classifier import TransactionClassifier
from models.classification import ClassificationResult
from models.tax_calculation import TaxCalculationResult
from models.transaction import TransactionInput, TransactionType, UserCorrection
from recommendation.due_dates import DueDateTracker

from .logging_config import get_logger, log_performance, user_id_var

logger = get_logger(__name__)

TransactionLike = Union[TransactionInput, Mapping[str, Any]]


class CreatorTaxService:
    """
    Application service for creator transaction classification and taxes.

    Usage:
        service = CreatorTaxService(transactions, corrections, profiles)
        result = service.classify({"description": "YouTube AdSense payment",
                                   "amount": -1250.0, "date": "2024-02-01"})
        snapshot = await service.calculate_taxes("user-1", 2024, quarter=1)
    """

    def __init__(
        self,
        transaction_store: TransactionStore,
        correction_store: CorrectionStore,
        profile_store: ProfileStore,
        ml_settings: Optional[MLSettings] = None,
        engine_settings: Optional[EngineSettings] = None,
        taxonomy: Optional[Taxonomy] = None,
        today=date.today,
    ):
        self.ml_settings = ml_settings or get_ml_settings()
        self.engine_settings = engine_settings or get_engine_settings()
        self.taxonomy = taxonomy or load_taxonomy(self.ml_settings.taxonomy_path)

        self.rule_classifier = RuleBasedClassifier(self.taxonomy)
        self.adaptive_classifier = AdaptiveClassifier(
            correction_store, taxonomy=self.taxonomy, settings=self.ml_settings
        )
        self.classifier = TransactionClassifier(
            self.rule_classifier, self.adaptive_classifier, self.ml_settings
        )
        self.correction_recorder = CorrectionRecorder(correction_store)
        self.retrain_scheduler = RetrainScheduler(
            correction_store, self.adaptive_classifier, self.ml_settings
        )

        self.due_date_tracker = DueDateTracker()
        self.tax_engine = TaxEstimationEngine(
            transaction_store,
            profile_store,
            taxonomy=self.taxonomy,
            due_date_tracker=self.due_date_tracker,
            settings=self.engine_settings,
            today=today,
        )

    # =========================================================================
    # CLASSIFICATION
    # =========================================================================

    def classify(
        self,
        transaction: TransactionLike,
        user_id: Optional[str] = None,
    ) -> ClassificationResult:
        """
        Classify a transaction.

        Raises:
            pydantic.ValidationError: If the transaction payload is malformed.
        """
        return self.classifier.classify(transaction, user_id)

    def suggest_categories(self, description: str, limit: int = 5) -> List[Dict[str, Any]]:
        return self.rule_classifier.suggest_categories(description, limit)

    async def record_correction(
        self,
        user_id: str,
        original: TransactionLike,
        user_correction: Union[UserCorrection, Mapping[str, Any]],
        system_prediction: Optional[ClassificationResult] = None,
    ) -> bool:
        """
        Persist a user correction and retrain on every Nth one.

        Returns:
            True once the correction is persisted.
        """
        token = user_id_var.set(user_id)
        try:
            await self.correction_recorder.record_correction(
                user_id, original, user_correction, system_prediction
            )
            retrained = await self.retrain_scheduler.on_correction_recorded(user_id)
            if retrained:
                logger.info("Per-user classifier retrained")
            return True
        finally:
            user_id_var.reset(token)

    async def train_model(self, user_id: str) -> bool:
        return await self.adaptive_classifier.train_model(user_id)

    def model_info(self, user_id: str) -> Optional[Dict[str, Any]]:
        return self.adaptive_classifier.model_info(user_id)

    # =========================================================================
    # TAX ESTIMATION
    # =========================================================================

    @log_performance("calculate_taxes")
    async def calculate_taxes(
        self,
        user_id: str,
        year: int,
        quarter: Optional[int] = None,
    ) -> TaxCalculationResult:
        token = user_id_var.set(user_id)
        try:
            return await self.tax_engine.calculate_taxes(user_id, year, quarter)
        finally:
            user_id_var.reset(token)

    async def calculate_real_time_tax_jar(
        self,
        user_id: str,
        amount: float,
        transaction_type: Union[TransactionType, str],
    ) -> Dict[str, Any]:
        return await self.tax_engine.calculate_real_time_tax_jar(
            user_id, amount, TransactionType(transaction_type)
        )

    def calculate_tax_set_aside(
        self,
        amount: float,
        country: str = "US",
        overrides: Optional[Mapping[str, float]] = None,
    ) -> Dict[str, Any]:
        return self.tax_engine.calculate_tax_set_aside(amount, country, overrides)

    async def get_quarterly_tax_summary(self, user_id: str, year: int) -> Dict[str, Dict[str, Any]]:
        return await self.tax_engine.get_quarterly_tax_summary(user_id, year)

    def get_upcoming_due_dates(
        self,
        jurisdiction: str = "US",
        today: Optional[date] = None,
    ) -> List[Dict[str, Any]]:
        return self.due_date_tracker.get_upcoming_due_dates(
            jurisdiction, today or self.tax_engine.today()
        )
