"""
ML Settings configuration.

Environment variable configuration for transaction classification and
per-user model training.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class MLSettings(BaseSettings):
    """Transaction classification configuration."""

    model_config = SettingsConfigDict(
        env_prefix="ML_",
        protected_namespaces=(),
        extra="ignore",
    )

    # Confidence thresholds
    adaptive_accept_threshold: float = Field(
        default=0.6,
        ge=0.0,
        le=1.0,
        description="Per-user model prediction is accepted above this confidence"
    )
    external_category_threshold: float = Field(
        default=0.5,
        ge=0.0,
        le=1.0,
        description="Below this confidence, bank-feed categories override the category"
    )
    external_category_confidence: float = Field(
        default=0.3,
        ge=0.0,
        le=1.0,
        description="Confidence assigned to a bank-feed category override"
    )

    # Retraining
    retrain_interval: int = Field(
        default=10,
        ge=1,
        description="Retrain after every N corrections"
    )
    min_training_examples: int = Field(
        default=10,
        ge=1,
        description="Minimum corrections required to train a user model"
    )
    max_training_examples: int = Field(
        default=1000,
        ge=1,
        description="Most recent corrections used for training"
    )

    # Model cache
    model_cache_size: int = Field(
        default=256,
        ge=1,
        description="Maximum number of per-user models kept in memory"
    )

    # Taxonomy
    taxonomy_path: Optional[str] = Field(
        default=None,
        description="Category taxonomy YAML (defaults to the packaged file)"
    )


@lru_cache
def get_ml_settings() -> MLSettings:
    """
    Get cached ML settings instance.

    Returns:
        MLSettings: Cached settings loaded from environment.
    """
    return MLSettings()
