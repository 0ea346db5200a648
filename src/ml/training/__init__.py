"""
Training module for per-user transaction classifiers.

Records user corrections and schedules retraining of the adaptive models.
"""

from .corrections import (
    CorrectionRecorder,
    RetrainScheduler,
    determine_correction_type,
    extract_features,
)

__all__ = [
    "CorrectionRecorder",
    "RetrainScheduler",
    "determine_correction_type",
    "extract_features",
]
