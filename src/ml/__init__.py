"""
Transaction classification module.

Classifies creator transactions into categories, a business/personal tag
and a tax-deductibility verdict using keyword rules, per-user models
trained from corrections and bank-feed category fallbacks.
"""

from .settings import MLSettings, get_ml_settings
from .taxonomy import Taxonomy, load_taxonomy
from .transaction_classifier import TransactionClassifier

__all__ = [
    "MLSettings",
    "get_ml_settings",
    "Taxonomy",
    "load_taxonomy",
    "TransactionClassifier",
]
