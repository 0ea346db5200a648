"""
Transaction classifiers module.

Contains the keyword rule-based classifier and the adaptive per-user
classifier with its trainable text model.
"""

from .base import TextClassifier, decode_label, encode_label
from .rule_based_classifier import RuleBasedClassifier
from .naive_bayes_classifier import NaiveBayesTextClassifier
from .adaptive_classifier import AdaptiveClassifier

__all__ = [
    "TextClassifier",
    "decode_label",
    "encode_label",
    "RuleBasedClassifier",
    "NaiveBayesTextClassifier",
    "AdaptiveClassifier",
]
