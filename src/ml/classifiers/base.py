"""
Base classifier interface.

Defines the capability interface for trainable text classifiers and the
label encoding used to pack a full classification into one class label.
"""

from abc import ABC, abstractmethod
from typing import List, Sequence, Tuple

from ml.text import TextFeatures

LABEL_SEPARATOR = "|"


def encode_label(category: str, business_classification: str, is_deductible: bool) -> str:
    """Pack a classification into a single training label."""
    return LABEL_SEPARATOR.join(
        [category, business_classification, "true" if is_deductible else "false"]
    )


def decode_label(label: str) -> Tuple[str, str, bool]:
    """
    Unpack a training label.

    Returns:
        (category, business_classification, is_deductible)

    Raises:
        ValueError: If the label does not have three parts.
    """
    parts = label.split(LABEL_SEPARATOR)
    if len(parts) != 3:
        raise ValueError(f"Malformed classification label: {label!r}")
    category, business, deductible = parts
    return category, business, deductible == "true"


class TextClassifier(ABC):
    """
    Abstract base class for trainable text classifiers.

    Implementations are trained once on a full example set; retraining
    means building a new instance.
    """

    name: str = "base"

    @abstractmethod
    def train(self, examples: Sequence[Tuple[TextFeatures, str]]) -> None:
        """
        Fit the classifier.

        Args:
            examples: (features, label) pairs. A single distinct label is valid.
        """
        pass

    @abstractmethod
    def classify(self, features: TextFeatures) -> Tuple[str, float]:
        """
        Predict the best label.

        Returns:
            (label, confidence) with confidence in [0, 1].
        """
        pass

    @property
    @abstractmethod
    def labels(self) -> List[str]:
        """Labels seen during training."""
        pass

    def classify_batch(self, features: Sequence[TextFeatures]) -> List[Tuple[str, float]]:
        """
        Classify several texts.

        Default implementation calls classify() for each item.
        """
        return [self.classify(f) for f in features]
