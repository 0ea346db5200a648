"""
TF-IDF + multinomial naive Bayes text classifier.

Backs the per-user adaptive models. MultinomialNB accepts a training set
with a single distinct label, which is common for users whose first
corrections all point at the same category.
"""

import logging
from typing import List, Sequence, Tuple

import numpy as np
from sklearn.feature_extraction.text import TfidfVectorizer
from sklearn.naive_bayes import MultinomialNB
from sklearn.pipeline import Pipeline

from ml.text import TextFeatures

from .base import TextClassifier

logger = logging.getLogger(__name__)


class NaiveBayesTextClassifier(TextClassifier):
    """
    TF-IDF + MultinomialNB classifier over pre-tokenized text.

    The vectorizer consumes the space-joined tokens produced by the text
    normalizer, so training and prediction share one tokenization.
    """

    name = "naive_bayes"

    def __init__(self, alpha: float = 1.0):
        self.alpha = alpha
        self._pipeline = None

    def _build_pipeline(self) -> Pipeline:
        return Pipeline([
            ("tfidf", TfidfVectorizer(
                token_pattern=r"(?u)\b\w+\b",
                ngram_range=(1, 2),
                lowercase=False,
                sublinear_tf=True,
            )),
            ("nb", MultinomialNB(alpha=self.alpha)),
        ])

    def train(self, examples: Sequence[Tuple[TextFeatures, str]]) -> None:
        """
        Fit a fresh pipeline on the examples.

        Raises:
            ValueError: If no example has any token.
        """
        texts = [features.joined_tokens for features, _ in examples]
        labels = [label for _, label in examples]
        if not any(texts):
            raise ValueError("Cannot train on examples without tokens")

        pipeline = self._build_pipeline()
        pipeline.fit(texts, labels)
        self._pipeline = pipeline
        logger.debug(
            f"Trained naive Bayes model on {len(texts)} examples, "
            f"{len(pipeline.classes_)} labels"
        )

    @property
    def is_trained(self) -> bool:
        return self._pipeline is not None

    @property
    def labels(self) -> List[str]:
        if self._pipeline is None:
            return []
        return [str(c) for c in self._pipeline.classes_]

    def classify(self, features: TextFeatures) -> Tuple[str, float]:
        """
        Predict the most probable label.

        Raises:
            RuntimeError: If the classifier has not been trained.
        """
        return self.classify_batch([features])[0]

    def classify_batch(self, features: Sequence[TextFeatures]) -> List[Tuple[str, float]]:
        if self._pipeline is None:
            raise RuntimeError("Classifier has not been trained")

        probas = self._pipeline.predict_proba([f.joined_tokens for f in features])
        classes = self._pipeline.classes_
        results = []
        for proba in probas:
            best_idx = int(np.argmax(proba))
            results.append((str(classes[best_idx]), float(proba[best_idx])))
        return results
