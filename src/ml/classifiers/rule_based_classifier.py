"""
Keyword rule-based transaction classifier.

Scores every candidate category of the taxonomy against the transaction's
tokens and stems, then applies the creator-specific override rules.
Fast, deterministic and always available; the baseline every user gets
before a per-user model exists.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

from ml.taxonomy import CategoryDefinition, CategoryGroup, Taxonomy, load_taxonomy
from ml.text import TextFeatures, analyze_text
from models.classification import (
    BusinessClassification,
    CategoryAssignment,
    ClassificationResult,
    TaxDeductibility,
)
from models.transaction import TransactionType

logger = logging.getLogger(__name__)

STEM_MATCH_WEIGHT = 0.7
MATCH_BOOST = 1.2
CREATOR_RULE_DEDUCTIBLE_CONFIDENCE = 0.8
SUGGESTION_MIN_CONFIDENCE = 0.1
SHORT_TOKEN_LENGTH = 3


class RuleBasedClassifier:
    """
    Keyword rule-based transaction classifier.

    Usage:
        classifier = RuleBasedClassifier()
        features = analyze_text("YouTube AdSense payment")
        result = classifier.classify(features, TransactionType.INCOME)
    """

    name = "rule_based"

    def __init__(self, taxonomy: Optional[Taxonomy] = None):
        self.taxonomy = taxonomy or load_taxonomy()

    @staticmethod
    def score(
        tokens: Sequence[str],
        stems: Sequence[str],
        category: CategoryDefinition,
    ) -> float:
        """
        Keyword match confidence of one category.

        A keyword scores 1.0 when a token occurs inside it (tokens shorter
        than three characters must equal one of its words), else 0.7 when a
        stemmed token equals one of its stems.
        """
        if not tokens or not category.keyword_terms:
            return 0.0

        stem_set = set(stems)
        matches = 0.0
        for keyword, words, keyword_stems in category.keyword_terms:
            hit = False
            for token in tokens:
                if len(token) < SHORT_TOKEN_LENGTH:
                    if token in words:
                        hit = True
                        break
                elif token in keyword:
                    hit = True
                    break
            if hit:
                matches += 1.0
            elif stem_set.intersection(keyword_stems):
                matches += STEM_MATCH_WEIGHT

        confidence = (matches / len(category.keyword_terms)) * category.base_weight
        if matches > 0:
            confidence = min(confidence * MATCH_BOOST, 1.0)
        return confidence

    def classify(
        self,
        features: TextFeatures,
        transaction_type: TransactionType,
    ) -> ClassificationResult:
        """
        Classify by the best-scoring category among the type's candidate groups.

        Args:
            features: Analyzed transaction text.
            transaction_type: Restricts the candidate groups.

        Returns:
            ClassificationResult; the uncategorized sentinel when nothing matches.
        """
        best: Optional[CategoryDefinition] = None
        best_score = 0.0

        for group in self.taxonomy.groups_for(transaction_type):
            for category in self.taxonomy.categories(group):
                score = self.score(features.tokens, features.stems, category)
                # Strictly greater: the first category wins ties
                if score > best_score:
                    best, best_score = category, score

        if best is None:
            return ClassificationResult.uncategorized(classifier_used=self.name)

        return self._build_result(best, best_score)

    def _build_result(self, category: CategoryDefinition, score: float) -> ClassificationResult:
        business = (
            BusinessClassification.BUSINESS
            if category.is_business
            else BusinessClassification.PERSONAL
        )
        deductibility = TaxDeductibility()
        if category.deductible:
            deductibility = TaxDeductibility(
                is_deductible=True,
                deduction_type=category.deduction_type,
                confidence=score,
                deduction_percentage=category.deduction_percentage,
            )
        return ClassificationResult(
            category=CategoryAssignment(
                primary=category.name,
                detailed=category.name,
                confidence=score,
            ),
            business_classification=business.value,
            tax_deductible=deductibility,
            classifier_used=self.name,
        )

    def apply_creator_rules(
        self,
        result: ClassificationResult,
        normalized_text: str,
        transaction_type: TransactionType,
    ) -> ClassificationResult:
        """
        Apply the ordered creator override rules.

        The first matching rule wins. Returns a new result; the input is
        left untouched.
        """
        updated = result.copy()
        for rule in self.taxonomy.creator_rules:
            if not rule.matches(normalized_text):
                continue

            logger.debug(f"Creator rule '{rule.name}' matched")
            if rule.business:
                updated.business_classification = BusinessClassification.BUSINESS.value
            if rule.deductible and transaction_type == TransactionType.EXPENSE:
                deductibility = updated.tax_deductible
                category = self.taxonomy.get(updated.category.primary)
                updated.tax_deductible = TaxDeductibility(
                    is_deductible=True,
                    deduction_type=(
                        deductibility.deduction_type
                        or (category.deduction_type if category and category.deductible else None)
                        or "business_expense"
                    ),
                    confidence=max(deductibility.confidence, CREATOR_RULE_DEDUCTIBLE_CONFIDENCE),
                    deduction_percentage=deductibility.deduction_percentage or 1.0,
                )
            break
        return updated

    def suggest_categories(self, description: str, limit: int = 5) -> List[Dict[str, Any]]:
        """
        Rank every category of every group against a description.

        Args:
            description: Free text to score.
            limit: Maximum number of suggestions.

        Returns:
            Dicts with category, confidence and tax_deductible, best first.
        """
        features = analyze_text(description)
        suggestions = []
        for group in CategoryGroup:
            for category in self.taxonomy.categories(group):
                score = self.score(features.tokens, features.stems, category)
                if score > SUGGESTION_MIN_CONFIDENCE:
                    suggestions.append({
                        "category": category.name,
                        "group": group.value,
                        "confidence": score,
                        "tax_deductible": category.deductible,
                    })

        suggestions.sort(key=lambda s: s["confidence"], reverse=True)
        return suggestions[:max(limit, 0)]
