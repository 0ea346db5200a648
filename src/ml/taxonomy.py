"""
Category taxonomy.

Loads the versioned, immutable category configuration (keywords, weights,
deductibility and the ordered creator override rules) from YAML. The same
taxonomy drives the rule-based classifier and the period aggregator's
business/personal split.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Iterator, List, Mapping, Optional, Pattern, Tuple

import yaml

from domain.exceptions import TaxConfigurationError
from ml.text import stem, tokenize
from models.transaction import TransactionType

logger = logging.getLogger(__name__)

DEFAULT_TAXONOMY_PATH = Path(__file__).parent / "data" / "categories.yaml"


class CategoryGroup(str, Enum):
    INCOME = "income"
    BUSINESS_EXPENSE = "business_expense"
    PERSONAL = "personal"


@dataclass(frozen=True)
class CategoryDefinition:
    """One category of the taxonomy."""

    name: str
    group: CategoryGroup
    keywords: Tuple[str, ...]
    base_weight: float = 0.5
    deductible: bool = False
    deduction_type: Optional[str] = None
    deduction_percentage: float = 1.0
    platforms: Tuple[str, ...] = ()

    # Pre-tokenized keywords: (lower-cased keyword, its words, its stems)
    keyword_terms: Tuple[Tuple[str, Tuple[str, ...], Tuple[str, ...]], ...] = field(
        default=(), repr=False, compare=False
    )

    @classmethod
    def build(cls, name: str, group: CategoryGroup, data: Mapping[str, Any]) -> "CategoryDefinition":
        keywords = tuple(str(k).lower() for k in data.get("keywords", []))
        if not keywords:
            raise TaxConfigurationError(f"Category '{name}' has no keywords")

        weight = float(data.get("confidence", 0.5))
        percentage = float(data.get("deduction_percentage", 1.0))
        if not 0.0 <= weight <= 1.0 or not 0.0 <= percentage <= 1.0:
            raise TaxConfigurationError(f"Category '{name}': weights must lie in [0, 1]")

        terms = []
        for keyword in keywords:
            words = tuple(tokenize(keyword))
            terms.append((keyword, words, tuple(stem(w) for w in words)))

        deductible = bool(data.get("deductible", False))
        return cls(
            name=name,
            group=group,
            keywords=keywords,
            base_weight=weight,
            deductible=deductible,
            deduction_type=data.get("deduction_type") or ("other" if deductible else None),
            deduction_percentage=percentage,
            platforms=tuple(data.get("platforms", [])),
            keyword_terms=tuple(terms),
        )

    @property
    def is_business(self) -> bool:
        return self.group in (CategoryGroup.INCOME, CategoryGroup.BUSINESS_EXPENSE)


@dataclass(frozen=True)
class CreatorRule:
    """Creator-specific override applied after classification."""

    name: str
    pattern: Pattern[str]
    business: bool = False
    deductible: bool = False

    def matches(self, normalized_text: str) -> bool:
        return bool(self.pattern.search(normalized_text))


@dataclass(frozen=True)
class Taxonomy:
    """Immutable, versioned category configuration."""

    version: str
    groups: Dict[CategoryGroup, Tuple[CategoryDefinition, ...]]
    creator_rules: Tuple[CreatorRule, ...]

    def groups_for(self, transaction_type: TransactionType) -> List[CategoryGroup]:
        """Candidate groups for a transaction type."""
        if transaction_type == TransactionType.INCOME:
            return [CategoryGroup.INCOME]
        if transaction_type == TransactionType.EXPENSE:
            return [CategoryGroup.BUSINESS_EXPENSE, CategoryGroup.PERSONAL]
        return []

    def categories(self, group: Optional[CategoryGroup] = None) -> Iterator[CategoryDefinition]:
        if group is not None:
            yield from self.groups.get(group, ())
            return
        for defs in self.groups.values():
            yield from defs

    def get(self, name: str) -> Optional[CategoryDefinition]:
        for category in self.categories():
            if category.name == name:
                return category
        return None

    def names(self, group: CategoryGroup) -> frozenset:
        return frozenset(c.name for c in self.groups.get(group, ()))


def _parse_taxonomy(raw: Mapping[str, Any], source: str) -> Taxonomy:
    metadata = raw.get("_metadata") or {}
    groups_raw = raw.get("groups") or {}

    groups: Dict[CategoryGroup, Tuple[CategoryDefinition, ...]] = {}
    seen = set()
    for group_name, categories in groups_raw.items():
        try:
            group = CategoryGroup(group_name)
        except ValueError:
            raise TaxConfigurationError(f"{source}: unknown category group '{group_name}'")
        defs = []
        for name, data in (categories or {}).items():
            if name in seen:
                raise TaxConfigurationError(f"{source}: duplicate category '{name}'")
            seen.add(name)
            defs.append(CategoryDefinition.build(name, group, data or {}))
        groups[group] = tuple(defs)

    for group in CategoryGroup:
        groups.setdefault(group, ())

    rules = []
    for rule in raw.get("creator_rules") or []:
        try:
            pattern = re.compile(rule["pattern"])
        except (KeyError, re.error) as e:
            raise TaxConfigurationError(f"{source}: invalid creator rule {rule!r}: {e}")
        rules.append(CreatorRule(
            name=rule.get("name", rule["pattern"]),
            pattern=pattern,
            business=bool(rule.get("business", False)),
            deductible=bool(rule.get("deductible", False)),
        ))

    return Taxonomy(
        version=str(metadata.get("version", "0")),
        groups=groups,
        creator_rules=tuple(rules),
    )


@lru_cache(maxsize=8)
def load_taxonomy(path: Optional[str] = None) -> Taxonomy:
    """
    Load and cache a taxonomy file.

    Args:
        path: YAML file path. Defaults to the packaged categories.yaml.

    Returns:
        Parsed Taxonomy.
    """
    source = Path(path) if path else DEFAULT_TAXONOMY_PATH
    with open(source, "r") as f:
        raw = yaml.safe_load(f) or {}
    taxonomy = _parse_taxonomy(raw, str(source))
    logger.info(
        f"Loaded category taxonomy v{taxonomy.version} "
        f"({sum(len(g) for g in taxonomy.groups.values())} categories)"
    )
    return taxonomy


def taxonomy_from_dict(raw: Mapping[str, Any]) -> Taxonomy:
    """Build a taxonomy from an in-memory mapping (tests, overrides)."""
    return _parse_taxonomy(raw, "<dict>")
