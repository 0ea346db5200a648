"""Tests for the category taxonomy loader."""

import pytest

from domain.exceptions import TaxConfigurationError
from ml.taxonomy import CategoryGroup, load_taxonomy, taxonomy_from_dict
from models.transaction import TransactionType


class TestPackagedTaxonomy:

    def test_version(self, taxonomy):
        assert taxonomy.version == "1.1.0"

    def test_loader_is_cached(self):
        assert load_taxonomy() is load_taxonomy()

    def test_groups(self, taxonomy):
        assert "ad_revenue" in taxonomy.names(CategoryGroup.INCOME)
        assert "software" in taxonomy.names(CategoryGroup.BUSINESS_EXPENSE)
        assert "groceries" in taxonomy.names(CategoryGroup.PERSONAL)

    def test_candidate_groups_by_type(self, taxonomy):
        assert taxonomy.groups_for(TransactionType.INCOME) == [CategoryGroup.INCOME]
        assert taxonomy.groups_for(TransactionType.EXPENSE) == [
            CategoryGroup.BUSINESS_EXPENSE,
            CategoryGroup.PERSONAL,
        ]
        assert taxonomy.groups_for(TransactionType.TRANSFER) == []

    def test_meals_half_deductible(self, taxonomy):
        meals = taxonomy.get("meals")
        assert meals.deductible is True
        assert meals.deduction_percentage == 0.5
        assert meals.is_business is True

    def test_personal_not_business(self, taxonomy):
        assert taxonomy.get("rent_mortgage").is_business is False

    def test_unknown_category(self, taxonomy):
        assert taxonomy.get("lottery") is None

    def test_keywords_pretokenized(self, taxonomy):
        software = taxonomy.get("software")
        keyword, words, stems = software.keyword_terms[3]
        assert keyword == "after effects"
        assert words == ("after", "effects")
        assert len(stems) == 2

    def test_creator_rules_ordered(self, taxonomy):
        names = [rule.name for rule in taxonomy.creator_rules]
        assert names[0] == "google_platforms"
        assert "creative_software" in names

    def test_creator_rule_matches_word_boundary(self, taxonomy):
        streaming = next(r for r in taxonomy.creator_rules if r.name == "streaming_platforms")
        assert streaming.matches("obs studio plugin")
        assert not streaming.matches("jobs board")


class TestTaxonomyValidation:

    def test_minimal_mapping(self):
        taxonomy = taxonomy_from_dict({
            "_metadata": {"version": "9"},
            "groups": {"income": {"sales": {"keywords": ["invoice"]}}},
        })
        assert taxonomy.version == "9"
        assert taxonomy.get("sales").base_weight == 0.5
        assert list(taxonomy.categories(CategoryGroup.PERSONAL)) == []

    def test_unknown_group(self):
        with pytest.raises(TaxConfigurationError):
            taxonomy_from_dict({"groups": {"hobby": {"chess": {"keywords": ["chess"]}}}})

    def test_category_without_keywords(self):
        with pytest.raises(TaxConfigurationError):
            taxonomy_from_dict({"groups": {"income": {"sales": {"keywords": []}}}})

    def test_duplicate_category(self):
        with pytest.raises(TaxConfigurationError):
            taxonomy_from_dict({"groups": {
                "business_expense": {"tools": {"keywords": ["drill"]}},
                "personal": {"tools": {"keywords": ["hammer"]}},
            }})

    def test_weight_out_of_range(self):
        with pytest.raises(TaxConfigurationError):
            taxonomy_from_dict({"groups": {"income": {"sales": {
                "keywords": ["invoice"], "confidence": 1.5,
            }}}})

    def test_invalid_rule_pattern(self):
        with pytest.raises(TaxConfigurationError):
            taxonomy_from_dict({
                "groups": {"income": {"sales": {"keywords": ["invoice"]}}},
                "creator_rules": [{"name": "broken", "pattern": "(unclosed"}],
            })

    def test_deductible_defaults_deduction_type(self):
        taxonomy = taxonomy_from_dict({"groups": {"business_expense": {
            "tools": {"keywords": ["drill"], "deductible": True},
        }}})
        assert taxonomy.get("tools").deduction_type == "other"
