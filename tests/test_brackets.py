import math

import pytest

from calculator.brackets import (
    TaxBracket,
    bracket_breakdown,
    evaluate_brackets,
    marginal_rate,
    parse_brackets,
    validate_brackets,
)
from calculator.tax_year_config import load_india_config, load_us_config
from domain.exceptions import TaxConfigurationError


def test_single_crosses_bracket():
    brackets = load_us_config().brackets_for("single")

    # 10% on first 11,000 = 1,100.00
    # 12% on remaining 9,000 = 1,080.00
    assert evaluate_brackets(20_000.0, brackets) == pytest.approx(2180.0)


def test_married_joint_first_bracket():
    brackets = load_us_config().brackets_for("married_joint")

    # MFJ 10% band runs to 22,000
    assert evaluate_brackets(20_000.0, brackets) == pytest.approx(2000.0)


def test_other_statuses_use_single_table():
    config = load_us_config()
    assert config.brackets_for("head_of_household") == config.brackets_for("single")


def test_zero_and_negative_income():
    brackets = load_us_config().brackets_for("single")
    assert evaluate_brackets(0.0, brackets) == 0.0
    assert evaluate_brackets(-5_000.0, brackets) == 0.0


def test_india_new_regime_zero_band():
    brackets = load_india_config().regime("new").brackets
    assert evaluate_brackets(300_000.0, brackets) == 0.0
    assert evaluate_brackets(700_000.0, brackets) == pytest.approx(20_000.0)


def test_breakdown_matches_total():
    brackets = load_us_config().brackets_for("single")
    rows = bracket_breakdown(50_000.0, brackets)
    assert [r["rate"] for r in rows] == [0.10, 0.12, 0.22]
    assert sum(r["tax"] for r in rows) == pytest.approx(evaluate_brackets(50_000.0, brackets))


def test_marginal_rate():
    brackets = load_us_config().brackets_for("single")
    assert marginal_rate(5_000.0, brackets) == 0.10
    assert marginal_rate(50_000.0, brackets) == 0.22
    assert marginal_rate(1_000_000.0, brackets) == 0.37


def test_parse_open_top_bracket():
    brackets = parse_brackets([
        {"min": 0, "max": 100, "rate": 0.0},
        {"min": 100, "max": None, "rate": 0.5},
    ])
    assert math.isinf(brackets[-1].max)
    assert brackets[-1].to_dict() == {"min": 100.0, "max": None, "rate": 0.5}


class TestValidation:

    def test_empty(self):
        with pytest.raises(TaxConfigurationError):
            validate_brackets([])

    def test_must_start_at_zero(self):
        with pytest.raises(TaxConfigurationError):
            validate_brackets([TaxBracket(100, math.inf, 0.1)])

    def test_gap(self):
        with pytest.raises(TaxConfigurationError):
            validate_brackets([TaxBracket(0, 100, 0.1), TaxBracket(150, math.inf, 0.2)])

    def test_overlap(self):
        with pytest.raises(TaxConfigurationError):
            validate_brackets([TaxBracket(0, 100, 0.1), TaxBracket(50, math.inf, 0.2)])

    def test_bounded_top(self):
        with pytest.raises(TaxConfigurationError):
            validate_brackets([TaxBracket(0, 100, 0.1), TaxBracket(100, 200, 0.2)])

    def test_rate_out_of_range(self):
        with pytest.raises(TaxConfigurationError):
            validate_brackets([TaxBracket(0, math.inf, 1.2)])
