"""
Progressive bracket arithmetic shared by every jurisdiction.

A bracket table is an ascending list of TaxBracket covering [0, inf) with
no gaps or overlaps. Deductions are applied to the income before it reaches
evaluate_brackets(); income at or below zero always yields zero tax.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Sequence

from domain.exceptions import TaxConfigurationError


@dataclass(frozen=True)
class TaxBracket:
    """A single marginal-rate band."""

    min: float
    max: float
    rate: float

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "TaxBracket":
        upper = data.get("max")
        return cls(
            min=float(data["min"]),
            max=math.inf if upper is None else float(upper),
            rate=float(data["rate"]),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "min": self.min,
            "max": None if math.isinf(self.max) else self.max,
            "rate": self.rate,
        }


def parse_brackets(rows: Sequence[Mapping[str, Any]], name: str = "brackets") -> List[TaxBracket]:
    """Build and validate a bracket table from YAML rows."""
    brackets = [TaxBracket.from_mapping(row) for row in rows]
    validate_brackets(brackets, name)
    return brackets


def validate_brackets(brackets: Sequence[TaxBracket], name: str = "brackets") -> None:
    """
    Check that a table covers [0, inf) contiguously.

    Raises:
        TaxConfigurationError: on an empty table, a gap, an overlap,
            an inverted band, an out-of-range rate or a bounded top bracket.
    """
    if not brackets:
        raise TaxConfigurationError(f"{name}: bracket table is empty")

    if brackets[0].min != 0:
        raise TaxConfigurationError(f"{name}: first bracket must start at 0")

    for idx, bracket in enumerate(brackets):
        if not 0.0 <= bracket.rate <= 1.0:
            raise TaxConfigurationError(f"{name}: rate {bracket.rate} out of range")
        if bracket.max <= bracket.min:
            raise TaxConfigurationError(
                f"{name}: bracket {idx} has max {bracket.max} <= min {bracket.min}"
            )
        if idx > 0 and bracket.min != brackets[idx - 1].max:
            raise TaxConfigurationError(
                f"{name}: bracket {idx} starts at {bracket.min}, "
                f"previous ends at {brackets[idx - 1].max}"
            )

    if not math.isinf(brackets[-1].max):
        raise TaxConfigurationError(f"{name}: top bracket must be unbounded")


def evaluate_brackets(income: float, brackets: Sequence[TaxBracket]) -> float:
    """Calculate tax on income using progressive brackets."""
    if income <= 0:
        return 0.0

    tax = 0.0
    for bracket in brackets:
        if income > bracket.min:
            tax += (min(income, bracket.max) - bracket.min) * bracket.rate
    return tax


def bracket_breakdown(income: float, brackets: Sequence[TaxBracket]) -> List[Dict[str, float]]:
    """Per-bracket detail of evaluate_brackets(), for explanations and logs."""
    rows: List[Dict[str, float]] = []
    if income <= 0:
        return rows

    for bracket in brackets:
        if income <= bracket.min:
            break
        amount = min(income, bracket.max) - bracket.min
        rows.append({
            "rate": bracket.rate,
            "income_in_bracket": round(amount, 2),
            "tax": round(amount * bracket.rate, 2),
        })
    return rows


def marginal_rate(income: float, brackets: Sequence[TaxBracket]) -> float:
    """Rate of the bracket the next unit of income falls into."""
    rate = brackets[0].rate
    for bracket in brackets:
        if income >= bracket.min:
            rate = bracket.rate
    return rate
