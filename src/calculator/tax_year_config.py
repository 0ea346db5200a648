from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from calculator.brackets import TaxBracket, parse_brackets
from config.tax_config_loader import TaxConfigLoader, get_config_loader
from domain.exceptions import TaxConfigurationError


BracketTable = Dict[str, List[TaxBracket]]


def _require(data: Mapping[str, Any], key: str, jurisdiction: str) -> Any:
    if key not in data:
        raise TaxConfigurationError(f"{jurisdiction}: missing parameter '{key}'")
    return data[key]


@dataclass(frozen=True)
class USTaxConfig:
    """
    United States parameters for one tax year.

    NOTE: Values come from config/tax_parameters/us.yaml and should be
    reviewed annually against IRS published figures.
    """

    tax_year: int
    federal_brackets: BracketTable
    standard_deduction: Dict[str, float]
    state_tax_rates: Dict[str, float]
    default_state_tax_rate: float = 0.05

    # Self-employment (Schedule SE)
    self_employment_tax_rate: float = 0.1413
    additional_medicare_threshold: float = 200000.0
    additional_medicare_rate: float = 0.009

    # Simplified home office method
    home_office_rate_per_sqft: float = 5.0
    home_office_max_sqft: float = 300.0
    home_office_max_deduction: float = 1500.0

    # Tax jar: max(owed * multiplier, income * floor rate)
    tax_jar_owed_multiplier: float = 1.10
    tax_jar_income_floor_rate: float = 0.25

    set_aside_rates: Dict[str, float] = field(default_factory=dict)

    def brackets_for(self, filing_status: Optional[str]) -> List[TaxBracket]:
        """Married filing jointly has its own table; every other status uses single."""
        return self.federal_brackets.get(filing_status or "single", self.federal_brackets["single"])

    def standard_deduction_for(self, filing_status: Optional[str]) -> float:
        return self.standard_deduction.get(filing_status or "single", self.standard_deduction["single"])

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], tax_year: int = 2024) -> "USTaxConfig":
        brackets_raw = _require(data, "federal_brackets", "US")
        federal = {
            status: parse_brackets(rows, f"US federal {status}")
            for status, rows in brackets_raw.items()
        }
        if "single" not in federal:
            raise TaxConfigurationError("US: federal_brackets must include 'single'")

        home_office = data.get("home_office", {})
        tax_jar = data.get("tax_jar", {})
        return cls(
            tax_year=tax_year,
            federal_brackets=federal,
            standard_deduction={k: float(v) for k, v in _require(data, "standard_deduction", "US").items()},
            state_tax_rates={k.upper(): float(v) for k, v in data.get("state_tax_rates", {}).items()},
            default_state_tax_rate=float(data.get("default_state_tax_rate", 0.05)),
            self_employment_tax_rate=float(data.get("self_employment_tax_rate", 0.1413)),
            additional_medicare_threshold=float(data.get("additional_medicare_threshold", 200000)),
            additional_medicare_rate=float(data.get("additional_medicare_rate", 0.009)),
            home_office_rate_per_sqft=float(home_office.get("rate_per_square_foot", 5)),
            home_office_max_sqft=float(home_office.get("max_square_feet", 300)),
            home_office_max_deduction=float(home_office.get("max_deduction", 1500)),
            tax_jar_owed_multiplier=float(tax_jar.get("owed_multiplier", 1.10)),
            tax_jar_income_floor_rate=float(tax_jar.get("income_floor_rate", 0.25)),
            set_aside_rates={k: float(v) for k, v in data.get("set_aside_rates", {}).items()},
        )


@dataclass(frozen=True)
class IndiaRegimeConfig:
    """One of the two personal income tax regimes."""

    name: str
    brackets: List[TaxBracket]
    standard_deduction: float = 0.0
    allows_itemized_deductions: bool = False


@dataclass(frozen=True)
class IndiaTaxConfig:
    """
    India parameters for one financial year.

    Values come from config/tax_parameters/in.yaml.
    """

    tax_year: int
    regimes: Dict[str, IndiaRegimeConfig]
    cess_rate: float = 0.04

    # Chapter VI-A caps (old regime only); 80E is uncapped
    section_80c_limit: float = 150000.0
    section_80d_limit: float = 25000.0
    section_80d_senior_limit: float = 50000.0

    gst_threshold: float = 2000000.0
    gst_rates: Dict[str, float] = field(default_factory=dict)

    # Section 44ADA
    presumptive_threshold: float = 5000000.0
    presumptive_profit_rate: float = 0.50
    presumptive_regime: str = "new"

    professional_tax_max: float = 2500.0
    professional_tax_rate: float = 0.001

    tax_jar_gross_income_rate: float = 0.30
    set_aside_rates: Dict[str, float] = field(default_factory=dict)

    def regime(self, name: Optional[str]) -> IndiaRegimeConfig:
        return self.regimes.get(name or "new", self.regimes["new"])

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], tax_year: int = 2024) -> "IndiaTaxConfig":
        regimes_raw = _require(data, "regimes", "IN")
        regimes = {
            name: IndiaRegimeConfig(
                name=name,
                brackets=parse_brackets(_require(raw, "brackets", "IN"), f"IN {name} regime"),
                standard_deduction=float(raw.get("standard_deduction", 0)),
                allows_itemized_deductions=bool(raw.get("allows_itemized_deductions", False)),
            )
            for name, raw in regimes_raw.items()
        }
        if "new" not in regimes:
            raise TaxConfigurationError("IN: regimes must include 'new'")

        limits = data.get("deduction_limits", {})
        gst = data.get("gst", {})
        presumptive = data.get("presumptive", {})
        professional = data.get("professional_tax", {})
        return cls(
            tax_year=tax_year,
            regimes=regimes,
            cess_rate=float(data.get("cess_rate", 0.04)),
            section_80c_limit=float(limits.get("section_80c", 150000)),
            section_80d_limit=float(limits.get("section_80d", 25000)),
            section_80d_senior_limit=float(limits.get("section_80d_senior", 50000)),
            gst_threshold=float(gst.get("threshold", 2000000)),
            gst_rates={k: float(v) for k, v in gst.get("rates", {"digital_services": 0.18}).items()},
            presumptive_threshold=float(presumptive.get("threshold", 5000000)),
            presumptive_profit_rate=float(presumptive.get("profit_rate", 0.50)),
            presumptive_regime=str(presumptive.get("regime", "new")),
            professional_tax_max=float(professional.get("max_annual", 2500)),
            professional_tax_rate=float(professional.get("rate", 0.001)),
            tax_jar_gross_income_rate=float(data.get("tax_jar", {}).get("gross_income_rate", 0.30)),
            set_aside_rates={k: float(v) for k, v in data.get("set_aside_rates", {}).items()},
        )


def load_us_config(loader: Optional[TaxConfigLoader] = None) -> USTaxConfig:
    loader = loader or get_config_loader()
    metadata = loader.get_metadata("US")
    return USTaxConfig.from_dict(loader.load_config("US"), metadata.tax_year if metadata else 2024)


def load_india_config(loader: Optional[TaxConfigLoader] = None) -> IndiaTaxConfig:
    loader = loader or get_config_loader()
    metadata = loader.get_metadata("IN")
    return IndiaTaxConfig.from_dict(loader.load_config("IN"), metadata.tax_year if metadata else 2024)
