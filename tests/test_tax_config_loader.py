"""Tests for jurisdiction parameter loading."""

import pytest
import yaml

from calculator.jurisdictions import JURISDICTIONS, get_jurisdiction_calculator
from calculator.jurisdictions.india import IndiaTaxCalculator
from calculator.jurisdictions.us import USTaxCalculator
from calculator.tax_year_config import IndiaTaxConfig, USTaxConfig, load_us_config
from config.settings import EngineSettings
from config.tax_config_loader import TaxConfigLoader, get_config_loader
from domain.exceptions import TaxConfigurationError, UnsupportedJurisdictionError


class TestTaxConfigLoader:

    def test_available_jurisdictions(self):
        assert TaxConfigLoader().available_jurisdictions() == ["IN", "US"]

    def test_load_case_insensitive(self):
        config = TaxConfigLoader().load_config("us")
        assert config["currency"] == "USD"
        assert "_metadata" not in config

    def test_returns_copies(self):
        loader = TaxConfigLoader()
        loader.load_config("US")["currency"] = "EUR"
        assert loader.load_config("US")["currency"] == "USD"

    def test_metadata(self):
        metadata = TaxConfigLoader().get_metadata("IN")
        assert metadata.tax_year == 2024
        assert metadata.source == "CBDT"

    def test_unsupported(self):
        with pytest.raises(UnsupportedJurisdictionError) as exc_info:
            TaxConfigLoader().load_config("DE")
        assert exc_info.value.supported == ("IN", "US")

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("TAX_US_SELF_EMPLOYMENT_TAX_RATE", "0.15")
        assert TaxConfigLoader().load_config("US")["self_employment_tax_rate"] == 0.15

    def test_env_override_skips_structured(self, monkeypatch):
        monkeypatch.setenv("TAX_US_STATE_TAX_RATES", "0.1")
        assert isinstance(TaxConfigLoader().load_config("US")["state_tax_rates"], dict)

    def test_custom_directory(self, tmp_path):
        source = TaxConfigLoader().load_config("US")
        source["default_state_tax_rate"] = 0.07
        (tmp_path / "us.yaml").write_text(yaml.safe_dump(source))

        config = load_us_config(TaxConfigLoader(tmp_path))
        assert config.default_state_tax_rate == 0.07

    def test_non_mapping_file(self, tmp_path):
        (tmp_path / "us.yaml").write_text("- just\n- a list\n")
        with pytest.raises(TaxConfigurationError):
            TaxConfigLoader(tmp_path).load_config("US")

    def test_global_loader_uses_settings(self):
        assert get_config_loader().config_dir == EngineSettings().tax_parameter_dir


class TestTypedConfigs:

    def test_us_config(self):
        config = load_us_config()
        assert isinstance(config, USTaxConfig)
        assert config.tax_year == 2024
        assert config.standard_deduction_for("married_joint") == 27_700
        assert config.state_tax_rates["CA"] == 0.093

    def test_missing_brackets(self):
        with pytest.raises(TaxConfigurationError):
            USTaxConfig.from_dict({"standard_deduction": {"single": 1}})

    def test_india_requires_new_regime(self):
        with pytest.raises(TaxConfigurationError):
            IndiaTaxConfig.from_dict({"regimes": {"old": {"brackets": [
                {"min": 0, "max": None, "rate": 0.1},
            ]}}})


class TestJurisdictionRegistry:

    def test_lookup(self):
        assert isinstance(get_jurisdiction_calculator("us"), USTaxCalculator)
        assert isinstance(get_jurisdiction_calculator("IN"), IndiaTaxCalculator)
        assert set(JURISDICTIONS) == {"US", "IN"}

    @pytest.mark.parametrize("country", ["DE", "", None])
    def test_unsupported(self, country):
        with pytest.raises(UnsupportedJurisdictionError):
            get_jurisdiction_calculator(country)
