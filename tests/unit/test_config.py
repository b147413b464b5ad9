"""
Unit tests for allocation configuration.
"""

import pytest
import yaml
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

import importlib

# config/__init__ re-exports the `settings` instance, shadowing the submodule
# attribute, so resolve the module itself explicitly.
global_settings = importlib.import_module("config.settings")
from config.settings import DEFAULT_ALLOCATION_CONFIG, get_settings, reload_settings
from taa.core.config import AllocationConfig, build_allocation_config, load_allocation_config
from taa.core.types import ConfigurationError, RebalanceUnit, WeightingMethod


class TestAllocationConfig:
    """Tests for AllocationConfig validation."""

    def test_defaults(self):
        config = AllocationConfig()

        assert config.weighting is WeightingMethod.MINIMUM_VARIANCE
        assert config.rebalance_on is RebalanceUnit.MONTHS
        assert config.effective_window_periods == 12
        assert config.max_lookback == 252

    def test_enum_names_accepted(self):
        config = AllocationConfig(weighting="invVar", rebalance_on="quarters")

        assert config.weighting is WeightingMethod.INVERSE_VARIANCE
        assert config.effective_window_periods == 4

    def test_explicit_window_periods(self):
        assert AllocationConfig(window_periods=3).effective_window_periods == 3

    def test_correlation_independent_of_momentum(self):
        """Changing momentum horizons leaves correlation horizons alone."""
        config = AllocationConfig(momentum_lookbacks=(10, 20), momentum_weights=(1, 1))

        assert config.correlation_lookbacks == (21, 63, 126, 252)
        assert config.correlation_lookback.lookbacks == (21, 63, 126, 252)

    def test_volatility_uses_periods_per_year(self):
        assert AllocationConfig(periods_per_year=52).volatility_lookback.periods_per_year == 52

    @pytest.mark.parametrize(
        "values",
        [
            {"momentum_lookbacks": (21, 63), "momentum_weights": (1.0,)},
            {"correlation_lookbacks": (21,), "correlation_weights": (1.0, 2.0)},
            {"weighting": "riskParity"},
            {"rebalance_on": "weeks"},
            {"momentum_penalty": 1.5},
            {"momentum_penalty": -0.1},
            {"top_n": 0},
            {"leverage": 0.0},
            {"window_periods": 0},
            {"zero_weight_tolerance": -1e-8},
        ],
    )
    def test_invalid_values(self, values):
        """Inconsistent parameters are rejected before any run."""
        with pytest.raises(ConfigurationError):
            build_allocation_config(values)

    def test_unknown_field(self):
        with pytest.raises(ConfigurationError):
            build_allocation_config({"lookback": 21})

    def test_wrong_type(self):
        with pytest.raises(ConfigurationError):
            build_allocation_config(top_n="many")

    def test_none_overrides_ignored(self):
        config = build_allocation_config({"top_n": 3}, top_n=None, offset=2)

        assert config.top_n == 3
        assert config.offset == 2


class TestLoadAllocationConfig:
    """Tests for YAML loading."""

    def test_default_file(self):
        config = load_allocation_config(DEFAULT_ALLOCATION_CONFIG)

        assert config == AllocationConfig()

    def test_nested_and_overrides(self, tmp_path):
        path = tmp_path / "strategy.yaml"
        path.write_text(yaml.safe_dump({"allocation": {"top_n": 2, "weighting": "ew"}}))

        config = load_allocation_config(path, weighting="invVol")

        assert config.top_n == 2
        assert config.weighting is WeightingMethod.INVERSE_VOLATILITY

    def test_top_level_values(self, tmp_path):
        path = tmp_path / "strategy.yaml"
        path.write_text("rebalance_on: years\noffset: -3\n")

        config = load_allocation_config(path)

        assert config.rebalance_on is RebalanceUnit.YEARS
        assert config.offset == -3

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            load_allocation_config(tmp_path / "missing.yaml")

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "strategy.yaml"
        path.write_text("- 1\n- 2\n")

        with pytest.raises(ConfigurationError):
            load_allocation_config(path)


class TestSettings:
    """Tests for the environment-driven global settings."""

    @pytest.fixture(autouse=True)
    def restore_settings(self):
        yield
        reload_settings()

    def test_defaults(self):
        settings = get_settings()

        assert settings.backtest.allocation_config == DEFAULT_ALLOCATION_CONFIG
        assert settings.backtest.n_jobs >= 1

    def test_reload_reads_environment(self, monkeypatch):
        monkeypatch.setenv("TAA_BACKTEST_N_JOBS", "3")
        monkeypatch.setenv("TAA_LOG_LEVEL", "WARNING")

        settings = reload_settings()

        assert settings.backtest.n_jobs == 3
        assert settings.logging.level == "WARNING"
        assert get_settings() is settings
        assert global_settings.settings is settings

    def test_invalid_environment_value(self, monkeypatch):
        monkeypatch.setenv("TAA_BACKTEST_N_JOBS", "0")

        with pytest.raises(ValueError):
            reload_settings()
