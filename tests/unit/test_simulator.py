"""
Unit tests for the portfolio simulator.
"""

import numpy as np
import pandas as pd
import pytest
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from taa.backtesting.simulator import PortfolioSimulator
from taa.core.types import BacktestError


@pytest.fixture
def two_asset_returns():
    """Four days of returns for two assets."""
    return pd.DataFrame(
        {"A": [0.0, 0.04, 0.02, 0.10], "B": [0.0, 0.0, 0.04, -0.01]},
        index=pd.bdate_range("2021-01-04", periods=4),
    )


@pytest.fixture
def two_rebalances(two_asset_returns):
    """Equal weight on day 0, all in B on day 2."""
    dates = two_asset_returns.index
    return pd.DataFrame(
        {"A": [0.5, 0.0], "B": [0.5, 1.0]},
        index=[dates[0], dates[2]],
    )


class TestConstantWeights:
    """Tests for weights held constant between rebalances."""

    def test_weights_apply_from_next_row(self, two_asset_returns, two_rebalances):
        """Weights decided on a date earn the following rows' returns."""
        result = PortfolioSimulator().run(two_asset_returns, two_rebalances)

        assert result.returns.index[0] == two_asset_returns.index[1]
        assert result.returns.tolist() == pytest.approx([0.02, 0.03, -0.01])

    @pytest.mark.parametrize("drift", [False, True])
    def test_rows_before_first_rebalance_excluded(self, two_asset_returns, drift):
        """Rows up to the first rebalance are not part of the strategy series."""
        dates = two_asset_returns.index
        weights = pd.DataFrame({"A": [1.0], "B": [0.0]}, index=[dates[1]])

        result = PortfolioSimulator(drift=drift).run(two_asset_returns, weights)

        assert list(result.returns.index) == list(dates[2:])
        assert result.returns.tolist() == pytest.approx([0.02, 0.10])
        assert result.equity_curve.iloc[0] == pytest.approx(1.02)

    def test_equity_curve(self, two_asset_returns, two_rebalances):
        """The equity curve compounds the strategy returns from 1."""
        result = PortfolioSimulator().run(two_asset_returns, two_rebalances)

        assert result.equity_curve.tolist() == pytest.approx([1.02, 1.0506, 1.0506 * 0.99])

    def test_zero_weights_earn_nothing(self, two_asset_returns, two_rebalances):
        """An all-cash history has zero return on every row."""
        result = PortfolioSimulator().run(two_asset_returns, two_rebalances * 0.0)

        assert (result.returns == 0.0).all()
        assert (result.equity_curve == 1.0).all()

    def test_partial_investment(self, two_asset_returns, two_rebalances):
        """Uninvested weight earns zero."""
        result = PortfolioSimulator().run(two_asset_returns, two_rebalances * 0.5)

        assert result.returns.iloc[0] == pytest.approx(0.01)

    def test_weights_only(self, two_asset_returns, two_rebalances):
        """Weights-only mode skips compounding."""
        result = PortfolioSimulator().run(two_asset_returns, two_rebalances, weights_only=True)

        assert result.weights_only
        assert result.returns is None
        assert result.equity_curve is None
        pd.testing.assert_frame_equal(result.weights, two_rebalances)

    def test_last_row_rebalance_gives_empty_series(self, two_asset_returns):
        """A single rebalance on the final row leaves nothing to simulate."""
        history = pd.DataFrame({"A": [1.0], "B": [0.0]}, index=[two_asset_returns.index[-1]])

        result = PortfolioSimulator().run(two_asset_returns, history)

        assert len(result.returns) == 0

    def test_unknown_asset(self, two_asset_returns, two_rebalances):
        history = two_rebalances.assign(C=0.0)

        with pytest.raises(BacktestError):
            PortfolioSimulator().run(two_asset_returns, history)

    def test_unknown_date(self, two_asset_returns, two_rebalances):
        history = two_rebalances.copy()
        history.index = [history.index[0], pd.Timestamp("2030-01-01")]

        with pytest.raises(BacktestError):
            PortfolioSimulator().run(two_asset_returns, history)


class TestDriftingWeights:
    """Tests for buy-and-hold drift between rebalances."""

    def test_drift_compounds_winners(self):
        """A rising asset gains weight until the next rebalance."""
        returns = pd.DataFrame(
            {"A": [0.0, 0.10, 0.10], "B": [0.0, 0.0, 0.0]},
            index=pd.bdate_range("2021-01-04", periods=3),
        )
        history = pd.DataFrame({"A": [0.5], "B": [0.5]}, index=[returns.index[0]])

        constant = PortfolioSimulator(drift=False).run(returns, history)
        drifting = PortfolioSimulator(drift=True).run(returns, history)

        assert constant.returns.tolist() == pytest.approx([0.05, 0.05])
        assert drifting.returns.tolist() == pytest.approx([0.05, 0.055 / 1.05])

    def test_drift_resets_on_rebalance(self, two_asset_returns, two_rebalances):
        """The row after a rebalance matches the constant-weight return."""
        constant = PortfolioSimulator(drift=False).run(two_asset_returns, two_rebalances)
        drifting = PortfolioSimulator(drift=True).run(two_asset_returns, two_rebalances)

        assert drifting.returns.iloc[0] == pytest.approx(constant.returns.iloc[0])
        assert drifting.returns.iloc[-1] == pytest.approx(constant.returns.iloc[-1])

    def test_drift_keeps_cash(self):
        """Uninvested cash stays flat while holdings drift."""
        returns = pd.DataFrame(
            {"A": [0.0, 0.10, 0.10]},
            index=pd.bdate_range("2021-01-04", periods=3),
        )
        history = pd.DataFrame({"A": [0.5]}, index=[returns.index[0]])

        result = PortfolioSimulator(drift=True).run(returns, history)

        assert result.equity_curve.iloc[-1] == pytest.approx(0.5 + 0.5 * 1.21)
        assert np.isfinite(result.returns).all()
