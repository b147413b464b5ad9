"""
Unit tests for momentum scoring and asset selection.
"""

import numpy as np
import pandas as pd
import pytest
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from taa.portfolio.lookback import WeightedLookback
from taa.portfolio.momentum import MomentumEngine, rank_assets, select_assets


@pytest.fixture
def mixed_window():
    """Two rows where A falls and B rises."""
    return pd.DataFrame(
        {"A": [-0.02, -0.03], "B": [0.01, 0.02]},
        index=pd.bdate_range("2021-01-04", periods=2),
    )


class TestMomentumEngine:
    """Tests for the momentum penalty."""

    def test_no_penalty(self, mixed_window):
        """Without a penalty the score is the plain weighted momentum."""
        engine = MomentumEngine(WeightedLookback([2], [1]))
        score = engine.score(mixed_window)

        assert score["A"] == pytest.approx(0.98 * 0.97 - 1)
        assert score["B"] == pytest.approx(1.01 * 1.02 - 1)

    def test_penalty_amplifies_negative_new_assets(self, mixed_window):
        """Negative momentum of unheld assets is scaled by 1 + penalty."""
        engine = MomentumEngine(WeightedLookback([2], [1]), penalty=0.5)
        prior = pd.Series({"A": 0.0, "B": 0.0})

        score = engine.score(mixed_window, prior)

        assert score["A"] == pytest.approx((0.98 * 0.97 - 1) * 1.5)
        assert score["B"] == pytest.approx(1.01 * 1.02 - 1)

    def test_held_assets_not_penalised(self, mixed_window):
        """Assets carrying weight from the last period keep their score."""
        engine = MomentumEngine(WeightedLookback([2], [1]), penalty=0.5)
        prior = pd.Series({"A": 0.4, "B": 0.6})

        score = engine.score(mixed_window, prior)

        assert score["A"] == pytest.approx(0.98 * 0.97 - 1)

    def test_tiny_prior_weight_counts_as_zero(self, mixed_window):
        """Weights within the tolerance are treated as unheld."""
        engine = MomentumEngine(WeightedLookback([2], [1]), penalty=1.0, zero_tolerance=1e-8)
        prior = pd.Series({"A": 1e-10, "B": 1.0})

        score = engine.score(mixed_window, prior)

        assert score["A"] == pytest.approx((0.98 * 0.97 - 1) * 2.0)

    def test_missing_prior_means_unheld(self, mixed_window):
        """A prior without an asset treats it as zero weight."""
        engine = MomentumEngine(WeightedLookback([2], [1]), penalty=1.0)

        score = engine.score(mixed_window, pd.Series({"B": 1.0}))

        assert score["A"] == pytest.approx((0.98 * 0.97 - 1) * 2.0)


class TestSelection:
    """Tests for ranking and selection."""

    def test_rank_descending(self):
        """Rank 1 is the strongest asset."""
        ranks = rank_assets(pd.Series({"A": 0.1, "B": 0.3, "C": 0.2}))

        assert ranks.to_dict() == {"A": 3.0, "B": 1.0, "C": 2.0}

    def test_ties_follow_universe_order(self):
        """Equal momentum is ranked by order of appearance."""
        momentum = pd.Series({"A": 0.1, "B": 0.2, "C": 0.2})

        assert rank_assets(momentum).to_dict() == {"A": 3.0, "B": 1.0, "C": 2.0}
        assert select_assets(momentum, top_n=1) == ["B"]

    def test_top_n(self):
        """At most top_n assets are selected, strongest first."""
        momentum = pd.Series({"A": 0.1, "B": 0.3, "C": 0.2, "D": 0.05})

        assert select_assets(momentum, top_n=2) == ["B", "C"]

    def test_threshold_is_strict(self):
        """Momentum equal to the threshold is not selected."""
        momentum = pd.Series({"A": 0.05, "B": -0.01, "C": 0.0})

        assert select_assets(momentum, top_n=3, threshold=0.0) == ["A"]

    def test_nothing_selected(self):
        """All momentum below threshold selects nothing."""
        momentum = pd.Series({"A": -0.05, "B": -0.01})

        assert select_assets(momentum, top_n=2) == []

    def test_nan_momentum_excluded(self):
        """Undefined momentum is never selected."""
        momentum = pd.Series({"A": np.nan, "B": 0.02})

        assert select_assets(momentum, top_n=2) == ["B"]
