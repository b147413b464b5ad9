"""
Momentum scoring and asset selection.

Momentum is the weighted multi-horizon cumulative return. Assets that held no
weight in the previous period have negative momentum amplified by
``1 + penalty``, which makes weak newcomers less likely to re-enter while
leaving strong newcomers untouched.
"""

from __future__ import annotations

import numpy as np
import pandas as pd
from loguru import logger

from taa.portfolio.lookback import WeightedLookback


class MomentumEngine:
    """
    Multi-horizon momentum with a new-asset penalty.

    Usage:
        engine = MomentumEngine(WeightedLookback([21, 63], [1, 1]), penalty=0.5)
        scores = engine.score(window, prior_weights)
    """

    def __init__(
        self,
        lookback: WeightedLookback,
        penalty: float = 0.0,
        zero_tolerance: float = 1e-8,
    ) -> None:
        """
        Args:
            lookback: Horizons and weights of the momentum average
            penalty: Extra weight on negative momentum of new assets, in [0, 1]
            zero_tolerance: Prior weights with ``|w| <= zero_tolerance`` count as zero
        """
        self.lookback = lookback
        self.penalty = penalty
        self.zero_tolerance = zero_tolerance

    def score(
        self,
        window: pd.DataFrame,
        prior_weights: pd.Series | None = None,
    ) -> pd.Series:
        """
        Momentum score per asset.

        Args:
            window: Return rows ending at the rebalance point
            prior_weights: Previous period's weights (all zero if None)

        Returns:
            Score per column of ``window``
        """
        momentum = self.lookback.momentum(window)

        if self.penalty == 0.0:
            return momentum

        if prior_weights is None:
            prior = pd.Series(0.0, index=momentum.index)
        else:
            prior = prior_weights.reindex(momentum.index, fill_value=0.0)

        penalised = (prior.abs() <= self.zero_tolerance) & (momentum < 0)
        if penalised.any():
            logger.debug(f"Momentum penalty on new assets: {list(momentum.index[penalised])}")

        return momentum.where(~penalised, momentum * (1.0 + self.penalty))


def rank_assets(momentum: pd.Series) -> pd.Series:
    """
    Descending rank of each asset, 1 = strongest.

    Ties keep the order in which the assets appear in the universe.
    """
    return momentum.rank(ascending=False, method="first")


def select_assets(
    momentum: pd.Series,
    top_n: int,
    threshold: float = 0.0,
) -> list[str]:
    """
    Assets ranked within ``top_n`` whose momentum is strictly above ``threshold``.

    Args:
        momentum: Score per asset
        top_n: Maximum number of assets to hold
        threshold: Minimum momentum (exclusive)

    Returns:
        Selected asset names, strongest first
    """
    ranks = rank_assets(momentum)
    mask = (ranks <= top_n) & (momentum > threshold) & np.isfinite(momentum)
    return ranks[mask].sort_values().index.tolist()
