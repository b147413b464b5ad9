"""
Risk estimation for the selected assets.

Volatility and correlation are each a weighted multi-horizon average; the
covariance is rebuilt from them as ``vol_i * vol_j * corr_ij``.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
import pandas as pd

from taa.portfolio.lookback import WeightedLookback, correlation_matrix


@dataclass(frozen=True)
class RiskEstimate:
    """Risk inputs for one rebalance period."""

    volatility: pd.Series
    correlation: pd.DataFrame
    covariance: pd.DataFrame

    @property
    def assets(self) -> list[str]:
        return self.volatility.index.tolist()


def covariance_from_components(volatility: pd.Series, correlation: pd.DataFrame) -> pd.DataFrame:
    """Covariance matrix ``vol_i * vol_j * corr_ij``."""
    vol = volatility.to_numpy(dtype=float)
    corr = correlation.loc[volatility.index, volatility.index].to_numpy(dtype=float)
    return pd.DataFrame(np.outer(vol, vol) * corr, index=volatility.index, columns=volatility.index)


def _filled_correlation(window: pd.DataFrame) -> pd.DataFrame:
    # A flat column has no defined correlation; treat it as uncorrelated
    corr = correlation_matrix(window).to_numpy(dtype=float, copy=True)
    corr = np.nan_to_num(corr, nan=0.0)
    np.fill_diagonal(corr, 1.0)
    return pd.DataFrame(corr, index=window.columns, columns=window.columns)


class RiskEstimator:
    """Weighted volatility, correlation and covariance of a subset of assets."""

    def __init__(
        self,
        volatility_lookback: WeightedLookback,
        correlation_lookback: WeightedLookback,
    ) -> None:
        self.volatility_lookback = volatility_lookback
        self.correlation_lookback = correlation_lookback

    def estimate(self, window: pd.DataFrame, assets: list[str]) -> RiskEstimate:
        """
        Estimate risk for ``assets`` over ``window``.

        Args:
            window: Return rows ending at the rebalance point
            assets: Selected columns

        Returns:
            RiskEstimate restricted to ``assets``
        """
        subset = window[list(assets)]

        volatility = self.volatility_lookback.volatility(subset).fillna(0.0)
        correlation = self.correlation_lookback.aggregate(subset, _filled_correlation)

        return RiskEstimate(
            volatility=volatility,
            correlation=correlation,
            covariance=covariance_from_components(volatility, correlation),
        )
