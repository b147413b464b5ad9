"""
Weighted multi-horizon lookback statistics.

A WeightedLookback evaluates a statistic over the trailing ``lookback_j`` rows
of a window for every configured horizon and returns the weighted sum
``sum_j weight_j * f(tail(window, lookback_j))``. Momentum, volatility and
correlation estimates all go through this single implementation.
"""

from __future__ import annotations

from typing import Callable, Sequence, TypeVar

import numpy as np
import pandas as pd

from taa.core.types import ConfigurationError, InvalidScheduleError

Stat = TypeVar("Stat", pd.Series, pd.DataFrame)


def cumulative_return(window: pd.DataFrame) -> pd.Series:
    """Compounded return of each column over the window."""
    return (1.0 + window).prod() - 1.0


def annualized_volatility(window: pd.DataFrame, periods_per_year: int = 252) -> pd.Series:
    """Sample standard deviation of each column, scaled to one year."""
    return window.std(ddof=1) * np.sqrt(periods_per_year)


def correlation_matrix(window: pd.DataFrame) -> pd.DataFrame:
    """Pearson correlation of the window's columns."""
    return window.corr(method="pearson")


class WeightedLookback:
    """
    Weighted sum of a statistic over several trailing horizons.

    Usage:
        agg = WeightedLookback([21, 63, 126, 252], [12, 4, 2, 1])
        scores = agg.momentum(window)
    """

    def __init__(
        self,
        lookbacks: Sequence[int],
        weights: Sequence[float],
        periods_per_year: int = 252,
        name: str = "lookback",
    ) -> None:
        """
        Args:
            lookbacks: Horizon lengths in rows
            weights: Weight of each horizon, normalised to sum to 1
            periods_per_year: Rows per year, used to annualise volatility
            name: Label used in error messages

        Raises:
            ConfigurationError: On mismatched lengths, empty lists,
                non-positive horizons or a non-positive weight sum
        """
        if len(lookbacks) != len(weights):
            raise ConfigurationError(
                f"{name}: {len(lookbacks)} lookbacks but {len(weights)} weights"
            )
        if len(lookbacks) == 0:
            raise ConfigurationError(f"{name}: at least one lookback is required")
        if any(int(lb) < 1 for lb in lookbacks):
            raise ConfigurationError(f"{name}: lookbacks must be positive, got {list(lookbacks)}")

        weight_arr = np.asarray(weights, dtype=float)
        if np.any(weight_arr < 0) or weight_arr.sum() <= 0:
            raise ConfigurationError(
                f"{name}: weights must be non-negative with a positive sum, got {list(weights)}"
            )

        self.name = name
        self.lookbacks = tuple(int(lb) for lb in lookbacks)
        self.weights = tuple(float(w) for w in weight_arr / weight_arr.sum())
        self.periods_per_year = periods_per_year

    @property
    def max_lookback(self) -> int:
        return max(self.lookbacks)

    def aggregate(self, window: pd.DataFrame, statistic: Callable[[pd.DataFrame], Stat]) -> Stat:
        """
        Evaluate ``statistic`` on the tail of ``window`` for each horizon.

        Args:
            window: Return rows ending at the evaluation point
            statistic: Function of a return frame

        Returns:
            Weighted sum of the per-horizon statistics

        Raises:
            InvalidScheduleError: If the window is shorter than the longest horizon
        """
        if len(window) < self.max_lookback:
            raise InvalidScheduleError(
                f"{self.name}: window has {len(window)} rows, "
                f"longest lookback needs {self.max_lookback}"
            )

        total = None
        for lookback, weight in zip(self.lookbacks, self.weights):
            value = statistic(window.tail(lookback)) * weight
            total = value if total is None else total + value
        return total

    def momentum(self, window: pd.DataFrame) -> pd.Series:
        return self.aggregate(window, cumulative_return)

    def volatility(self, window: pd.DataFrame) -> pd.Series:
        return self.aggregate(
            window, lambda w: annualized_volatility(w, self.periods_per_year)
        )

    def correlation(self, window: pd.DataFrame) -> pd.DataFrame:
        return self.aggregate(window, correlation_matrix)

    def __repr__(self) -> str:
        return f"WeightedLookback(name={self.name!r}, lookbacks={self.lookbacks}, weights={self.weights})"
