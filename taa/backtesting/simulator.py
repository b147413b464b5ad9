"""
Portfolio simulation.

Weights decided at the close of a rebalance row are held from the next row
until the next rebalance row (inclusive). Any weight not invested sits in cash
earning zero; weights summing above 1 are financed at zero cost.

The simulated span starts on the row after the first rebalance row. Rows
before that carry no position and are left out of the return series.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
import pandas as pd
from loguru import logger

from taa.core.types import BacktestError


@dataclass
class SimulationResult:
    """Output of the portfolio simulator."""

    weights: pd.DataFrame
    returns: pd.Series | None = None
    equity_curve: pd.Series | None = None

    @property
    def weights_only(self) -> bool:
        return self.returns is None


class PortfolioSimulator:
    """
    Compounds a weight history against a return matrix.

    With ``drift=False`` (default) the weights are held constant between
    rebalance dates. With ``drift=True`` holdings grow with their own returns
    between rebalance dates, as a buy-and-hold position would.
    """

    def __init__(self, drift: bool = False) -> None:
        self.drift = drift

    def run(
        self,
        returns: pd.DataFrame,
        weight_history: pd.DataFrame,
        weights_only: bool = False,
    ) -> SimulationResult:
        """
        Simulate the strategy.

        Args:
            returns: Return matrix (rows = dates, columns = assets)
            weight_history: One row of weights per rebalance date
            weights_only: Skip compounding and return the weights alone

        Returns:
            SimulationResult over the simulated span, which starts the row
            after the first rebalance

        Raises:
            BacktestError: If a rebalance date or asset is not in ``returns``
        """
        weight_history = weight_history.sort_index()

        if weights_only:
            return SimulationResult(weights=weight_history.copy())

        unknown = weight_history.columns.difference(returns.columns)
        if len(unknown) > 0:
            raise BacktestError(f"Weights reference assets without returns: {list(unknown)}")

        positions = returns.index.get_indexer(weight_history.index)
        if (positions < 0).any():
            missing = weight_history.index[positions < 0]
            raise BacktestError(f"Rebalance dates not in the return calendar: {list(missing)}")

        if len(weight_history) == 0 or positions[0] + 1 >= len(returns):
            empty = pd.Series(dtype=float, name="strategy")
            return SimulationResult(weights=weight_history.copy(), returns=empty, equity_curve=empty.copy())

        aligned = weight_history.reindex(columns=returns.columns, fill_value=0.0)

        if self.drift:
            strategy = self._drifting_returns(returns, aligned, positions)
        else:
            strategy = self._constant_returns(returns, aligned, positions)

        strategy.name = "strategy"
        equity = (1.0 + strategy).cumprod()
        equity.name = "equity"

        logger.debug(
            f"Simulated {len(strategy)} rows from {strategy.index[0]} to {strategy.index[-1]}"
        )
        return SimulationResult(weights=weight_history.copy(), returns=strategy, equity_curve=equity)

    @staticmethod
    def _constant_returns(
        returns: pd.DataFrame,
        weights: pd.DataFrame,
        positions: np.ndarray,
    ) -> pd.Series:
        start = int(positions[0]) + 1
        held = weights.reindex(returns.index).ffill().shift(1).iloc[start:].fillna(0.0)
        return (held * returns.iloc[start:]).sum(axis=1)

    @staticmethod
    def _drifting_returns(
        returns: pd.DataFrame,
        weights: pd.DataFrame,
        positions: np.ndarray,
    ) -> pd.Series:
        R = returns.to_numpy(dtype=float)
        W = weights.to_numpy(dtype=float)
        rebalance_rows = {int(pos): i for i, pos in enumerate(positions)}

        start = int(positions[0]) + 1
        out = np.zeros(len(R) - start)
        holdings = np.zeros(R.shape[1])
        cash = 1.0

        for t in range(start, len(R)):
            if t - 1 in rebalance_rows:
                # Rebalance to target weights at the current portfolio value
                value = holdings.sum() + cash
                holdings = W[rebalance_rows[t - 1]] * value
                cash = value - holdings.sum()

            before = holdings.sum() + cash
            holdings = holdings * (1.0 + R[t])
            after = holdings.sum() + cash
            out[t - start] = after / before - 1.0 if before > 0 else 0.0

        return pd.Series(out, index=returns.index[start:])
