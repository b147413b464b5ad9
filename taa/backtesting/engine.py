"""
Allocation backtest engine.

Runs one deterministic simulation of the momentum / risk-weighting policy:

    schedule -> (per rebalance) momentum -> selection -> risk -> weighting
             -> crash protection -> weight history -> simulation -> statistics

Each rebalance looks at the trailing ``max_lookback`` rows ending on its
rebalance row. Rebalance points with less history than that are skipped.

Periods are processed strictly in order because the momentum penalty depends
on the previous period's weights. A failure in any period aborts the run.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import pandas as pd
from loguru import logger

from taa.backtesting.metrics import PerformanceSummary, calculate_all_metrics
from taa.backtesting.simulator import PortfolioSimulator
from taa.core.config import AllocationConfig
from taa.core.types import AllocationError, ConfigurationError, InvalidScheduleError
from taa.data.validator import align_returns, validate_return_matrix
from taa.portfolio.crash_protection import CrashProtection
from taa.portfolio.momentum import MomentumEngine, select_assets
from taa.portfolio.optimizer import allocate, get_weighting_policy
from taa.portfolio.risk import RiskEstimator
from taa.portfolio.schedule import RebalanceSchedule
from taa.utils.decorators import timer


@dataclass
class BacktestResult:
    """Results from an allocation backtest run."""

    weights: pd.DataFrame
    returns: pd.Series | None
    equity_curve: pd.Series | None
    metrics: PerformanceSummary | None
    momentum: pd.DataFrame
    selected: dict[pd.Timestamp, list[str]]
    aggressive_fraction: pd.Series | None
    schedule: RebalanceSchedule
    config: AllocationConfig
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass
class _PreparedData:
    returns: pd.DataFrame
    canary: pd.DataFrame | None
    schedule: RebalanceSchedule
    decision_rows: list[int]


class AllocationBacktest:
    """
    Momentum-ranked, risk-weighted allocation backtest.

    Usage:
        bt = AllocationBacktest(AllocationConfig(weighting="minVol", top_n=3))
        result = bt.run(returns, canary=canary_returns)
    """

    def __init__(self, config: AllocationConfig | None = None) -> None:
        """
        Initialize the engine.

        Args:
            config: Strategy parameters (defaults if None)
        """
        self.config = config or AllocationConfig()
        cfg = self.config

        self.policy = get_weighting_policy(cfg.weighting, cfg.min_variance_fallback)
        self.momentum_engine = MomentumEngine(
            cfg.momentum_lookback,
            penalty=cfg.momentum_penalty,
            zero_tolerance=cfg.zero_weight_tolerance,
        )
        self.risk_estimator = RiskEstimator(cfg.volatility_lookback, cfg.correlation_lookback)
        self.crash_protection = CrashProtection(
            MomentumEngine(cfg.momentum_lookback, penalty=0.0),
            crash_asset=cfg.crash_asset,
            threshold=cfg.threshold,
            leverage=cfg.leverage,
        )

    def _prepare(self, returns: pd.DataFrame, canary: pd.DataFrame | None) -> _PreparedData:
        cfg = self.config

        validate_return_matrix(returns, "returns")
        if canary is not None:
            validate_return_matrix(canary, "canary")
            overlap = returns.columns.intersection(canary.columns)
            if len(overlap) > 0:
                logger.warning(f"Canary universe overlaps the primary universe: {list(overlap)}")
        elif cfg.crash_asset is not None or cfg.leverage != 1.0:
            logger.warning("crash_asset/leverage only apply with a canary universe; ignored")

        if cfg.crash_asset is not None and cfg.crash_asset not in returns.columns:
            raise ConfigurationError(
                f"Crash asset {cfg.crash_asset!r} is not in the return matrix"
            )

        returns, canary = align_returns(returns, canary)

        lookback = cfg.max_lookback
        if len(returns) <= lookback:
            raise InvalidScheduleError(
                f"Return matrix has {len(returns)} rows; "
                f"the longest lookback needs more than {lookback}"
            )

        schedule = RebalanceSchedule.from_index(
            returns.index,
            unit=cfg.rebalance_on,
            offset=cfg.offset,
            window_periods=cfg.effective_window_periods,
        )

        # Rebalance rows without a full lookback of history behind them are skipped
        decision_rows = [end for _, end in schedule.windows() if end + 1 >= lookback]
        if not decision_rows:
            raise InvalidScheduleError(
                f"No rebalance point has {lookback} rows of history "
                f"(last point at row {schedule[-1]})"
            )

        skipped = len(schedule.windows()) - len(decision_rows)
        if skipped:
            logger.info(
                f"Skipping {skipped} rebalance point(s) with less than {lookback} rows of history"
            )

        return _PreparedData(
            returns=returns, canary=canary, schedule=schedule, decision_rows=decision_rows
        )

    def compute_weights(
        self,
        returns: pd.DataFrame,
        canary: pd.DataFrame | None = None,
    ) -> BacktestResult:
        """
        Weight history only, without simulating returns.

        Args:
            returns: Primary return matrix
            canary: Optional canary return matrix

        Returns:
            BacktestResult whose returns, equity curve and metrics are None
        """
        return self.run(returns, canary, weights_only=True)

    @timer
    def run(
        self,
        returns: pd.DataFrame,
        canary: pd.DataFrame | None = None,
        weights_only: bool = False,
        drift: bool = False,
        risk_free_rate: float = 0.0,
    ) -> BacktestResult:
        """
        Run the backtest.

        Args:
            returns: Primary return matrix (rows = dates, columns = assets)
            canary: Optional canary return matrix for crash protection
            weights_only: Stop after the weight history
            drift: Let holdings drift between rebalance dates
            risk_free_rate: Annual rate used by the Sharpe ratio

        Returns:
            BacktestResult

        Raises:
            ConfigurationError: Crash asset missing from the universe
            DataValidationError: Unusable input matrices
            InvalidScheduleError: Not enough history
            OptimizationError: Minimum-variance solve failed
        """
        cfg = self.config
        data = self._prepare(returns, canary)
        returns, canary = data.returns, data.canary
        universe = returns.columns.tolist()

        logger.info(
            f"Starting allocation backtest: {len(universe)} assets, "
            f"{len(data.decision_rows)} rebalances, policy={self.policy!r}"
        )

        prior = pd.Series(0.0, index=universe)
        weight_rows: dict[pd.Timestamp, pd.Series] = {}
        momentum_rows: dict[pd.Timestamp, pd.Series] = {}
        selected_by_date: dict[pd.Timestamp, list[str]] = {}
        fractions: dict[pd.Timestamp, float] = {}

        lookback = cfg.max_lookback
        for end in data.decision_rows:
            date = returns.index[end]
            start = end - lookback + 1
            window = returns.iloc[start:end + 1]

            try:
                momentum = self.momentum_engine.score(window, prior)
                selected = select_assets(momentum, cfg.top_n, cfg.threshold)
                weights = allocate(selected, universe, window, self.policy, self.risk_estimator)

                if canary is not None:
                    overlay = self.crash_protection.apply(
                        weights, momentum, canary.iloc[start:end + 1]
                    )
                    weights = overlay.weights
                    fractions[date] = overlay.aggressive_fraction
            except AllocationError as exc:
                logger.error(f"Rebalance on {date:%Y-%m-%d} failed, aborting run: {exc}")
                raise

            logger.debug(f"{date:%Y-%m-%d}: selected={selected}")

            weight_rows[date] = weights
            momentum_rows[date] = momentum
            selected_by_date[date] = selected
            prior = weights

        weight_history = pd.DataFrame(weight_rows).T.reindex(columns=universe)
        weight_history.index.name = "date"
        momentum_history = pd.DataFrame(momentum_rows).T.reindex(columns=universe)

        simulation = PortfolioSimulator(drift=drift).run(
            returns, weight_history, weights_only=weights_only
        )

        metrics = None
        if not simulation.weights_only:
            metrics = calculate_all_metrics(
                simulation.returns, cfg.periods_per_year, risk_free_rate
            )
            logger.info(
                f"Backtest complete: CAGR={metrics.annualized_return:.2%}, "
                f"vol={metrics.annualized_volatility:.2%}, "
                f"Sharpe={metrics.sharpe_ratio:.2f}, MaxDD={metrics.max_drawdown:.2%}"
            )

        return BacktestResult(
            weights=simulation.weights,
            returns=simulation.returns,
            equity_curve=simulation.equity_curve,
            metrics=metrics,
            momentum=momentum_history,
            selected=selected_by_date,
            aggressive_fraction=pd.Series(fractions, dtype=float) if canary is not None else None,
            schedule=data.schedule,
            config=cfg,
            metadata={
                "universe": universe,
                "canary_universe": canary.columns.tolist() if canary is not None else [],
                "drift": drift,
                "skipped_rebalances": len(data.schedule.windows()) - len(data.decision_rows),
            },
        )


def run_backtest(
    returns: pd.DataFrame,
    canary: pd.DataFrame | None = None,
    config: AllocationConfig | None = None,
    **kwargs: Any,
) -> BacktestResult:
    """Convenience function for a single allocation backtest."""
    return AllocationBacktest(config).run(returns, canary, **kwargs)
