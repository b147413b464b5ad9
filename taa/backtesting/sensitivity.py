"""
Parameter and rebalance-lag sensitivity.

Each configuration is an independent backtest with its own inputs and weight
history, so sweeps can run across processes. A failed run is reported in its
SweepResult and does not stop the others.
"""

from __future__ import annotations

from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass
from typing import Iterable

import pandas as pd
from loguru import logger

from taa.backtesting.engine import AllocationBacktest, BacktestResult
from taa.backtesting.metrics import compare_strategies
from taa.core.config import AllocationConfig
from taa.core.types import AllocationError


@dataclass
class SweepResult:
    """Outcome of one configuration in a sweep."""

    label: str
    config: AllocationConfig
    result: BacktestResult | None = None
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


def _run_single(
    label: str,
    config: AllocationConfig,
    returns: pd.DataFrame,
    canary: pd.DataFrame | None,
    drift: bool,
) -> SweepResult:
    try:
        result = AllocationBacktest(config).run(returns, canary, drift=drift)
    except AllocationError as exc:
        logger.warning(f"Sweep run {label} failed: {exc}")
        return SweepResult(label=label, config=config, error=f"{type(exc).__name__}: {exc}")
    return SweepResult(label=label, config=config, result=result)


def run_parameter_sweep(
    returns: pd.DataFrame,
    configs: dict[str, AllocationConfig],
    canary: pd.DataFrame | None = None,
    n_jobs: int = 1,
    drift: bool = False,
) -> dict[str, SweepResult]:
    """
    Run one backtest per configuration.

    Args:
        returns: Primary return matrix
        configs: Configurations keyed by label
        canary: Optional canary return matrix
        n_jobs: Worker processes (1 = run sequentially in this process)
        drift: Let holdings drift between rebalance dates

    Returns:
        SweepResult per label, in the order of ``configs``
    """
    logger.info(f"Running sweep over {len(configs)} configurations (n_jobs={n_jobs})")

    if n_jobs <= 1 or len(configs) <= 1:
        return {
            label: _run_single(label, cfg, returns, canary, drift)
            for label, cfg in configs.items()
        }

    with ProcessPoolExecutor(max_workers=n_jobs) as executor:
        futures = {
            label: executor.submit(_run_single, label, cfg, returns, canary, drift)
            for label, cfg in configs.items()
        }
        return {label: future.result() for label, future in futures.items()}


def run_offset_sweep(
    returns: pd.DataFrame,
    offsets: Iterable[int],
    config: AllocationConfig | None = None,
    canary: pd.DataFrame | None = None,
    n_jobs: int = 1,
    drift: bool = False,
) -> dict[int, SweepResult]:
    """
    Rebalance-lag study: the same strategy with its schedule shifted by each offset.

    Returns:
        SweepResult keyed by offset
    """
    base = config or AllocationConfig()
    configs = {
        str(offset): base.model_copy(update={"offset": int(offset)})
        for offset in offsets
    }
    results = run_parameter_sweep(returns, configs, canary=canary, n_jobs=n_jobs, drift=drift)
    return {int(label): res for label, res in results.items()}


def summarize_sweep(results: dict) -> pd.DataFrame:
    """
    Statistics of every successful run, one row per label.

    Failed runs appear with their error message and no statistics.
    """
    summaries = {
        label: res.result.metrics
        for label, res in results.items()
        if res.succeeded and res.result.metrics is not None
    }
    table = compare_strategies(summaries) if summaries else pd.DataFrame()

    failures = {label: res.error for label, res in results.items() if not res.succeeded}
    if failures:
        table = table.reindex(list(results.keys()))
        table["error"] = pd.Series(failures)
    return table
