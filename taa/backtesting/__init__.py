"""
Backtesting for the allocation engine.

This module provides:
- The allocation backtest driver
- Portfolio simulation (constant or drifting weights)
- Performance statistics
- Parameter and rebalance-lag sweeps
"""

from taa.backtesting.engine import (
    AllocationBacktest,
    BacktestResult,
    run_backtest,
)
from taa.backtesting.simulator import (
    PortfolioSimulator,
    SimulationResult,
)
from taa.backtesting.metrics import (
    PerformanceSummary,
    calculate_all_metrics,
    calculate_drawdown,
    compare_strategies,
)
from taa.backtesting.sensitivity import (
    SweepResult,
    run_offset_sweep,
    run_parameter_sweep,
    summarize_sweep,
)

__all__ = [
    "AllocationBacktest",
    "BacktestResult",
    "run_backtest",
    "PortfolioSimulator",
    "SimulationResult",
    "PerformanceSummary",
    "calculate_all_metrics",
    "calculate_drawdown",
    "compare_strategies",
    "SweepResult",
    "run_offset_sweep",
    "run_parameter_sweep",
    "summarize_sweep",
]
