"""
TAA - Tactical Asset Allocation Backtester v1.0.0

Momentum-ranked, risk-weighted multi-asset allocation with canary-driven
crash protection:

PORTFOLIO:
- Rebalance schedules with day offsets
- Multi-horizon momentum with a new-asset penalty
- Equal weight, inverse volatility, inverse variance, minimum variance
- Canary universe crash protection with optional defensive asset

BACKTESTING:
- Constant or drifting weight simulation
- Annualised return / volatility / Sharpe, drawdown, Calmar, Ulcer index
- Parameter and rebalance-lag sweeps
"""

__version__ = "1.0.0"

from typing import Final

# Package metadata
PACKAGE_NAME: Final[str] = "taa"
VERSION: Final[str] = __version__

from taa.core.config import (
    AllocationConfig,
    build_allocation_config,
    load_allocation_config,
)
from taa.core.types import (
    AllocationError,
    ConfigurationError,
    DataValidationError,
    InvalidScheduleError,
    OptimizationError,
    RebalanceUnit,
    WeightingMethod,
)
from taa.backtesting import (
    AllocationBacktest,
    BacktestResult,
    PerformanceSummary,
    calculate_all_metrics,
    run_backtest,
    run_offset_sweep,
    run_parameter_sweep,
)

__all__ = [
    # Metadata
    "PACKAGE_NAME",
    "VERSION",
    "__version__",
    # Configuration
    "AllocationConfig",
    "build_allocation_config",
    "load_allocation_config",
    # Errors and enums
    "AllocationError",
    "ConfigurationError",
    "DataValidationError",
    "InvalidScheduleError",
    "OptimizationError",
    "RebalanceUnit",
    "WeightingMethod",
    # Backtesting
    "AllocationBacktest",
    "BacktestResult",
    "PerformanceSummary",
    "calculate_all_metrics",
    "run_backtest",
    "run_offset_sweep",
    "run_parameter_sweep",
]
