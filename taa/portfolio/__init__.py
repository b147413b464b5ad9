"""
Portfolio construction for the allocation engine.

This module provides:
- Rebalance schedules from a return calendar
- Weighted multi-horizon lookback statistics
- Momentum scoring and asset selection
- Volatility / correlation / covariance estimation
- Weighting policies (equal, inverse vol, inverse variance, minimum variance)
- Canary-driven crash protection
"""

from taa.portfolio.lookback import (
    WeightedLookback,
    annualized_volatility,
    correlation_matrix,
    cumulative_return,
)
from taa.portfolio.schedule import (
    RebalanceSchedule,
    offset_endpoints,
    period_endpoints,
)
from taa.portfolio.momentum import (
    MomentumEngine,
    rank_assets,
    select_assets,
)
from taa.portfolio.risk import (
    RiskEstimate,
    RiskEstimator,
    covariance_from_components,
)
from taa.portfolio.optimizer import (
    EqualWeight,
    InverseVariance,
    InverseVolatility,
    MinimumVariance,
    WeightingPolicy,
    allocate,
    get_weighting_policy,
    minimum_variance_weights,
)
from taa.portfolio.crash_protection import (
    CrashProtection,
    OverlayResult,
    aggressive_fraction,
)

__all__ = [
    # Lookbacks
    "WeightedLookback",
    "annualized_volatility",
    "correlation_matrix",
    "cumulative_return",
    # Schedule
    "RebalanceSchedule",
    "offset_endpoints",
    "period_endpoints",
    # Momentum
    "MomentumEngine",
    "rank_assets",
    "select_assets",
    # Risk
    "RiskEstimate",
    "RiskEstimator",
    "covariance_from_components",
    # Weighting
    "EqualWeight",
    "InverseVariance",
    "InverseVolatility",
    "MinimumVariance",
    "WeightingPolicy",
    "allocate",
    "get_weighting_policy",
    "minimum_variance_weights",
    # Crash protection
    "CrashProtection",
    "OverlayResult",
    "aggressive_fraction",
]
