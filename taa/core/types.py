"""
Core Types Module
=================

Exceptions and enums shared across the allocation engine.
"""

from __future__ import annotations

from enum import Enum


# =============================================================================
# EXCEPTIONS
# =============================================================================

class AllocationError(Exception):
    """Base exception for all allocation engine errors."""
    pass


class ConfigurationError(AllocationError):
    """Invalid or inconsistent configuration, detected before a run starts."""
    pass


class DataError(AllocationError):
    """Data-related errors."""
    pass


class DataValidationError(DataError):
    """Return matrix failed validation."""
    pass


class InvalidScheduleError(AllocationError):
    """Not enough history to support the lookbacks and rebalance cadence."""
    pass


class OptimizationError(AllocationError):
    """Quadratic program is infeasible or the covariance is not PSD."""
    pass


class BacktestError(AllocationError):
    """A backtest run was aborted."""
    pass


# =============================================================================
# ENUMS
# =============================================================================

class WeightingMethod(str, Enum):
    """Weighting policies for the selected assets."""
    EQUAL_WEIGHT = "ew"
    INVERSE_VOLATILITY = "invVol"
    INVERSE_VARIANCE = "invVar"
    MINIMUM_VARIANCE = "minVol"


class RebalanceUnit(str, Enum):
    """Calendar unit of the rebalance schedule."""
    MONTHS = "months"
    QUARTERS = "quarters"
    YEARS = "years"

    @property
    def periods_per_year(self) -> int:
        """Number of schedule intervals in one year."""
        return {
            RebalanceUnit.MONTHS: 12,
            RebalanceUnit.QUARTERS: 4,
            RebalanceUnit.YEARS: 1,
        }[self]

    @property
    def pandas_freq(self) -> str:
        """Period alias used to bucket a DatetimeIndex."""
        return {
            RebalanceUnit.MONTHS: "M",
            RebalanceUnit.QUARTERS: "Q",
            RebalanceUnit.YEARS: "Y",
        }[self]


class MinVarianceFallback(str, Enum):
    """What to do when the minimum-variance program cannot be solved."""
    RAISE = "raise"
    INVERSE_VOLATILITY = "inverse_volatility"
