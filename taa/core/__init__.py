"""
Core types and configuration.
"""

from taa.core.types import (
    AllocationError,
    BacktestError,
    ConfigurationError,
    DataError,
    DataValidationError,
    InvalidScheduleError,
    MinVarianceFallback,
    OptimizationError,
    RebalanceUnit,
    WeightingMethod,
)

__all__ = [
    "AllocationError",
    "BacktestError",
    "ConfigurationError",
    "DataError",
    "DataValidationError",
    "InvalidScheduleError",
    "MinVarianceFallback",
    "OptimizationError",
    "RebalanceUnit",
    "WeightingMethod",
]
