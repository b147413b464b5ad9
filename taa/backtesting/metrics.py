"""
Performance statistics for a strategy return series.

This module provides:
- Annualised return and volatility
- Annualised Sharpe ratio (return over volatility)
- Maximum drawdown and Calmar ratio
- Ulcer Index and Ulcer Performance Index

All functions are pure; a ratio whose denominator is zero evaluates to 0.0.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

import numpy as np
import pandas as pd


@dataclass(frozen=True)
class PerformanceSummary:
    """Container for the headline performance statistics."""

    total_return: float
    annualized_return: float
    annualized_volatility: float
    sharpe_ratio: float
    max_drawdown: float
    calmar_ratio: float
    ulcer_index: float
    ulcer_performance_index: float
    n_periods: int

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)


def _ratio(numerator: float, denominator: float) -> float:
    if denominator == 0 or not np.isfinite(denominator):
        return 0.0
    return float(numerator / denominator)


def calculate_drawdown(returns: pd.Series) -> pd.Series:
    """
    Drawdown from the running peak of the compounded equity curve.

    The curve starts at 1, so a loss on the first row is a drawdown.
    Values are fractions <= 0.
    """
    equity = (1.0 + returns).cumprod()
    peak = np.maximum(equity.cummax(), 1.0)
    return equity / peak - 1.0


def annualized_return(returns: pd.Series, periods_per_year: int = 252) -> float:
    """Geometric average return per year."""
    n = len(returns)
    if n == 0:
        return 0.0
    growth = float((1.0 + returns).prod())
    if growth <= 0:
        return -1.0
    return growth ** (periods_per_year / n) - 1.0


def annualized_volatility(returns: pd.Series, periods_per_year: int = 252) -> float:
    """Sample standard deviation scaled to one year."""
    if len(returns) < 2:
        return 0.0
    return float(returns.std(ddof=1) * np.sqrt(periods_per_year))


def sharpe_ratio(
    returns: pd.Series,
    risk_free_rate: float = 0.0,
    periods_per_year: int = 252,
) -> float:
    """
    Annualised excess return over annualised volatility.

    Args:
        returns: Return series
        risk_free_rate: Annual risk-free rate
        periods_per_year: Number of periods per year
    """
    excess = annualized_return(returns, periods_per_year) - risk_free_rate
    return _ratio(excess, annualized_volatility(returns, periods_per_year))


def max_drawdown(returns: pd.Series) -> float:
    """Deepest drawdown as a negative fraction (0.0 if none)."""
    if len(returns) == 0:
        return 0.0
    return float(calculate_drawdown(returns).min())


def calmar_ratio(returns: pd.Series, periods_per_year: int = 252) -> float:
    """Annualised return over the absolute maximum drawdown."""
    return _ratio(annualized_return(returns, periods_per_year), abs(max_drawdown(returns)))


def ulcer_index(returns: pd.Series) -> float:
    """Root-mean-square of the drawdown series."""
    if len(returns) == 0:
        return 0.0
    drawdown = calculate_drawdown(returns)
    return float(np.sqrt((drawdown ** 2).mean()))


def ulcer_performance_index(returns: pd.Series, periods_per_year: int = 252) -> float:
    """Annualised return over the Ulcer Index."""
    return _ratio(annualized_return(returns, periods_per_year), ulcer_index(returns))


def calculate_all_metrics(
    returns: pd.Series,
    periods_per_year: int = 252,
    risk_free_rate: float = 0.0,
) -> PerformanceSummary:
    """
    Calculate all performance statistics.

    Args:
        returns: Strategy return series
        periods_per_year: Periods per year
        risk_free_rate: Annual risk-free rate for the Sharpe ratio

    Returns:
        PerformanceSummary
    """
    returns = returns.dropna()
    total = float((1.0 + returns).prod() - 1.0) if len(returns) else 0.0

    return PerformanceSummary(
        total_return=total,
        annualized_return=annualized_return(returns, periods_per_year),
        annualized_volatility=annualized_volatility(returns, periods_per_year),
        sharpe_ratio=sharpe_ratio(returns, risk_free_rate, periods_per_year),
        max_drawdown=max_drawdown(returns),
        calmar_ratio=calmar_ratio(returns, periods_per_year),
        ulcer_index=ulcer_index(returns),
        ulcer_performance_index=ulcer_performance_index(returns, periods_per_year),
        n_periods=len(returns),
    )


def compare_strategies(
    results: dict[str, PerformanceSummary | dict[str, float]],
) -> pd.DataFrame:
    """
    Compare statistics across multiple strategies.

    Args:
        results: Dictionary mapping strategy names to summaries

    Returns:
        Comparison DataFrame, one row per strategy
    """
    rows = {
        name: summary.to_dict() if isinstance(summary, PerformanceSummary) else summary
        for name, summary in results.items()
    }
    return pd.DataFrame(rows).T
