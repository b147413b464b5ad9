"""
Pytest Configuration and Fixtures
==================================

Shared fixtures for all tests of the allocation backtester.
"""

from __future__ import annotations

import sys
from pathlib import Path

import numpy as np
import pandas as pd
import pytest
from pandas.tseries.holiday import USFederalHolidayCalendar

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))


# =============================================================================
# CONFIGURATION
# =============================================================================

@pytest.fixture(scope="session")
def project_root() -> Path:
    """Get project root path."""
    return PROJECT_ROOT


@pytest.fixture
def short_lookback_config():
    """Allocation config with lookbacks short enough for small test matrices."""
    from taa.core.config import AllocationConfig

    return AllocationConfig(
        momentum_lookbacks=(5, 10, 20),
        momentum_weights=(3.0, 2.0, 1.0),
        correlation_lookbacks=(10, 20),
        correlation_weights=(1.0, 1.0),
        volatility_lookbacks=(10,),
        volatility_weights=(1.0,),
        top_n=3,
        window_periods=1,
    )


# =============================================================================
# DATA FIXTURES
# =============================================================================

def make_returns(
    n_days: int,
    assets: list[str],
    seed: int = 42,
    start: str = "2020-01-01",
    drift: float = 0.0003,
    vol: float = 0.01,
    dates: pd.DatetimeIndex | None = None,
) -> pd.DataFrame:
    """Synthetic business-day return matrix with per-asset drift."""
    rng = np.random.default_rng(seed)
    if dates is None:
        dates = pd.bdate_range(start=start, periods=n_days)
    n_days = len(dates)
    drifts = drift * np.linspace(-1.0, 2.0, len(assets))
    vols = vol * np.linspace(0.5, 1.5, len(assets))
    values = rng.normal(drifts, vols, size=(n_days, len(assets)))
    return pd.DataFrame(values, index=dates, columns=assets)


@pytest.fixture
def sample_returns() -> pd.DataFrame:
    """Two years of daily returns for six assets, ending mid-month (2021-12-06)."""
    return make_returns(504, ["SPY", "EFA", "EEM", "AGG", "IEF", "GLD"])


@pytest.fixture
def canary_returns(sample_returns: pd.DataFrame) -> pd.DataFrame:
    """Canary universe on the same calendar as ``sample_returns``."""
    return make_returns(len(sample_returns), ["VWO", "BND"], seed=7)


@pytest.fixture
def small_returns() -> pd.DataFrame:
    """Four months of daily returns for four assets."""
    return make_returns(84, ["A", "B", "C", "D"], seed=1)


@pytest.fixture
def holiday_returns() -> pd.DataFrame:
    """Five years of returns on a US exchange calendar (about 251 rows a year)."""
    start, end = "2015-01-01", "2019-12-31"
    holidays = USFederalHolidayCalendar().holidays(start=start, end=end)
    dates = pd.bdate_range(start=start, end=end, freq="C", holidays=holidays)
    return make_returns(0, ["SPY", "EFA", "EEM", "AGG", "IEF", "GLD"], seed=11, dates=dates)
