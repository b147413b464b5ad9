"""
Allocation strategy configuration.

The configuration is an immutable pydantic model validated in full before any
rebalance period is processed. Every invalid combination raises
ConfigurationError; nothing is silently defaulted or derived from another
field.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator, model_validator

from taa.core.types import (
    ConfigurationError,
    MinVarianceFallback,
    RebalanceUnit,
    WeightingMethod,
)
from taa.portfolio.lookback import WeightedLookback


class AllocationConfig(BaseModel):
    """Parameters of one allocation backtest."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    # Momentum: 1, 3, 6 and 12 month returns weighted 12/4/2/1
    momentum_lookbacks: tuple[int, ...] = (21, 63, 126, 252)
    momentum_weights: tuple[float, ...] = (12.0, 4.0, 2.0, 1.0)

    # Correlation is configured on its own, never copied from momentum
    correlation_lookbacks: tuple[int, ...] = (21, 63, 126, 252)
    correlation_weights: tuple[float, ...] = (12.0, 4.0, 2.0, 1.0)

    volatility_lookbacks: tuple[int, ...] = (20,)
    volatility_weights: tuple[float, ...] = (1.0,)

    # Selection
    threshold: float = 0.0
    top_n: int = 5

    weighting: WeightingMethod = WeightingMethod.MINIMUM_VARIANCE
    min_variance_fallback: MinVarianceFallback = MinVarianceFallback.RAISE

    # Schedule
    rebalance_on: RebalanceUnit = RebalanceUnit.MONTHS
    offset: int = 0
    window_periods: int | None = None

    # Momentum penalty for assets that held no weight last period
    momentum_penalty: float = 0.0
    zero_weight_tolerance: float = 1e-8

    # Crash protection
    crash_asset: str | None = None
    leverage: float = 1.0

    periods_per_year: int = 252

    @field_validator("weighting", mode="before")
    @classmethod
    def parse_weighting(cls, v: Any) -> WeightingMethod:
        """Map a policy name onto the closed set of weighting methods."""
        if isinstance(v, WeightingMethod):
            return v
        try:
            return WeightingMethod(v)
        except ValueError:
            names = ", ".join(m.value for m in WeightingMethod)
            raise ConfigurationError(
                f"Unknown weighting policy {v!r}; expected one of: {names}"
            ) from None

    @field_validator("rebalance_on", mode="before")
    @classmethod
    def parse_rebalance_on(cls, v: Any) -> RebalanceUnit:
        """Map a unit name onto a RebalanceUnit."""
        if isinstance(v, RebalanceUnit):
            return v
        try:
            return RebalanceUnit(v)
        except ValueError:
            names = ", ".join(u.value for u in RebalanceUnit)
            raise ConfigurationError(
                f"Unknown rebalance unit {v!r}; expected one of: {names}"
            ) from None

    @field_validator("min_variance_fallback", mode="before")
    @classmethod
    def parse_fallback(cls, v: Any) -> MinVarianceFallback:
        if isinstance(v, MinVarianceFallback):
            return v
        try:
            return MinVarianceFallback(v)
        except ValueError:
            raise ConfigurationError(f"Unknown min-variance fallback {v!r}") from None

    @field_validator("momentum_penalty")
    @classmethod
    def check_penalty(cls, v: float) -> float:
        if not 0.0 <= v <= 1.0:
            raise ConfigurationError(f"momentum_penalty must be in [0, 1], got {v}")
        return v

    @field_validator("top_n")
    @classmethod
    def check_top_n(cls, v: int) -> int:
        if v < 1:
            raise ConfigurationError(f"top_n must be at least 1, got {v}")
        return v

    @field_validator("leverage")
    @classmethod
    def check_leverage(cls, v: float) -> float:
        if v <= 0:
            raise ConfigurationError(f"leverage must be positive, got {v}")
        return v

    @field_validator("window_periods")
    @classmethod
    def check_window_periods(cls, v: int | None) -> int | None:
        if v is not None and v < 1:
            raise ConfigurationError(f"window_periods must be at least 1, got {v}")
        return v

    @field_validator("zero_weight_tolerance")
    @classmethod
    def check_tolerance(cls, v: float) -> float:
        if v < 0:
            raise ConfigurationError("zero_weight_tolerance cannot be negative")
        return v

    @field_validator("periods_per_year")
    @classmethod
    def check_periods_per_year(cls, v: int) -> int:
        if v < 1:
            raise ConfigurationError("periods_per_year must be at least 1")
        return v

    @model_validator(mode="after")
    def check_lookbacks(self) -> "AllocationConfig":
        """Build every aggregator once so mismatches fail at setup."""
        for name in ("momentum", "correlation", "volatility"):
            getattr(self, f"{name}_lookback")
        return self

    @property
    def momentum_lookback(self) -> WeightedLookback:
        return WeightedLookback(self.momentum_lookbacks, self.momentum_weights, name="momentum")

    @property
    def correlation_lookback(self) -> WeightedLookback:
        return WeightedLookback(
            self.correlation_lookbacks, self.correlation_weights, name="correlation"
        )

    @property
    def volatility_lookback(self) -> WeightedLookback:
        return WeightedLookback(
            self.volatility_lookbacks,
            self.volatility_weights,
            periods_per_year=self.periods_per_year,
            name="volatility",
        )

    @property
    def effective_window_periods(self) -> int:
        """Schedule intervals spanned by one decision window (one year by default)."""
        if self.window_periods is not None:
            return self.window_periods
        return self.rebalance_on.periods_per_year

    @property
    def max_lookback(self) -> int:
        return max(
            *self.momentum_lookbacks,
            *self.correlation_lookbacks,
            *self.volatility_lookbacks,
        )


def build_allocation_config(values: dict[str, Any] | None = None, **overrides: Any) -> AllocationConfig:
    """
    Build an AllocationConfig, reporting every failure as ConfigurationError.

    Args:
        values: Mapping of configuration values (e.g. parsed YAML)
        **overrides: Values taking precedence over ``values``

    Returns:
        Validated configuration

    Raises:
        ConfigurationError: If any value is missing, mistyped or inconsistent
    """
    merged = {**(values or {}), **{k: v for k, v in overrides.items() if v is not None}}
    try:
        return AllocationConfig(**merged)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid allocation configuration: {exc}") from exc


def load_allocation_config(path: Path | str, **overrides: Any) -> AllocationConfig:
    """
    Load an AllocationConfig from a YAML file.

    The file may hold the values at top level or under an ``allocation`` key.
    """
    config_path = Path(path)
    if not config_path.exists():
        raise ConfigurationError(f"Configuration file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    if not isinstance(raw, dict):
        raise ConfigurationError(f"Configuration file must hold a mapping: {config_path}")

    return build_allocation_config(raw.get("allocation", raw), **overrides)
