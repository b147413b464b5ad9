"""
Canary-driven crash protection.

The fraction of canary assets with positive momentum sets how much of the
primary allocation is kept. The withheld remainder goes to cash, or to a
defensive asset when one is configured and its own momentum clears the
selection threshold.
"""

from __future__ import annotations

from dataclasses import dataclass

import pandas as pd
from loguru import logger

from taa.portfolio.momentum import MomentumEngine


@dataclass(frozen=True)
class OverlayResult:
    """Outcome of the overlay for one period."""

    weights: pd.Series
    aggressive_fraction: float
    defensive_weight: float


def aggressive_fraction(canary_momentum: pd.Series) -> float:
    """Share of canary assets with strictly positive momentum, in [0, 1]."""
    if len(canary_momentum) == 0:
        return 1.0
    return float((canary_momentum > 0).mean())


class CrashProtection:
    """
    Scale the primary weights by the canary's risk-on fraction.

    Usage:
        overlay = CrashProtection(canary_engine, crash_asset="IEF", threshold=0.0)
        result = overlay.apply(weights, momentum, canary_window)
    """

    def __init__(
        self,
        canary_engine: MomentumEngine,
        crash_asset: str | None = None,
        threshold: float = 0.0,
        leverage: float = 1.0,
    ) -> None:
        """
        Args:
            canary_engine: Momentum engine for the canary universe (no penalty)
            crash_asset: Defensive asset receiving the withheld fraction
            threshold: Momentum the defensive asset must exceed
            leverage: Multiplier applied when the canary is fully risk-on
        """
        self.canary_engine = canary_engine
        self.crash_asset = crash_asset
        self.threshold = threshold
        self.leverage = leverage

    def canary_momentum(self, canary_window: pd.DataFrame) -> pd.Series:
        """Canary momentum against an all-zero prior allocation."""
        return self.canary_engine.score(canary_window, prior_weights=None)

    def apply(
        self,
        weights: pd.Series,
        momentum: pd.Series,
        canary_window: pd.DataFrame,
    ) -> OverlayResult:
        """
        Blend the primary weights towards cash or the defensive asset.

        Args:
            weights: Full-universe primary weights
            momentum: Primary-universe momentum for the same period
            canary_window: Canary returns over the decision window

        Returns:
            OverlayResult with the adjusted weights
        """
        fraction = aggressive_fraction(self.canary_momentum(canary_window))

        adjusted = weights * fraction
        if fraction == 1.0 and self.leverage != 1.0:
            adjusted = adjusted * self.leverage

        residual = 1.0 - fraction
        defensive = 0.0
        if (
            self.crash_asset is not None
            and residual > 0
            and momentum.get(self.crash_asset, float("-inf")) > self.threshold
        ):
            adjusted.loc[self.crash_asset] = adjusted.get(self.crash_asset, 0.0) + residual
            defensive = residual

        logger.debug(
            f"Crash protection: aggressive={fraction:.2f}, "
            f"defensive={defensive:.2f}, cash={residual - defensive:.2f}"
        )
        return OverlayResult(weights=adjusted, aggressive_fraction=fraction, defensive_weight=defensive)
