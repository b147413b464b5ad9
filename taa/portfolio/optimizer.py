"""
Weighting policies for the selected assets.

This module provides a closed set of policies behind one interface:
- Equal weight
- Inverse volatility
- Inverse variance
- Minimum variance (long-only quadratic program)

Every policy returns weights for the selected subset that are non-negative and
sum to 1; ``allocate`` expands them to the full universe with zeros elsewhere.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

import numpy as np
import pandas as pd
from loguru import logger
from scipy.optimize import minimize

from taa.core.types import (
    ConfigurationError,
    MinVarianceFallback,
    OptimizationError,
    WeightingMethod,
)
from taa.portfolio.risk import RiskEstimate, RiskEstimator


def _normalize(raw: pd.Series) -> pd.Series:
    total = raw.sum()
    if not np.isfinite(total) or total <= 0:
        return pd.Series(1.0 / len(raw), index=raw.index)
    return raw / total


def _inverse_power(volatility: pd.Series, power: float) -> pd.Series:
    vol = volatility.astype(float)
    flat = vol <= 0
    if flat.any():
        # 1/vol diverges: riskless assets take the whole allocation
        return _normalize(flat.astype(float))
    return _normalize(vol ** -power)


def minimum_variance_weights(
    covariance: np.ndarray,
    psd_tolerance: float = 1e-10,
    feasibility_tolerance: float = 1e-6,
    max_iter: int = 500,
) -> np.ndarray:
    """
    Solve ``min w' S w`` subject to ``sum(w) = 1`` and ``0 <= w <= 1``.

    Uses SLSQP (sequential least-squares quadratic programming, an active-set
    method) with analytic gradients. The covariance is rescaled by its largest
    diagonal entry, which leaves the minimiser unchanged.

    Args:
        covariance: Symmetric positive semi-definite matrix (k, k)
        psd_tolerance: Relative tolerance on negative eigenvalues
        feasibility_tolerance: Allowed constraint violation of the solution
        max_iter: Solver iteration limit

    Returns:
        Weight vector of length k, within bounds and summing to exactly 1

    Raises:
        OptimizationError: If the matrix is not finite or not PSD, or the
            solver does not converge to a feasible point
    """
    cov = np.asarray(covariance, dtype=float)
    if cov.ndim != 2 or cov.shape[0] != cov.shape[1]:
        raise OptimizationError(f"Covariance must be square, got shape {cov.shape}")
    if not np.all(np.isfinite(cov)):
        raise OptimizationError("Covariance contains non-finite values")

    k = cov.shape[0]
    if k == 1:
        return np.ones(1)

    cov = 0.5 * (cov + cov.T)
    scale = float(np.max(np.abs(np.diag(cov))))
    if scale > 0:
        cov = cov / scale

    min_eig = float(np.linalg.eigvalsh(cov).min())
    if min_eig < -psd_tolerance * max(1.0, float(np.abs(cov).max())):
        raise OptimizationError(
            f"Covariance is not positive semi-definite (min eigenvalue {min_eig:.3e})"
        )

    def objective(w: np.ndarray) -> float:
        return float(w @ cov @ w)

    def gradient(w: np.ndarray) -> np.ndarray:
        return 2.0 * cov @ w

    constraints = [{
        "type": "eq",
        "fun": lambda w: np.sum(w) - 1.0,
        "jac": lambda w: np.ones_like(w),
    }]
    bounds = [(0.0, 1.0)] * k
    x0 = np.full(k, 1.0 / k)

    result = minimize(
        objective,
        x0,
        jac=gradient,
        method="SLSQP",
        bounds=bounds,
        constraints=constraints,
        options={"ftol": 1e-14, "maxiter": max_iter},
    )

    if not result.success:
        raise OptimizationError(f"Minimum-variance solve failed: {result.message}")

    w = np.asarray(result.x, dtype=float)
    if (
        not np.all(np.isfinite(w))
        or np.any(w < -feasibility_tolerance)
        or np.any(w > 1.0 + feasibility_tolerance)
        or abs(w.sum() - 1.0) > feasibility_tolerance
    ):
        raise OptimizationError(f"Minimum-variance solution is infeasible: {w}")

    w = np.clip(w, 0.0, 1.0)
    return w / w.sum()


class WeightingPolicy(ABC):
    """Turns the risk estimate of a selected subset into weights summing to 1."""

    method: WeightingMethod

    @abstractmethod
    def compute_weights(self, assets: list[str], risk: RiskEstimate | None) -> pd.Series:
        """
        Weights for the selected assets.

        Args:
            assets: Selected assets, two or more
            risk: Risk estimate restricted to ``assets`` (None if not needed)

        Returns:
            Non-negative weights summing to 1, indexed by ``assets``
        """

    @property
    def needs_risk(self) -> bool:
        return True

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class EqualWeight(WeightingPolicy):
    """``1/k`` for each of ``k`` selected assets."""

    method = WeightingMethod.EQUAL_WEIGHT

    def compute_weights(self, assets: list[str], risk: RiskEstimate | None) -> pd.Series:
        return pd.Series(1.0 / len(assets), index=assets)

    @property
    def needs_risk(self) -> bool:
        return False


class InverseVolatility(WeightingPolicy):
    """Weights proportional to ``1 / vol``."""

    method = WeightingMethod.INVERSE_VOLATILITY

    def compute_weights(self, assets: list[str], risk: RiskEstimate | None) -> pd.Series:
        return _inverse_power(risk.volatility.loc[assets], 1.0)


class InverseVariance(WeightingPolicy):
    """Weights proportional to ``1 / vol**2``."""

    method = WeightingMethod.INVERSE_VARIANCE

    def compute_weights(self, assets: list[str], risk: RiskEstimate | None) -> pd.Series:
        return _inverse_power(risk.volatility.loc[assets], 2.0)


class MinimumVariance(WeightingPolicy):
    """Long-only, fully invested minimum-variance weights."""

    method = WeightingMethod.MINIMUM_VARIANCE

    def __init__(self, fallback: MinVarianceFallback = MinVarianceFallback.RAISE) -> None:
        self.fallback = MinVarianceFallback(fallback)

    def compute_weights(self, assets: list[str], risk: RiskEstimate | None) -> pd.Series:
        covariance = risk.covariance.loc[assets, assets]
        try:
            w = minimum_variance_weights(covariance.to_numpy())
        except OptimizationError as exc:
            if self.fallback is MinVarianceFallback.RAISE:
                raise
            logger.warning(f"{exc}; falling back to inverse volatility")
            return InverseVolatility().compute_weights(assets, risk)
        return pd.Series(w, index=assets)

    def __repr__(self) -> str:
        return f"MinimumVariance(fallback={self.fallback.value!r})"


_POLICIES: dict[WeightingMethod, type[WeightingPolicy]] = {
    WeightingMethod.EQUAL_WEIGHT: EqualWeight,
    WeightingMethod.INVERSE_VOLATILITY: InverseVolatility,
    WeightingMethod.INVERSE_VARIANCE: InverseVariance,
    WeightingMethod.MINIMUM_VARIANCE: MinimumVariance,
}


def get_weighting_policy(
    method: WeightingMethod | str,
    fallback: MinVarianceFallback | str = MinVarianceFallback.RAISE,
) -> WeightingPolicy:
    """
    Policy instance for a weighting method name.

    Raises:
        ConfigurationError: If the name is not one of ``ew|invVol|invVar|minVol``
    """
    try:
        method = WeightingMethod(method)
    except ValueError:
        raise ConfigurationError(f"Unknown weighting policy: {method!r}") from None

    if method is WeightingMethod.MINIMUM_VARIANCE:
        return MinimumVariance(fallback)
    return _POLICIES[method]()


def allocate(
    selected: list[str],
    universe: list[str],
    window: pd.DataFrame,
    policy: WeightingPolicy,
    risk_estimator: RiskEstimator,
) -> pd.Series:
    """
    Full-universe weight vector for one rebalance period.

    No selected asset gives all zeros; a single selected asset gets weight 1
    without consulting the policy.

    Args:
        selected: Assets chosen by momentum
        universe: Every asset of the return matrix, in column order
        window: Return rows ending at the rebalance point
        policy: Weighting policy for two or more assets
        risk_estimator: Risk model for the selected subset

    Returns:
        Weight per asset of ``universe``
    """
    weights = pd.Series(0.0, index=universe)

    if len(selected) == 0:
        return weights

    if len(selected) == 1:
        weights.loc[selected[0]] = 1.0
        return weights

    risk = risk_estimator.estimate(window, selected) if policy.needs_risk else None

    subset = policy.compute_weights(list(selected), risk)
    weights.loc[subset.index] = subset.to_numpy(dtype=float)
    return weights
