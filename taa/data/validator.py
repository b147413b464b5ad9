"""
Return matrix validation for the allocation engine.

This module provides:
- Structural checks on a return matrix (index, dtypes, missing values)
- Date alignment of the primary and canary universes
"""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np
import pandas as pd
from loguru import logger

from taa.core.types import DataValidationError


@dataclass
class ValidationResult:
    """
    Result of return matrix validation.

    Attributes:
        is_valid: Overall validation status
        name: Label of the validated matrix
        errors: List of critical errors
        warnings: List of warnings
        stats: Validation statistics
    """

    is_valid: bool
    name: str
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    stats: dict = field(default_factory=dict)

    def __str__(self) -> str:
        status = "VALID" if self.is_valid else "INVALID"
        msg = f"{self.name}: {status}"
        if self.errors:
            msg += f" | Errors: {'; '.join(self.errors)}"
        if self.warnings:
            msg += f" | Warnings: {len(self.warnings)}"
        return msg


def check_return_matrix(returns: pd.DataFrame, name: str = "returns") -> ValidationResult:
    """
    Check that a frame is a usable return matrix.

    Args:
        returns: Candidate return matrix
        name: Label used in messages

    Returns:
        ValidationResult describing every problem found
    """
    errors: list[str] = []
    warnings: list[str] = []

    if not isinstance(returns, pd.DataFrame):
        return ValidationResult(False, name, [f"expected a DataFrame, got {type(returns).__name__}"])

    if returns.empty:
        errors.append("matrix is empty")

    if not isinstance(returns.index, pd.DatetimeIndex):
        errors.append("index is not a DatetimeIndex")
    else:
        if returns.index.has_duplicates:
            errors.append("index has duplicate timestamps")
        if not returns.index.is_monotonic_increasing:
            errors.append("index is not increasing")

    if returns.columns.has_duplicates:
        errors.append("duplicate asset columns")

    non_numeric = [c for c in returns.columns if not pd.api.types.is_numeric_dtype(returns[c])]
    if non_numeric:
        errors.append(f"non-numeric columns: {non_numeric}")
    elif not returns.empty:
        values = returns.to_numpy(dtype=float)
        n_missing = int(np.isnan(values).sum())
        if n_missing:
            errors.append(f"{n_missing} missing values")
        elif not np.all(np.isfinite(values)):
            errors.append("infinite values")
        elif (values <= -1.0).any():
            warnings.append("returns of -100% or worse present")

    stats = {"rows": len(returns), "assets": len(returns.columns)}
    return ValidationResult(not errors, name, errors, warnings, stats)


def validate_return_matrix(returns: pd.DataFrame, name: str = "returns") -> pd.DataFrame:
    """
    Validate a return matrix, raising on the first failure report.

    Raises:
        DataValidationError: If the matrix is unusable
    """
    result = check_return_matrix(returns, name)
    if not result.is_valid:
        raise DataValidationError(str(result))
    for warning in result.warnings:
        logger.warning(f"{name}: {warning}")
    return returns


def align_returns(
    returns: pd.DataFrame,
    canary: pd.DataFrame | None,
) -> tuple[pd.DataFrame, pd.DataFrame | None]:
    """
    Restrict both matrices to their common dates.

    Args:
        returns: Primary return matrix
        canary: Canary return matrix, or None

    Returns:
        Tuple of (returns, canary) on the intersection of their indices

    Raises:
        DataValidationError: If the two calendars do not overlap
    """
    if canary is None:
        return returns, None

    common = returns.index.intersection(canary.index)
    if len(common) == 0:
        raise DataValidationError("Return and canary matrices share no dates")

    dropped = len(returns) - len(common)
    if dropped:
        logger.info(f"Aligned to {len(common)} common dates ({dropped} primary rows dropped)")

    return returns.loc[common], canary.loc[common]
