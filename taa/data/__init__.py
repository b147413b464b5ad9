"""
Return matrix validation and alignment.
"""

from taa.data.validator import (
    ValidationResult,
    align_returns,
    check_return_matrix,
    validate_return_matrix,
)

__all__ = [
    "ValidationResult",
    "align_returns",
    "check_return_matrix",
    "validate_return_matrix",
]
