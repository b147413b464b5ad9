"""
Utility modules.

This module provides:
- Logging setup with loguru
- Timing decorator
"""

from taa.utils.logger import setup_logging
from taa.utils.decorators import timer

__all__ = [
    "setup_logging",
    "timer",
]
