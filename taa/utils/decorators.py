"""
Utility decorators.
"""

from __future__ import annotations

import functools
import time
from typing import Callable, ParamSpec, TypeVar

from loguru import logger

P = ParamSpec("P")
T = TypeVar("T")


def timer(func: Callable[P, T]) -> Callable[P, T]:
    """
    Decorator to measure and log function execution time.

    Example:
        @timer
        def run():
            ...
    """

    @functools.wraps(func)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
        start_time = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed = (time.perf_counter() - start_time) * 1000
            logger.debug(f"{func.__module__}.{func.__qualname__} executed in {elapsed:.2f}ms")

    return wrapper
