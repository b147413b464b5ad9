"""
Rebalance schedule generation.

Rebalance points are 0-based row positions in the return matrix: position 0
followed by the last row of every calendar period, shifted by a day offset
and clamped into the matrix.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np
import pandas as pd
from loguru import logger

from taa.core.types import InvalidScheduleError, RebalanceUnit


def period_endpoints(index: pd.DatetimeIndex, unit: RebalanceUnit | str) -> list[int]:
    """
    Natural period-end positions of a calendar.

    Args:
        index: Row timestamps of the return matrix
        unit: Calendar unit (months, quarters or years)

    Returns:
        ``[0]`` followed by the position of the last row of each period
    """
    unit = RebalanceUnit(unit)
    if len(index) == 0:
        return []

    periods = pd.DatetimeIndex(index).to_period(unit.pandas_freq)
    codes = np.asarray(periods.asi8)
    last_rows = np.flatnonzero(codes[1:] != codes[:-1]).tolist()
    last_rows.append(len(index) - 1)

    return [0] + [int(pos) for pos in last_rows if pos != 0]


def offset_endpoints(endpoints: Sequence[int], offset: int, n_rows: int) -> list[int]:
    """
    Shift endpoints by ``offset`` rows, clamp, deduplicate and trim.

    A final endpoint one row after its predecessor is dropped: a single
    trailing row gives no period to hold weights over.
    """
    shifted = (min(max(int(ep) + offset, 0), n_rows - 1) for ep in endpoints)

    result: list[int] = []
    for ep in shifted:
        if not result or ep != result[-1]:
            result.append(ep)

    if len(result) >= 2 and result[-1] - result[-2] == 1:
        result.pop()

    return result


class RebalanceSchedule:
    """
    Immutable sequence of rebalance positions for one run.

    Attributes:
        positions: Strictly increasing 0-based row positions
        window_periods: Schedule intervals covered by one decision window
    """

    def __init__(self, positions: Sequence[int], window_periods: int) -> None:
        self.positions: tuple[int, ...] = tuple(int(p) for p in positions)
        self.window_periods = window_periods

        if len(self.positions) < window_periods + 1:
            raise InvalidScheduleError(
                f"Schedule has {len(self.positions)} rebalance points; "
                f"{window_periods + 1} are needed for a {window_periods}-period window"
            )

    @classmethod
    def from_index(
        cls,
        index: pd.DatetimeIndex,
        unit: RebalanceUnit | str = RebalanceUnit.MONTHS,
        offset: int = 0,
        window_periods: int | None = None,
    ) -> "RebalanceSchedule":
        """
        Build the schedule for a return matrix calendar.

        Args:
            index: Row timestamps of the return matrix
            unit: Calendar unit of the rebalance cadence
            offset: Rows to shift every period end by (negative = earlier)
            window_periods: Intervals per decision window (one year if None)

        Raises:
            InvalidScheduleError: If too few rebalance points remain
        """
        unit = RebalanceUnit(unit)
        if window_periods is None:
            window_periods = unit.periods_per_year

        natural = period_endpoints(index, unit)
        positions = offset_endpoints(natural, offset, len(index))

        logger.debug(
            f"Schedule: {len(positions)} {unit.value} endpoints "
            f"(offset={offset}, rows={len(index)})"
        )
        return cls(positions, window_periods)

    def windows(self) -> list[tuple[int, int]]:
        """
        Decision windows as ``(start, end)`` positions, both inclusive.

        Window ``i`` runs from rebalance point ``i`` to point
        ``i + window_periods``; weights are decided at ``end``.
        """
        k = self.window_periods
        return [
            (self.positions[i], self.positions[i + k])
            for i in range(len(self.positions) - k)
        ]

    def __len__(self) -> int:
        return len(self.positions)

    def __iter__(self):
        return iter(self.positions)

    def __getitem__(self, item):
        return self.positions[item]

    def __repr__(self) -> str:
        return f"RebalanceSchedule(n={len(self.positions)}, window_periods={self.window_periods})"
