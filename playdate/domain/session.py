"""
Session context owning all mutable scheduling state.
"""

from __future__ import annotations

from typing import Optional

from .aggregation import AggregationEngine, IntensityThresholds
from .date_window import DateWindow
from .participant_store import ParticipantStore
from .range_detector import RangeDetector
from .time_grid import DEFAULT_TIME_GRID, TimeGrid


class PlaydateSession:
    """
    Holds the participant store, the displayed date window and the grid.

    The aggregation engine and range detector read from the session on every
    query, so they always see the latest local writes.
    """

    def __init__(
        self,
        grid: TimeGrid = DEFAULT_TIME_GRID,
        window: Optional[DateWindow] = None,
        require_phone: bool = False,
        thresholds: Optional[IntensityThresholds] = None,
    ) -> None:
        self.grid = grid
        self.participants = ParticipantStore(grid=grid, require_phone=require_phone)
        self._window = window or DateWindow.default()
        self.aggregation = AggregationEngine(self, thresholds=thresholds)
        self.ranges = RangeDetector(self)
        self.closed = False

    @property
    def window(self) -> DateWindow:
        return self._window

    def set_window(self, window: DateWindow) -> None:
        """Replace the displayed dates. Availability data is left untouched."""
        self._window = window

    def close(self) -> None:
        """Drop all local state at the end of a session."""
        self.participants.clear()
        self.closed = True
