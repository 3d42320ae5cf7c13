"""
Read-only queries over participants, the date window and the time grid.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, List, Optional, Tuple

from .models import Participant, SlotAggregate, SlotIntensity, SlotKey

if TYPE_CHECKING:
    from .session import PlaydateSession


DEFAULT_TOP_SLOTS = 5


@dataclass(frozen=True)
class IntensityThresholds:
    """
    When a cell counts as FULL.

    With ``full_ratio`` unset a cell is FULL once ``full_count`` participants
    are available. With ``full_ratio`` set the proportion of all participants
    decides instead. Any non-empty cell below the threshold is PARTIAL.
    """
    full_count: int = 2
    full_ratio: Optional[float] = None


class AggregationEngine:
    """
    Derives per-slot participant sets, intensity and rankings.

    Nothing is cached: every call recomputes from the session's current state.
    """

    def __init__(self, session: "PlaydateSession", thresholds: Optional[IntensityThresholds] = None):
        self.session = session
        self.thresholds = thresholds or IntensityThresholds()

    def available_at(self, date: str, time: str) -> Tuple[Participant, ...]:
        """Participants available in the cell, in store order."""
        key = SlotKey(date, time)
        return tuple(p for p in self.session.participants if key in p.availability)

    def classify(self, date: str, time: str) -> SlotIntensity:
        return self._classify_count(len(self.available_at(date, time)))

    def _classify_count(self, count: int) -> SlotIntensity:
        if count == 0:
            return SlotIntensity.EMPTY

        if self.thresholds.full_ratio is not None:
            total = len(self.session.participants)
            is_full = count / total >= self.thresholds.full_ratio
        else:
            is_full = count >= self.thresholds.full_count

        return SlotIntensity.FULL if is_full else SlotIntensity.PARTIAL

    def aggregate(self, date: str, time: str, display: Optional[str] = None) -> SlotAggregate:
        participants = self.available_at(date, time)
        if display is None:
            display = self.session.grid[self.session.grid.index_of(time)].display
        return SlotAggregate(
            date=date,
            time=time,
            display=display,
            participants=participants,
            intensity=self._classify_count(len(participants)),
        )

    def grid(self) -> List[List[SlotAggregate]]:
        """
        One row per time slot, one cell per displayed date.

        Dates outside the current window are never included.
        """
        return [
            [self.aggregate(date, slot.key, slot.display) for date in self.session.window]
            for slot in self.session.grid.generate()
        ]

    def top_slots(self, limit: int = DEFAULT_TOP_SLOTS) -> List[SlotAggregate]:
        """
        Best cells in the current window, most participants first.

        Ties keep chronological order since the sort is stable over the
        date-major enumeration. Empty cells are excluded.
        """
        cells = [
            self.aggregate(date, slot.key, slot.display)
            for date in self.session.window
            for slot in self.session.grid.generate()
        ]
        ranked = sorted(
            (cell for cell in cells if cell.count > 0),
            key=lambda cell: cell.count,
            reverse=True,
        )
        return ranked[:max(limit, 0)]
