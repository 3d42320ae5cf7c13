"""
Finds the contiguous block of slots around a clicked cell that can be
proposed as one meeting window.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, FrozenSet, Optional, Tuple

from .exceptions import NotFoundError
from .models import MeetingRange, Participant

if TYPE_CHECKING:
    from .session import PlaydateSession


class RangeDetector:
    """
    Expands a clicked slot into the largest adjacent block where:

    - the current participant stays available, and
    - the other participants available there include everyone who was
      available at the clicked slot.

    The containment check is a superset test, not equality: a neighbouring
    slot with extra people still extends the block, while the reported
    participants remain exactly the clicked slot's set.
    """

    def __init__(self, session: "PlaydateSession"):
        self.session = session

    def detect(
        self,
        date: str,
        time: str,
        participant_id: Optional[str] = None,
    ) -> Optional[MeetingRange]:
        """
        Propose a meeting window anchored at ``(date, time)``.

        Args:
            date: ISO date of the clicked cell
            time: Grid time key of the clicked cell
            participant_id: Current participant; defaults to the selected one

        Returns:
            The range, or None when there is nothing to propose
        """
        current = self._current_participant(participant_id)
        if current is None:
            return None

        grid = self.session.grid
        try:
            anchor = grid.index_of(time)
        except NotFoundError:
            return None

        available = self.session.aggregation.available_at(date, time)
        if len(available) < 2 or not current.is_available(date, time):
            return None

        base = self._others(date, time, current)
        if not base:
            return None
        base_ids = frozenset(p.id for p in base)

        left = anchor
        while left > 0 and self._extends(date, grid[left - 1].key, current, base_ids):
            left -= 1

        right = anchor
        while right < len(grid) - 1 and self._extends(date, grid[right + 1].key, current, base_ids):
            right += 1

        return MeetingRange(
            date=date,
            start_time=grid[left].key,
            end_time=grid[right].key,
            start_display=grid[left].display,
            end_display=grid.end_display(right),
            slot_count=right - left + 1,
            participants=base,
        )

    def _current_participant(self, participant_id: Optional[str]) -> Optional[Participant]:
        if participant_id is None:
            return self.session.participants.selected
        try:
            return self.session.participants.get(participant_id)
        except NotFoundError:
            return None

    def _others(self, date: str, time: str, current: Participant) -> Tuple[Participant, ...]:
        return tuple(
            p for p in self.session.aggregation.available_at(date, time)
            if p.id != current.id
        )

    def _extends(
        self,
        date: str,
        time: str,
        current: Participant,
        base_ids: FrozenSet[str],
    ) -> bool:
        if not current.is_available(date, time):
            return False
        other_ids = {p.id for p in self._others(date, time, current)}
        return other_ids >= base_ids
