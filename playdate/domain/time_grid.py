"""
The fixed sequence of bookable times of day.
"""

from __future__ import annotations

from typing import Dict, Tuple

import pendulum

from .exceptions import NotFoundError, ValidationError
from .models import TimeSlot

DISPLAY_FORMAT = "h:mm A"


class TimeGrid:
    """
    Ordered half-hour slots from ``start_hour`` to ``end_hour`` inclusive.

    The order defines adjacency for range detection, so the sequence is
    computed once and returned unchanged by every call to ``generate``.
    """

    def __init__(self, start_hour: int = 9, end_hour: int = 20, slot_minutes: int = 30):
        if not 0 <= start_hour < end_hour <= 23:
            raise ValidationError(
                f"Invalid grid hours: start {start_hour}, end {end_hour}"
            )
        if slot_minutes <= 0 or 60 % slot_minutes:
            raise ValidationError(f"slot_minutes must divide 60, got {slot_minutes}")

        self.start_hour = start_hour
        self.end_hour = end_hour
        self.slot_minutes = slot_minutes
        self._slots = self._build_slots()
        self._index: Dict[str, int] = {slot.key: i for i, slot in enumerate(self._slots)}

    def _build_slots(self) -> Tuple[TimeSlot, ...]:
        slots = []
        minute_of_day = self.start_hour * 60
        last = self.end_hour * 60

        while minute_of_day <= last:
            hour, minute = divmod(minute_of_day, 60)
            slots.append(
                TimeSlot(key=f"{hour:02d}:{minute:02d}", display=format_time(hour, minute))
            )
            minute_of_day += self.slot_minutes

        return tuple(slots)

    def generate(self) -> Tuple[TimeSlot, ...]:
        """Return the ordered slots for one day."""
        return self._slots

    def keys(self) -> Tuple[str, ...]:
        return tuple(slot.key for slot in self._slots)

    def index_of(self, time: str) -> int:
        """Position of ``time`` in the grid."""
        try:
            return self._index[time]
        except KeyError:
            raise NotFoundError(f"Time {time!r} is not part of the grid") from None

    def end_display(self, index: int) -> str:
        """Label for the end of the slot at ``index`` (its start plus one slot length)."""
        hour, minute = (int(part) for part in self._slots[index].key.split(":"))
        end = pendulum.datetime(2000, 1, 1, hour, minute).add(minutes=self.slot_minutes)
        return end.format(DISPLAY_FORMAT)

    def __len__(self) -> int:
        return len(self._slots)

    def __iter__(self):
        return iter(self._slots)

    def __getitem__(self, index: int) -> TimeSlot:
        return self._slots[index]


def format_time(hour: int, minute: int) -> str:
    """Localized 12-hour label, e.g. 13:30 -> ``"1:30 PM"``."""
    return pendulum.datetime(2000, 1, 1, hour, minute).format(DISPLAY_FORMAT)


DEFAULT_TIME_GRID = TimeGrid()
