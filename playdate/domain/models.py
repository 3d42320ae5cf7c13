"""
Domain models for participants, slot keys and derived aggregates.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Set, Tuple

from .exceptions import ValidationError


@dataclass(frozen=True)
class SlotKey:
    """
    Identifies one half-hour cell on one calendar date.

    The wire form is ``"<date>-<time>"``, e.g. ``"2024-11-25-09:30"``.
    """
    date: str
    time: str

    @property
    def key(self) -> str:
        return f"{self.date}-{self.time}"

    @classmethod
    def from_key(cls, key: str) -> "SlotKey":
        """Parse the wire form. The time part never contains a dash."""
        date, sep, time = key.rpartition("-")
        if not sep or not date or not time:
            raise ValidationError(f"Malformed slot key: {key!r}")
        return cls(date=date, time=time)

    def __str__(self) -> str:
        return self.key


@dataclass(frozen=True)
class TimeSlot:
    """One bookable time of day, e.g. key ``"09:30"`` shown as ``"9:30 AM"``."""
    key: str
    display: str


def _normalize_phone(phone: Optional[str]) -> Optional[str]:
    if phone is None:
        return None
    phone = phone.strip()
    return phone or None


@dataclass
class Participant:
    """
    A person whose availability is tracked.

    ``availability`` is sparse: a present key means available, there is no
    explicit unavailable state.

    Invariant: name is non-empty after stripping.
    """
    id: str
    name: str
    phone: Optional[str] = None
    availability: Set[SlotKey] = field(default_factory=set)

    def __post_init__(self):
        self.name = (self.name or "").strip()
        if not self.name:
            raise ValidationError("Participant name must not be empty")
        self.phone = _normalize_phone(self.phone)

    def is_available(self, date: str, time: str) -> bool:
        return SlotKey(date, time) in self.availability


class SlotIntensity(Enum):
    """How many participants are available in a cell."""
    EMPTY = "empty"
    PARTIAL = "partial"
    FULL = "full"


@dataclass(frozen=True)
class SlotAggregate:
    """
    Participants available in one (date, time) cell.

    Derived on every query, never stored.
    """
    date: str
    time: str
    display: str
    participants: Tuple[Participant, ...]
    intensity: SlotIntensity

    @property
    def count(self) -> int:
        return len(self.participants)

    @property
    def names(self) -> str:
        """Comma separated names, as shown inside a grid cell."""
        return ", ".join(p.name for p in self.participants)


@dataclass(frozen=True)
class MeetingRange:
    """
    A proposed meeting window spanning one or more adjacent slots.

    ``participants`` is always the set of other participants available at
    the clicked slot, even where more people are free for part of the range.
    """
    date: str
    start_time: str
    end_time: str
    start_display: str
    end_display: str
    slot_count: int
    participants: Tuple[Participant, ...]

    @property
    def names(self) -> str:
        return ", ".join(p.name for p in self.participants)

    @property
    def phones(self) -> Tuple[str, ...]:
        """Phone numbers of the participants who have one."""
        return tuple(p.phone for p in self.participants if p.phone)

    def format_display(self) -> str:
        """Format: 2024-11-25 | 10:00 AM – 11:30 AM (3 slots)"""
        return (
            f"{self.date} | {self.start_display} – {self.end_display} "
            f"({self.slot_count} slot{'s' if self.slot_count != 1 else ''})"
        )


class SaveStatus(Enum):
    """Write-in-flight signal shown to the user."""
    IDLE = "idle"
    SAVING = "saving"
    SAVED = "saved"
