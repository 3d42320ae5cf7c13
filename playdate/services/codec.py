"""
Persisted JSON shapes for the ``children`` and ``dates`` collections.

``children`` is a list of::

    {"id": "...", "name": "...", "phone": "...", "availability": {"2024-11-25-09:00": true}}

where ``phone`` is omitted when absent and only ``true`` values are stored.
``dates`` is a list of contiguous ascending ISO date strings.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Union

import pydantic
from pydantic import BaseModel, Field, TypeAdapter, field_validator

from ..domain.date_window import DateWindow
from ..domain.exceptions import PersistenceError, PlaydateError
from ..domain.models import Participant, SlotKey

CHILDREN_KEY = "children"
DATES_KEY = "dates"
COLLECTIONS = (CHILDREN_KEY, DATES_KEY)


class ParticipantRecord(BaseModel):
    """Wire form of one participant."""
    id: str
    name: str
    phone: Optional[str] = None
    availability: Dict[str, bool] = Field(default_factory=dict)

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, value: Union[str, int]) -> str:
        """Older clients used numeric timestamps as ids."""
        return str(value)

    @classmethod
    def from_participant(cls, participant: Participant) -> "ParticipantRecord":
        return cls(
            id=participant.id,
            name=participant.name,
            phone=participant.phone,
            availability={key.key: True for key in sorted(participant.availability, key=str)},
        )

    def to_participant(self) -> Participant:
        return Participant(
            id=self.id,
            name=self.name,
            phone=self.phone,
            availability={SlotKey.from_key(key) for key, flag in self.availability.items() if flag},
        )


_PARTICIPANTS_ADAPTER = TypeAdapter(List[ParticipantRecord])
_DATES_ADAPTER = TypeAdapter(List[str])


def encode_participants(participants: List[Participant]) -> str:
    records = [ParticipantRecord.from_participant(p) for p in participants]
    return _PARTICIPANTS_ADAPTER.dump_json(records, exclude_none=True).decode("utf-8")


def decode_participants(raw: Optional[str]) -> List[Participant]:
    """
    Decode the ``children`` record; an absent record means no participants.

    Raises:
        PersistenceError: If the payload is not a valid participant list
    """
    if raw is None:
        return []
    try:
        records = _PARTICIPANTS_ADAPTER.validate_json(raw)
        return [record.to_participant() for record in records]
    except (pydantic.ValidationError, PlaydateError) as exc:
        raise PersistenceError(f"Malformed '{CHILDREN_KEY}' record: {exc}") from exc


def encode_dates(window: DateWindow) -> str:
    return _DATES_ADAPTER.dump_json(list(window.dates)).decode("utf-8")


def decode_dates(raw: Optional[str]) -> Optional[DateWindow]:
    """
    Decode the ``dates`` record; None means it was never written.

    Raises:
        PersistenceError: If the payload is not a contiguous date list
    """
    if raw is None:
        return None
    try:
        return DateWindow(_DATES_ADAPTER.validate_json(raw))
    except (pydantic.ValidationError, PlaydateError) as exc:
        raise PersistenceError(f"Malformed '{DATES_KEY}' record: {exc}") from exc
