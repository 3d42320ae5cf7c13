"""
In-memory participant records and the currently selected participant.
"""

from __future__ import annotations

import uuid
from typing import Dict, Iterable, Iterator, List, Optional

from .exceptions import NotFoundError, ValidationError
from .models import Participant, SlotKey
from .time_grid import DEFAULT_TIME_GRID, TimeGrid


class ParticipantStore:
    """
    Ordered mapping of participant id to participant.

    All availability changes go through ``toggle_slot`` and
    ``toggle_all_slots_for_date``. Iteration follows insertion order.
    """

    def __init__(self, grid: TimeGrid = DEFAULT_TIME_GRID, require_phone: bool = False):
        self.grid = grid
        self.require_phone = require_phone
        self._participants: Dict[str, Participant] = {}
        self._selected_id: Optional[str] = None

    def _validate(self, name: str, phone: Optional[str]) -> None:
        if not (name or "").strip():
            raise ValidationError("Name is required")
        if self.require_phone and not (phone or "").strip():
            raise ValidationError("Phone number is required")

    def _new_id(self) -> str:
        return uuid.uuid4().hex

    def add(self, name: str, phone: Optional[str] = None) -> Participant:
        """
        Create a participant and select it.

        Raises:
            ValidationError: If name (or phone, when required) is empty
        """
        self._validate(name, phone)

        participant = Participant(id=self._new_id(), name=name, phone=phone)
        self._participants[participant.id] = participant
        self._selected_id = participant.id
        return participant

    def update(self, participant_id: str, name: str, phone: Optional[str] = None) -> Participant:
        """
        Rename a participant and replace its phone number.

        Raises:
            NotFoundError: If the id is unknown
            ValidationError: If name (or phone, when required) is empty
        """
        participant = self.get(participant_id)
        self._validate(name, phone)

        participant.name = name.strip()
        participant.phone = (phone or "").strip() or None
        return participant

    def remove(self, participant_id: str) -> None:
        """Delete a participant; unknown ids are ignored."""
        if self._participants.pop(participant_id, None) is None:
            return
        if self._selected_id == participant_id:
            self._selected_id = None

    def toggle_slot(self, participant_id: str, date: str, time: str) -> bool:
        """
        Flip one slot for a participant.

        Returns:
            True if the participant is now available in that slot
        """
        participant = self.get(participant_id)
        key = SlotKey(date, time)

        if key in participant.availability:
            participant.availability.discard(key)
            return False

        participant.availability.add(key)
        return True

    def toggle_all_slots_for_date(self, participant_id: str, date: str) -> bool:
        """
        Clear the whole day if every grid slot is set, otherwise fill it.

        The "all selected" decision is taken once before mutating, so a
        partially filled day always fills completely.

        Returns:
            True if the day is now fully available
        """
        participant = self.get(participant_id)
        day_keys = [SlotKey(date, slot.key) for slot in self.grid.generate()]
        all_selected = all(key in participant.availability for key in day_keys)

        if all_selected:
            participant.availability.difference_update(day_keys)
        else:
            participant.availability.update(day_keys)

        return not all_selected

    def get(self, participant_id: str) -> Participant:
        try:
            return self._participants[participant_id]
        except KeyError:
            raise NotFoundError(f"Unknown participant id: {participant_id}") from None

    def resolve(self, identifier: str) -> Participant:
        """
        Find a participant by id, or by name (case-insensitive).

        Raises:
            NotFoundError: If nothing matches
        """
        if identifier in self._participants:
            return self._participants[identifier]

        wanted = identifier.strip().lower()
        for participant in self._participants.values():
            if participant.name.lower() == wanted:
                return participant

        raise NotFoundError(f"Unknown participant: '{identifier}'")

    def is_available(self, participant_id: str, date: str, time: str) -> bool:
        return self.get(participant_id).is_available(date, time)

    def select(self, participant_id: str) -> Participant:
        participant = self.get(participant_id)
        self._selected_id = participant.id
        return participant

    def clear_selection(self) -> None:
        self._selected_id = None

    @property
    def selected(self) -> Optional[Participant]:
        if self._selected_id is None:
            return None
        return self._participants.get(self._selected_id)

    def replace_all(self, participants: Iterable[Participant]) -> None:
        """
        Swap in a complete set of records, e.g. after a reload.

        The selection is kept only if the selected id still exists.
        """
        self._participants = {p.id: p for p in participants}
        if self._selected_id not in self._participants:
            self._selected_id = None

    def clear(self) -> None:
        self._participants = {}
        self._selected_id = None

    def all(self) -> List[Participant]:
        return list(self._participants.values())

    def __iter__(self) -> Iterator[Participant]:
        return iter(list(self._participants.values()))

    def __len__(self) -> int:
        return len(self._participants)

    def __contains__(self, participant_id: object) -> bool:
        return participant_id in self._participants
