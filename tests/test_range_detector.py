"""
Tests for the range detector.
"""

from playdate.domain.date_window import DateWindow
from playdate.domain.session import PlaydateSession

DAY = "2024-11-25"


def _mark(session, participant, *times):
    for time in times:
        session.participants.toggle_slot(participant.id, DAY, time)


def _session():
    return PlaydateSession(window=DateWindow.from_start(DAY, 7))


class TestRangeDetector:
    """Tests for RangeDetector."""

    def test_expansion_stops_when_anchor_set_shrinks(self):
        """
        A and B are free 10:00-11:00, C only 10:00-10:30.

        At 10:00 the others are {B, C}; at 10:30 only {B}, so the range is
        the single clicked slot.
        """
        session = _session()
        store = session.participants
        a = store.add("A")
        b = store.add("B")
        c = store.add("C")
        _mark(session, a, "10:00", "10:30")
        _mark(session, b, "10:00", "10:30")
        _mark(session, c, "10:00")
        store.select(a.id)

        proposal = session.ranges.detect(DAY, "10:00")

        assert proposal is not None
        assert proposal.start_time == proposal.end_time == "10:00"
        assert proposal.start_display == "10:00 AM"
        assert proposal.end_display == "10:30 AM"
        assert proposal.slot_count == 1
        assert [p.name for p in proposal.participants] == ["B", "C"]

    def test_expands_both_directions(self):
        session = _session()
        store = session.participants
        a = store.add("A")
        b = store.add("B")
        _mark(session, a, "09:30", "10:00", "10:30", "11:00", "12:00")
        _mark(session, b, "09:00", "09:30", "10:00", "10:30", "11:00", "11:30", "12:00")

        proposal = session.ranges.detect(DAY, "10:30", participant_id=a.id)

        assert (proposal.start_time, proposal.end_time) == ("09:30", "11:00")
        assert proposal.start_display == "9:30 AM"
        assert proposal.end_display == "11:30 AM"
        assert proposal.slot_count == 4

    def test_superset_still_extends(self):
        """More people at a neighbouring slot do not stop the expansion."""
        session = _session()
        store = session.participants
        a = store.add("A")
        b = store.add("B")
        c = store.add("C")
        _mark(session, a, "14:00", "14:30")
        _mark(session, b, "14:00", "14:30")
        _mark(session, c, "14:30")

        proposal = session.ranges.detect(DAY, "14:00", participant_id=a.id)

        assert (proposal.start_time, proposal.end_time) == ("14:00", "14:30")
        assert [p.name for p in proposal.participants] == ["B"]

    def test_runs_to_end_of_grid(self):
        session = _session()
        store = session.participants
        a = store.add("A", "555-1")
        b = store.add("B", "555-2")
        _mark(session, a, "19:00", "19:30", "20:00")
        _mark(session, b, "19:00", "19:30", "20:00")

        proposal = session.ranges.detect(DAY, "19:30", participant_id=a.id)

        assert (proposal.start_time, proposal.end_time) == ("19:00", "20:00")
        assert proposal.end_display == "8:30 PM"
        assert proposal.phones == ("555-2",)

    def test_fewer_than_two_available(self):
        session = _session()
        a = session.participants.add("A")
        session.participants.add("B")
        _mark(session, a, "10:00")

        assert session.ranges.detect(DAY, "10:00", participant_id=a.id) is None

    def test_current_participant_not_available(self):
        session = _session()
        store = session.participants
        a = store.add("A")
        b = store.add("B")
        c = store.add("C")
        _mark(session, b, "10:00")
        _mark(session, c, "10:00")

        assert session.ranges.detect(DAY, "10:00", participant_id=a.id) is None

    def test_no_current_participant(self):
        session = _session()
        a = session.participants.add("A")
        b = session.participants.add("B")
        _mark(session, a, "10:00")
        _mark(session, b, "10:00")
        session.participants.clear_selection()

        assert session.ranges.detect(DAY, "10:00") is None
        assert session.ranges.detect(DAY, "10:00", participant_id="missing") is None

    def test_time_outside_grid(self):
        session = _session()
        a = session.participants.add("A")

        assert session.ranges.detect(DAY, "07:00", participant_id=a.id) is None

    def test_does_not_mutate_state(self):
        session = _session()
        a = session.participants.add("A")
        b = session.participants.add("B")
        _mark(session, a, "10:00")
        _mark(session, b, "10:00")
        before = {p.id: set(p.availability) for p in session.participants}

        session.ranges.detect(DAY, "10:00", participant_id=a.id)

        assert {p.id: set(p.availability) for p in session.participants} == before
