"""
Tests for the persisted JSON shapes.
"""

import json

import pytest

from playdate.domain.date_window import DateWindow
from playdate.domain.exceptions import PersistenceError
from playdate.domain.models import Participant, SlotKey
from playdate.services.codec import (
    decode_dates,
    decode_participants,
    encode_dates,
    encode_participants,
)


def test_encode_participants_shape():
    """Phone is omitted when absent and availability maps keys to true."""
    participants = [
        Participant(id="1", name="Ann", phone="555-1", availability={SlotKey("2024-11-25", "09:00")}),
        Participant(id="2", name="Bo"),
    ]

    data = json.loads(encode_participants(participants))

    assert data == [
        {"id": "1", "name": "Ann", "phone": "555-1", "availability": {"2024-11-25-09:00": True}},
        {"id": "2", "name": "Bo", "availability": {}},
    ]


def test_decode_participants_from_older_clients():
    """Numeric ids are accepted and false flags are ignored."""
    raw = json.dumps([
        {
            "id": 1700000000000,
            "name": "Ann",
            "availability": {"2024-11-25-09:00": True, "2024-11-25-09:30": False},
        }
    ])

    [ann] = decode_participants(raw)

    assert ann.id == "1700000000000"
    assert ann.phone is None
    assert ann.availability == {SlotKey("2024-11-25", "09:00")}


def test_decode_absent_records():
    assert decode_participants(None) == []
    assert decode_dates(None) is None


@pytest.mark.parametrize(
    "raw",
    [
        "not json",
        json.dumps({"id": "1"}),
        json.dumps([{"id": "1", "name": ""}]),
        json.dumps([{"id": "1", "name": "Ann", "availability": {"bad": True}}]),
    ],
)
def test_decode_participants_malformed(raw):
    with pytest.raises(PersistenceError, match="children"):
        decode_participants(raw)


def test_dates_round_trip():
    window = DateWindow.from_start("2024-11-25", 3)

    raw = encode_dates(window)

    assert json.loads(raw) == ["2024-11-25", "2024-11-26", "2024-11-27"]
    assert decode_dates(raw) == window


@pytest.mark.parametrize("raw", ["[]", json.dumps(["2024-11-25", "2024-11-30"]), "{}"])
def test_decode_dates_malformed(raw):
    with pytest.raises(PersistenceError, match="dates"):
        decode_dates(raw)
