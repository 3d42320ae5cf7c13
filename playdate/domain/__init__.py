"""
Domain layer - Pure scheduling logic without I/O.
"""

from .aggregation import AggregationEngine, IntensityThresholds
from .date_window import DateWindow
from .exceptions import NotFoundError, PersistenceError, PlaydateError, ValidationError
from .models import (
    MeetingRange,
    Participant,
    SaveStatus,
    SlotAggregate,
    SlotIntensity,
    SlotKey,
    TimeSlot,
)
from .participant_store import ParticipantStore
from .range_detector import RangeDetector
from .session import PlaydateSession
from .time_grid import DEFAULT_TIME_GRID, TimeGrid

__all__ = [
    "AggregationEngine",
    "IntensityThresholds",
    "DateWindow",
    "NotFoundError",
    "PersistenceError",
    "PlaydateError",
    "ValidationError",
    "MeetingRange",
    "Participant",
    "SaveStatus",
    "SlotAggregate",
    "SlotIntensity",
    "SlotKey",
    "TimeSlot",
    "ParticipantStore",
    "RangeDetector",
    "PlaydateSession",
    "DEFAULT_TIME_GRID",
    "TimeGrid",
]
