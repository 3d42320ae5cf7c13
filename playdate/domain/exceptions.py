"""
Domain-specific exception hierarchy for the play date scheduler.
"""


class PlaydateError(Exception):
    """Base class for all application-level errors."""


class ValidationError(PlaydateError, ValueError):
    """Raised when a required field is empty or a value is malformed."""


class NotFoundError(PlaydateError, LookupError):
    """Raised when an operation references a participant that does not exist."""


class PersistenceError(PlaydateError):
    """Raised when the remote store cannot be read or written."""
