"""
The contiguous span of calendar dates currently displayed.
"""

from __future__ import annotations

from typing import Iterator, Optional, Sequence, Tuple

import pendulum
from pendulum import Date

from .exceptions import ValidationError

DATE_FORMAT = "YYYY-MM-DD"
DEFAULT_WINDOW_DAYS = 7


def parse_date(value: str) -> Date:
    """Parse an ISO calendar date, raising ValidationError on bad input."""
    try:
        return pendulum.from_format(value, DATE_FORMAT).date()
    except (ValueError, TypeError) as exc:
        raise ValidationError(f"Invalid date {value!r}, expected YYYY-MM-DD") from exc


class DateWindow:
    """
    Ordered, contiguous, ascending sequence of ISO date strings.

    A window is immutable; changing what is displayed means building a new
    window and replacing the old one.
    """

    def __init__(self, dates: Sequence[str]):
        self._dates: Tuple[str, ...] = tuple(dates)
        self._validate()

    def _validate(self) -> None:
        if not self._dates:
            raise ValidationError("Date window must contain at least one date")

        previous = parse_date(self._dates[0])
        for value in self._dates[1:]:
            current = parse_date(value)
            if current != previous.add(days=1):
                raise ValidationError(
                    f"Date window must be contiguous and ascending: {value} follows {previous}"
                )
            previous = current

    @classmethod
    def from_range(cls, start: str, end: str) -> "DateWindow":
        """Every date from ``start`` to ``end`` inclusive."""
        start_date = parse_date(start)
        end_date = parse_date(end)
        if start_date > end_date:
            raise ValidationError(f"Start date {start} must not be after end date {end}")

        dates = []
        current = start_date
        while current <= end_date:
            dates.append(current.to_date_string())
            current = current.add(days=1)
        return cls(dates)

    @classmethod
    def from_start(cls, start: str, days: int) -> "DateWindow":
        if days < 1:
            raise ValidationError(f"Window length must be positive, got {days}")
        end = parse_date(start).add(days=days - 1)
        return cls.from_range(start, end.to_date_string())

    @classmethod
    def default(
        cls,
        today: Optional[Date] = None,
        days: int = DEFAULT_WINDOW_DAYS,
        timezone: str = "local",
    ) -> "DateWindow":
        """Today and the following ``days - 1`` days."""
        today = today or pendulum.today(tz=timezone).date()
        return cls.from_start(today.to_date_string(), days)

    @property
    def dates(self) -> Tuple[str, ...]:
        return self._dates

    @property
    def start(self) -> str:
        return self._dates[0]

    @property
    def end(self) -> str:
        return self._dates[-1]

    def __contains__(self, date: object) -> bool:
        return date in self._dates

    def __iter__(self) -> Iterator[str]:
        return iter(self._dates)

    def __len__(self) -> int:
        return len(self._dates)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DateWindow):
            return NotImplemented
        return self._dates == other._dates

    def __hash__(self) -> int:
        return hash(self._dates)

    def __repr__(self) -> str:
        return f"DateWindow({self.start}..{self.end}, {len(self)} days)"


