"""
Tests for the date window.
"""

import pendulum
import pytest

from playdate.domain.date_window import DateWindow, parse_date
from playdate.domain.exceptions import ValidationError


class TestDateWindow:
    """Tests for DateWindow."""

    def test_from_range_is_contiguous(self):
        """Five consecutive dates, each one day after the previous."""
        window = DateWindow.from_range("2024-11-25", "2024-11-29")

        assert len(window) == 5
        parsed = [parse_date(d) for d in window]
        for earlier, later in zip(parsed, parsed[1:]):
            assert later == earlier.add(days=1)

    def test_from_range_crosses_month_end(self):
        window = DateWindow.from_range("2024-11-29", "2024-12-02")

        assert window.dates == ("2024-11-29", "2024-11-30", "2024-12-01", "2024-12-02")

    def test_single_day_window(self):
        window = DateWindow.from_range("2024-11-25", "2024-11-25")

        assert window.dates == ("2024-11-25",)
        assert window.start == window.end

    def test_start_after_end_raises(self):
        with pytest.raises(ValidationError, match="must not be after"):
            DateWindow.from_range("2024-11-29", "2024-11-25")

    def test_gaps_are_rejected(self):
        with pytest.raises(ValidationError, match="contiguous"):
            DateWindow(["2024-11-25", "2024-11-27"])

    def test_descending_dates_are_rejected(self):
        with pytest.raises(ValidationError):
            DateWindow(["2024-11-26", "2024-11-25"])

    def test_invalid_date_string(self):
        with pytest.raises(ValidationError, match="Invalid date"):
            DateWindow.from_range("25.11.2024", "2024-11-29")

    def test_default_is_a_week_from_today(self):
        """Default window: today and the following six days."""
        window = DateWindow.default(today=pendulum.date(2024, 11, 25))

        assert len(window) == 7
        assert window.start == "2024-11-25"
        assert window.end == "2024-12-01"

    def test_from_start(self):
        window = DateWindow.from_start("2024-11-25", 3)

        assert window.dates == ("2024-11-25", "2024-11-26", "2024-11-27")
        assert "2024-11-26" in window
        assert "2024-11-28" not in window

    def test_equality(self):
        assert DateWindow.from_start("2024-11-25", 2) == DateWindow(["2024-11-25", "2024-11-26"])
