"""
Tests for wall-clock time arithmetic.
"""

import pytest

from slotboard.domain.exceptions import InvalidDurationError, InvalidTimeError
from slotboard.domain.time_arithmetic import (
    add_minutes,
    parse_duration,
    round_to_grid,
    to_minutes,
    to_time_string,
)


class TestToMinutes:
    """Tests for parsing "HH:MM" strings."""

    def test_parses_valid_times(self):
        """Test hour and minute are combined into minutes since midnight."""
        assert to_minutes("00:00") == 0
        assert to_minutes("09:30") == 570
        assert to_minutes("9:05") == 545
        assert to_minutes("23:59") == 1439

    def test_accepts_day_end(self):
        """Test that 24:00 can express the end of the day."""
        assert to_minutes("24:00") == 1440

    @pytest.mark.parametrize("value", ["", "9h30", "12:60", "25:00", "24:15", "ab:cd", None])
    def test_malformed_input_raises(self, value):
        """Test that malformed strings fail loudly instead of yielding garbage."""
        with pytest.raises(InvalidTimeError):
            to_minutes(value)

    def test_error_is_a_value_error(self):
        """Callers catching ValueError also catch malformed times."""
        with pytest.raises(ValueError, match="Malformed time string"):
            to_minutes("noon")


class TestToTimeString:
    """Tests for formatting minutes as "HH:MM"."""

    def test_zero_pads(self):
        assert to_time_string(0) == "00:00"
        assert to_time_string(545) == "09:05"
        assert to_time_string(1439) == "23:59"

    def test_round_trip_over_whole_day(self):
        """Test to_minutes(to_time_string(m)) == m for every minute of the day."""
        for minute in range(0, 1440):
            assert to_minutes(to_time_string(minute)) == minute


class TestRoundToGrid:
    """Tests for snapping minutes to the slot grid."""

    def test_rounds_to_nearest_slot(self):
        assert round_to_grid(7, 15) == 0
        assert round_to_grid(8, 15) == 15
        assert round_to_grid(548, 15) == 555

    def test_half_rounds_up(self):
        assert round_to_grid(7.5, 15) == 15
        assert round_to_grid(45, 30) == 60

    def test_is_idempotent(self):
        """Test rounding an already rounded value changes nothing."""
        for slot in (5, 10, 15, 30, 60):
            for minutes in range(0, 300, 7):
                once = round_to_grid(minutes, slot)
                assert round_to_grid(once, slot) == once

    def test_rejects_non_positive_slot(self):
        with pytest.raises(InvalidDurationError):
            round_to_grid(30, 0)


class TestAddMinutes:
    """Tests for wall-clock addition."""

    def test_adds_within_day(self):
        assert add_minutes("09:00", 60) == "10:00"
        assert add_minutes("09:15", 50) == "10:05"

    def test_wraps_past_midnight(self):
        assert add_minutes("23:30", 45) == "00:15"


class TestParseDuration:
    """Tests for coercing collaborator durations."""

    def test_numbers_pass_through(self):
        assert parse_duration(50) == 50
        assert parse_duration(45.0) == 45

    def test_extracts_number_from_text(self):
        assert parse_duration("60 min") == 60
        assert parse_duration("90 minutes") == 90

    def test_falls_back_to_default(self):
        assert parse_duration(None) == 60
        assert parse_duration("n/a") == 60
        assert parse_duration(0) == 60
        assert parse_duration("", default=30) == 30
