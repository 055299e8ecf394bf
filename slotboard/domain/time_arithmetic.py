"""
Conversions between wall-clock "HH:MM" strings and minutes since midnight.

All times are naive local wall-clock values. Nothing here knows about
dates or time zones.
"""

import math
import re
from typing import Union

from .exceptions import InvalidDurationError, InvalidTimeError

MINUTES_PER_HOUR = 60
MINUTES_PER_DAY = 24 * MINUTES_PER_HOUR

DEFAULT_DURATION_MINUTES = 60

_TIME_PATTERN = re.compile(r"^\s*(\d{1,2}):(\d{2})\s*$")
_NUMBER_PATTERN = re.compile(r"\d+")


def to_minutes(hhmm: str) -> int:
    """
    Parse an "HH:MM" string into minutes since midnight.

    "24:00" is accepted so that a day-end boundary can be expressed.

    Raises:
        InvalidTimeError: If the string is not a valid wall-clock time
    """
    if not isinstance(hhmm, str):
        raise InvalidTimeError(f"Expected an 'HH:MM' string, got {hhmm!r}")

    match = _TIME_PATTERN.match(hhmm)
    if not match:
        raise InvalidTimeError(f"Malformed time string: {hhmm!r}")

    hour, minute = int(match.group(1)), int(match.group(2))
    if minute >= MINUTES_PER_HOUR or hour > 24 or (hour == 24 and minute):
        raise InvalidTimeError(f"Time out of range: {hhmm!r}")

    return hour * MINUTES_PER_HOUR + minute


def to_time_string(minutes: int) -> str:
    """
    Format minutes since midnight as "HH:MM".

    No modulo is applied; keeping the value displayable is up to the caller.
    """
    minutes = int(minutes)
    return f"{minutes // MINUTES_PER_HOUR:02d}:{minutes % MINUTES_PER_HOUR:02d}"


def round_to_grid(minutes: float, slot_size: int) -> int:
    """Round to the nearest multiple of ``slot_size`` (half rounds up)."""
    if slot_size <= 0:
        raise InvalidDurationError(f"Slot size must be positive, got {slot_size}")
    return int(math.floor(minutes / slot_size + 0.5)) * slot_size


def add_minutes(hhmm: str, minutes: int) -> str:
    """Add minutes to a wall-clock time, wrapping past midnight like a clock."""
    total = (to_minutes(hhmm) + int(minutes)) % MINUTES_PER_DAY
    return to_time_string(total)


def parse_duration(
    value: Union[int, float, str, None],
    default: int = DEFAULT_DURATION_MINUTES,
) -> int:
    """
    Coerce a collaborator-supplied duration into whole minutes.

    Numbers pass through, free text such as "60 min" yields its first
    number, and anything without a number falls back to ``default``.
    """
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        return int(value) if value else default

    match = _NUMBER_PATTERN.search(str(value))
    if not match:
        return default
    return int(match.group(0)) or default
