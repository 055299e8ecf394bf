"""
Domain models for the slot grid, bookings and derived layout/report data.
"""

from dataclasses import dataclass, field
from datetime import date as date_type, datetime
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

import pendulum
from pendulum import Date, DateTime

from .duration import booked_duration
from .exceptions import InvalidDurationError, InvalidTimeError
from .time_arithmetic import (
    MINUTES_PER_DAY,
    MINUTES_PER_HOUR,
    add_minutes,
    parse_duration,
    to_minutes,
)

SOON_WINDOW_MINUTES = 120


@dataclass(frozen=True)
class WorkingHours:
    """
    Visible window of the timeline, in whole hours.

    Invariant: 0 <= start < end <= 24.
    """
    start: int = 0
    end: int = 24

    def __post_init__(self):
        if not (0 <= self.start <= 24 and 0 <= self.end <= 24):
            raise ValueError(f"Hours must be between 0 and 24, got {self.start}-{self.end}")
        if self.start >= self.end:
            raise ValueError(f"Start hour {self.start} must be before end hour {self.end}")

    @property
    def start_minutes(self) -> int:
        return self.start * MINUTES_PER_HOUR

    @property
    def end_minutes(self) -> int:
        return self.end * MINUTES_PER_HOUR


@dataclass(frozen=True)
class SlotConfig:
    """
    Read-only snapshot of the business's grid settings.

    ``slot_duration`` is assumed to divide 60 so slots line up with hours.
    """
    slot_duration: int = 15
    working_hours: WorkingHours = field(default_factory=WorkingHours)

    def __post_init__(self):
        if self.slot_duration <= 0:
            raise InvalidDurationError(
                f"Slot duration must be positive, got {self.slot_duration}"
            )


class TimeStatus(str, Enum):
    """Where a booking sits relative to the current wall-clock time."""
    PAST = "past"
    NOW = "now"
    SOON = "soon"
    UPCOMING = "upcoming"


def to_date(value: Any) -> Date:
    """Coerce a "YYYY-MM-DD" string, date or datetime to a pendulum Date."""
    if isinstance(value, datetime):
        return pendulum.date(value.year, value.month, value.day)
    if isinstance(value, Date):
        return value
    if isinstance(value, date_type):
        return pendulum.date(value.year, value.month, value.day)
    try:
        return pendulum.from_format(str(value), "YYYY-MM-DD").date()
    except ValueError as exc:
        raise ValueError(f"Invalid calendar date: {value!r}") from exc


@dataclass(frozen=True)
class Booking:
    """
    A confirmed session or a pending request placed on the grid.

    ``end_time`` is optional; when absent it is derived from the start time
    plus the grid-aligned booked duration.
    """
    id: str
    date: Date
    start_time: str
    service_duration_minutes: int
    end_time: Optional[str] = None
    is_pending: bool = False
    service: str = "N/A"

    def __post_init__(self):
        object.__setattr__(self, "date", to_date(self.date))
        if self.service_duration_minutes <= 0:
            raise InvalidDurationError(
                f"Booking {self.id}: duration must be positive, "
                f"got {self.service_duration_minutes}"
            )
        to_minutes(self.start_time)
        if self.end_time is not None:
            to_minutes(self.end_time)

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Booking":
        """
        Build a booking from a collaborator record.

        Accepts the keys the booking store uses: ``time`` or ``startTime``,
        ``endTime``, ``duration`` (number or text like "60 min"), and either
        ``isPending`` or ``status == "pending"``.
        """
        try:
            start_time = record.get("startTime") or record["time"]
            booking_id = str(record["id"])
            booking_date = record["date"]
        except KeyError as exc:
            raise ValueError(f"Booking record is missing field {exc}") from exc

        is_pending = record.get("isPending")
        if not isinstance(is_pending, bool):
            is_pending = record.get("status") == "pending"

        return cls(
            id=booking_id,
            date=booking_date,
            start_time=start_time,
            end_time=record.get("endTime") or None,
            service_duration_minutes=parse_duration(record.get("duration")),
            is_pending=bool(is_pending),
            service=record.get("service") or "N/A",
        )

    @property
    def date_key(self) -> str:
        return self.date.to_date_string()

    @property
    def start_minutes(self) -> int:
        return to_minutes(self.start_time)

    def resolved_end_time(self, slot_size: int) -> str:
        """The stored end time, or start + booked duration when missing."""
        if self.end_time is not None:
            return self.end_time
        return add_minutes(
            self.start_time,
            booked_duration(self.service_duration_minutes, slot_size),
        )

    def wraps_midnight(self, slot_size: int) -> bool:
        return to_minutes(self.resolved_end_time(slot_size)) < self.start_minutes

    def time_status(self, now: DateTime, slot_size: int = 15) -> TimeStatus:
        """
        Classify the booking against ``now``.

        A booking that wraps past midnight counts as running until the end
        of its own day.
        """
        today = to_date(now)
        if self.date < today:
            return TimeStatus.PAST
        if self.date > today:
            return TimeStatus.UPCOMING

        now_minutes = now.hour * MINUTES_PER_HOUR + now.minute
        start = self.start_minutes
        end = to_minutes(self.resolved_end_time(slot_size))
        if end < start:
            end = MINUTES_PER_DAY

        if start <= now_minutes < end:
            return TimeStatus.NOW
        if now_minutes >= end:
            return TimeStatus.PAST
        if start - now_minutes <= SOON_WINDOW_MINUTES:
            return TimeStatus.SOON
        return TimeStatus.UPCOMING

    def is_past(self, now: DateTime, slot_size: int = 15) -> bool:
        return self.time_status(now, slot_size) is TimeStatus.PAST


@dataclass(frozen=True)
class LayoutBlock:
    """A booking's rectangle on a vertical pixel timeline."""
    booking_id: str
    date: Date
    top_offset: float
    height_pixels: float
    start_minutes: int
    effective_end_minutes: int
    wrapped: bool = False
    is_pending: bool = False

    # Blocks shorter than this render the condensed card.
    COMPACT_HEIGHT = 60

    @property
    def is_compact(self) -> bool:
        return self.height_pixels < self.COMPACT_HEIGHT


@dataclass(frozen=True)
class TimeLabel:
    """A gridline label on the timeline ruler."""
    time: str
    position: float
    kind: str  # "hour", "half" or "quarter"


@dataclass(frozen=True)
class MonthCell:
    """One cell of the 6x7 month picker."""
    date: Date
    in_month: bool
    is_today: bool
    is_selected: bool
    has_bookings: bool

    @property
    def day(self) -> int:
        return self.date.day


@dataclass(frozen=True)
class UtilizationRecord:
    """Grid consumption of a single booking."""
    date: str
    booking_id: str
    service_duration_minutes: int
    booked_duration_minutes: int
    slots_used: int
    kind: str = "session"
    start_time: str = ""
    end_time: str = ""
    service: str = "N/A"

    @property
    def waste_minutes(self) -> int:
        return self.booked_duration_minutes - self.service_duration_minutes


@dataclass
class UtilizationReport:
    """Totals and per-date grouping of utilization records."""
    slot_duration: int
    total_service_duration: int = 0
    total_booked_duration: int = 0
    total_waste: int = 0
    records: List[UtilizationRecord] = field(default_factory=list)
    bookings_by_date: Dict[str, List[UtilizationRecord]] = field(default_factory=dict)

    @property
    def total_bookings(self) -> int:
        return len(self.records)

    @property
    def waste_percentage(self) -> float:
        if self.total_booked_duration <= 0:
            return 0.0
        return self.total_waste / self.total_booked_duration * 100

    @property
    def average_waste_per_booking(self) -> float:
        if not self.records:
            return 0.0
        return self.total_waste / len(self.records)
