"""
Geometric layout of bookings on a vertical pixel-per-minute timeline.

This is pure domain logic: it turns bookings into rectangles and knows
nothing about how they are drawn.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence

from pendulum import Date

from .models import Booking, LayoutBlock, SlotConfig, TimeLabel, to_date
from .time_arithmetic import MINUTES_PER_HOUR, round_to_grid, to_minutes, to_time_string

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LayoutMetrics:
    """
    Pixel geometry of one timeline flavour.

    ``padding`` shifts each block down and shortens it by the same amount so
    adjacent bookings keep a visible gap.
    """
    pixels_per_minute: float
    padding: float = 4.0
    min_height: float = 52.0

    @property
    def hour_height(self) -> float:
        return MINUTES_PER_HOUR * self.pixels_per_minute


DAY_PIXELS_PER_MINUTE = 3.2
WEEK_SCALE = 0.4

DAY_METRICS = LayoutMetrics(pixels_per_minute=DAY_PIXELS_PER_MINUTE, padding=4.0, min_height=52.0)
WEEK_METRICS = LayoutMetrics(
    pixels_per_minute=DAY_PIXELS_PER_MINUTE * WEEK_SCALE,
    padding=0.0,
    min_height=24.0,
)


class BookingLayoutEngine:
    """
    Maps bookings onto timeline blocks.

    Algorithm per booking:
    1. Resolve start and end minutes (end derived from the booked duration
       when the booking has none)
    2. An end earlier than the start means the booking crosses midnight;
       it is clipped to the configured day end for this day's layout
    3. Clip the block to the visible working-hours window
    4. top = (start - day start) * ppm + padding
    5. height = max(length * ppm - padding, min height)

    Overlapping bookings are not resolved; their blocks simply overlap.
    """

    def __init__(self, slot_config: SlotConfig, metrics: LayoutMetrics = DAY_METRICS):
        self.slot_config = slot_config
        self.metrics = metrics

    @property
    def day_start_minutes(self) -> int:
        return self.slot_config.working_hours.start_minutes

    @property
    def day_end_minutes(self) -> int:
        return self.slot_config.working_hours.end_minutes

    def offset_for_minutes(self, minutes: float) -> float:
        """Vertical offset of a wall-clock minute, without padding."""
        return (minutes - self.day_start_minutes) * self.metrics.pixels_per_minute

    def timeline_height(self) -> float:
        return (self.day_end_minutes - self.day_start_minutes) * self.metrics.pixels_per_minute

    def effective_end_minutes(self, booking: Booking) -> int:
        """
        End minute used for layout, never past the visible day end.

        A wrapped booking (end before start) runs to the day end. This is a
        display clipping rule; the booking itself is left untouched.
        """
        start = booking.start_minutes
        raw_end = to_minutes(booking.resolved_end_time(self.slot_config.slot_duration))
        if raw_end < start:
            raw_end = self.day_end_minutes
        return min(raw_end, self.day_end_minutes)

    def layout_booking(self, booking: Booking) -> Optional[LayoutBlock]:
        """
        Compute the block for one booking.

        Returns None when the booking lies entirely outside the visible
        working-hours window.
        """
        start = booking.start_minutes
        end = self.effective_end_minutes(booking)
        visible_start = max(start, self.day_start_minutes)

        before_window = start < self.day_start_minutes and end <= self.day_start_minutes
        if visible_start >= self.day_end_minutes or before_window:
            logger.debug(
                "Booking %s (%s) is outside the visible window, skipped",
                booking.id, booking.start_time,
            )
            return None

        metrics = self.metrics
        top = self.offset_for_minutes(visible_start) + metrics.padding
        height = max(
            (end - visible_start) * metrics.pixels_per_minute - metrics.padding,
            metrics.min_height,
        )

        return LayoutBlock(
            booking_id=booking.id,
            date=booking.date,
            top_offset=top,
            height_pixels=height,
            start_minutes=start,
            effective_end_minutes=end,
            wrapped=booking.wraps_midnight(self.slot_config.slot_duration),
            is_pending=booking.is_pending,
        )

    def layout_day(self, bookings: Iterable[Booking], day: Date) -> List[LayoutBlock]:
        """Blocks for all bookings on ``day``, ordered by start time."""
        day = to_date(day)
        blocks = [
            self.layout_booking(booking)
            for booking in sorted(bookings, key=lambda b: b.start_minutes)
            if booking.date == day
        ]
        return [block for block in blocks if block is not None]

    def layout_columns(
        self,
        bookings: Iterable[Booking],
        days: Sequence[Date],
    ) -> Dict[Date, List[LayoutBlock]]:
        """
        One column of blocks per day, in the order of ``days``.

        Used by the week view together with ``WEEK_METRICS``.
        """
        booking_list = list(bookings)
        return {to_date(day): self.layout_day(booking_list, day) for day in days}

    def time_labels(self) -> List[TimeLabel]:
        """
        Ruler labels: every hour boundary (inclusive of the day end) plus
        one label per slot inside each hour.
        """
        hours = self.slot_config.working_hours
        slot = self.slot_config.slot_duration
        labels: List[TimeLabel] = []

        for hour in range(hours.start, hours.end + 1):
            hour_minutes = hour * MINUTES_PER_HOUR
            labels.append(
                TimeLabel(
                    time=to_time_string(hour_minutes),
                    position=self.offset_for_minutes(hour_minutes),
                    kind="hour",
                )
            )
            if hour == hours.end:
                break
            for minute in range(slot, MINUTES_PER_HOUR, slot):
                labels.append(
                    TimeLabel(
                        time=to_time_string(hour_minutes + minute),
                        position=self.offset_for_minutes(hour_minutes + minute),
                        kind="half" if minute == 30 else "quarter",
                    )
                )

        return labels

    def slot_at_offset(self, offset: float) -> str:
        """
        Translate a click position on the timeline into a bookable slot
        start, snapped to the nearest grid line inside the visible window.
        """
        slot = self.slot_config.slot_duration
        raw_minutes = self.day_start_minutes + offset / self.metrics.pixels_per_minute
        snapped = round_to_grid(raw_minutes, slot)
        latest = max(self.day_start_minutes, self.day_end_minutes - slot)
        return to_time_string(min(max(snapped, self.day_start_minutes), latest))
