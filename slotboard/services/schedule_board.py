"""
Application service assembling timeline views and reports.

The service fetches bookings through a booking-source adapter and hands
them to the pure domain components. The source is expressed as a simple
protocol so tests can plug in a stub instead of the real store.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Protocol

from pendulum import Date, DateTime

from ..domain.duration import ApprovedTiming, DurationNormalizer
from ..domain.exceptions import SlotboardError
from ..domain.layout import DAY_METRICS, WEEK_METRICS, BookingLayoutEngine, LayoutMetrics
from ..domain.models import (
    Booking,
    LayoutBlock,
    MonthCell,
    SlotConfig,
    TimeLabel,
    TimeStatus,
    UtilizationReport,
    to_date,
)
from ..domain.navigator import TimelineNavigator, month_grid, week_of
from ..domain.utilization import UtilizationAggregator

logger = logging.getLogger(__name__)


class BookingSourceProtocol(Protocol):
    """Protocol describing the booking store behaviour needed by the service."""

    async def get_bookings(
        self,
        start_date: Optional[Date] = None,
        end_date: Optional[Date] = None,
    ) -> List[Booking]:
        """Return bookings dated within the optional inclusive range."""


@dataclass
class DayView:
    """Everything the day timeline needs for one render pass."""
    date: Date
    bookings: List[Booking]
    blocks: List[LayoutBlock]
    labels: List[TimeLabel]
    timeline_height: float
    now_offset: Optional[float]
    landing_offset: float
    statuses: Dict[str, TimeStatus] = field(default_factory=dict)

    @property
    def remaining(self) -> int:
        """Bookings on this day that are not yet over."""
        return sum(1 for status in self.statuses.values() if status is not TimeStatus.PAST)


@dataclass
class WeekView:
    """Compressed seven-column timeline."""
    days: List[Date]
    columns: Dict[Date, List[LayoutBlock]]
    timeline_height: float
    now_offset: Optional[float]


class ScheduleBoardService:
    """
    Orchestrates booking retrieval and the scheduling core.

    Every call re-reads the source and recomputes from scratch; nothing is
    cached between renders.
    """

    def __init__(
        self,
        booking_source: BookingSourceProtocol,
        slot_config: SlotConfig,
        day_metrics: LayoutMetrics = DAY_METRICS,
        week_metrics: LayoutMetrics = WEEK_METRICS,
    ) -> None:
        self._booking_source = booking_source
        self._slot_config = slot_config
        self._day_engine = BookingLayoutEngine(slot_config, day_metrics)
        self._week_engine = BookingLayoutEngine(slot_config, week_metrics)
        self._day_navigator = TimelineNavigator(slot_config, day_metrics)
        self._week_navigator = TimelineNavigator(slot_config, week_metrics)
        self._aggregator = UtilizationAggregator(slot_config)
        self._normalizer = DurationNormalizer(slot_config.slot_duration)

    @property
    def slot_config(self) -> SlotConfig:
        return self._slot_config

    async def day_view(self, day: Date, now: DateTime) -> DayView:
        """Lay out one day and place the now marker and initial scroll."""
        day = to_date(day)
        bookings = await self._booking_source.get_bookings(start_date=day, end_date=day)
        slot = self._slot_config.slot_duration

        return DayView(
            date=day,
            bookings=bookings,
            blocks=self._day_engine.layout_day(bookings, day),
            labels=self._day_engine.time_labels(),
            timeline_height=self._day_engine.timeline_height(),
            now_offset=self._day_navigator.now_offset(day, now),
            landing_offset=self._day_navigator.landing_offset(day, bookings, now),
            statuses={b.id: b.time_status(now, slot) for b in bookings},
        )

    async def week_view(self, day: Date, now: DateTime) -> WeekView:
        """Lay out the Sunday-anchored week containing ``day``."""
        days = week_of(day)
        bookings = await self._booking_source.get_bookings(start_date=days[0], end_date=days[-1])

        today = to_date(now)
        now_offset = self._week_navigator.now_offset(today, now) if today in days else None

        return WeekView(
            days=days,
            columns=self._week_engine.layout_columns(bookings, days),
            timeline_height=self._week_engine.timeline_height(),
            now_offset=now_offset,
        )

    async def month_view(
        self,
        year: int,
        month: int,
        selected: Optional[Date] = None,
        today: Optional[Date] = None,
    ) -> List[MonthCell]:
        """Month picker cells, flagged with booking presence."""
        cells = month_grid(year, month)
        bookings = await self._booking_source.get_bookings(
            start_date=cells[0].date,
            end_date=cells[-1].date,
        )
        return month_grid(year, month, selected=selected, bookings=bookings, today=today)

    async def utilization(
        self,
        date: Optional[Date] = None,
        start_date: Optional[Date] = None,
        end_date: Optional[Date] = None,
    ) -> UtilizationReport:
        """
        Utilization report for a single date, an inclusive range, or every
        booking when no bounds are given.
        """
        if date is not None:
            date = to_date(date)
            bookings = await self._booking_source.get_bookings(start_date=date, end_date=date)
            return self._aggregator.aggregate(bookings, date=date)

        start_date = to_date(start_date) if start_date is not None else None
        end_date = to_date(end_date) if end_date is not None else None
        bookings = await self._booking_source.get_bookings(
            start_date=start_date,
            end_date=end_date,
        )
        report = self._aggregator.aggregate(bookings)
        logger.debug(
            "Aggregated %d bookings: %d min booked, %d min waste",
            report.total_bookings, report.total_booked_duration, report.total_waste,
        )
        return report

    async def approve(self, booking_id: str) -> ApprovedTiming:
        """
        Preview the grid-exact duration and end time a pending booking gets
        on approval. Nothing is written back.

        Raises:
            SlotboardError: If no pending booking has that id
        """
        bookings = await self._booking_source.get_bookings()
        for booking in bookings:
            if booking.id != booking_id:
                continue
            if not booking.is_pending:
                raise SlotboardError(f"Booking {booking_id} is not pending approval")
            return self._normalizer.approve(
                start_time=booking.start_time,
                raw_duration=booking.service_duration_minutes,
                end_time=booking.end_time,
            )

        raise SlotboardError(f"Booking not found: {booking_id}")
