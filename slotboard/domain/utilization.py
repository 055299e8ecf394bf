"""
Capacity reporting: how much grid time bookings consume versus what the
services actually need.
"""

from typing import Iterable, Optional

from pendulum import Date

from .duration import DurationNormalizer
from .models import Booking, SlotConfig, UtilizationRecord, UtilizationReport, to_date


class UtilizationAggregator:
    """
    Sums service vs. booked (grid-snapped) duration over a set of bookings.

    Read-only: bookings are never modified and nothing is cached between
    calls.
    """

    def __init__(self, slot_config: SlotConfig):
        self.slot_config = slot_config
        self.normalizer = DurationNormalizer(slot_config.slot_duration)

    def record_for(self, booking: Booking) -> UtilizationRecord:
        normalized = self.normalizer.normalize(booking.service_duration_minutes)
        return UtilizationRecord(
            date=booking.date_key,
            booking_id=booking.id,
            service_duration_minutes=normalized.service_duration_minutes,
            booked_duration_minutes=normalized.booked_duration_minutes,
            slots_used=normalized.slots_needed,
            kind="pending" if booking.is_pending else "session",
            start_time=booking.start_time,
            end_time=booking.resolved_end_time(self.slot_config.slot_duration),
            service=booking.service,
        )

    def aggregate(
        self,
        bookings: Iterable[Booking],
        date: Optional[Date] = None,
    ) -> UtilizationReport:
        """
        Build a report over all bookings, or only those on ``date``.

        Percentages fall back to 0 when there is nothing to aggregate.
        """
        date = to_date(date) if date is not None else None
        report = UtilizationReport(slot_duration=self.slot_config.slot_duration)

        for booking in bookings:
            if date is not None and booking.date != date:
                continue

            record = self.record_for(booking)
            report.total_service_duration += record.service_duration_minutes
            report.total_booked_duration += record.booked_duration_minutes
            report.total_waste += record.waste_minutes
            report.records.append(record)
            report.bookings_by_date.setdefault(record.date, []).append(record)

        return report

    def aggregate_range(
        self,
        bookings: Iterable[Booking],
        start: Date,
        end: Date,
    ) -> UtilizationReport:
        """Report over bookings dated within ``start``..``end`` inclusive."""
        start, end = to_date(start), to_date(end)
        if end < start:
            raise ValueError(f"Range start {start} must not be after end {end}")
        return self.aggregate(b for b in bookings if start <= b.date <= end)
