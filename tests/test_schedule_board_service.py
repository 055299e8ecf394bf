"""
Tests for the ScheduleBoardService orchestration layer.
"""

import asyncio
from typing import Dict, List

import pendulum
import pytest

from slotboard.domain.exceptions import SlotboardError
from slotboard.domain.models import Booking, SlotConfig, TimeStatus, WorkingHours
from slotboard.services.schedule_board import ScheduleBoardService

DAY = pendulum.date(2024, 6, 12)
NOW = pendulum.datetime(2024, 6, 12, 10, 0)


class StubBookingSource:
    """Minimal stub matching BookingSourceProtocol."""

    def __init__(self, bookings: List[Booking]):
        self._bookings = bookings
        self.calls: List[Dict[str, str]] = []

    async def get_bookings(self, start_date=None, end_date=None):
        self.calls.append(
            {
                "start": start_date.to_date_string() if start_date else None,
                "end": end_date.to_date_string() if end_date else None,
            }
        )
        return [
            b for b in self._bookings
            if (start_date is None or b.date >= start_date)
            and (end_date is None or b.date <= end_date)
        ]


def _bookings() -> List[Booking]:
    return [
        Booking(id="a", date=DAY, start_time="09:00", end_time="09:50", service_duration_minutes=50),
        Booking(id="b", date=DAY, start_time="23:30", end_time="00:15", service_duration_minutes=45),
        Booking(id="c", date=DAY.add(days=1), start_time="10:00", service_duration_minutes=50, is_pending=True),
        Booking(id="d", date=DAY.add(days=7), start_time="08:00", service_duration_minutes=30),
    ]


def _build_service(bookings=None, slot_config=None):
    source = StubBookingSource(_bookings() if bookings is None else bookings)
    service = ScheduleBoardService(booking_source=source, slot_config=slot_config or SlotConfig())
    return service, source


def test_day_view_lays_out_requested_day():
    """Only the requested day is fetched and laid out."""
    service, source = _build_service()

    view = asyncio.run(service.day_view(DAY, NOW))

    assert source.calls == [{"start": "2024-06-12", "end": "2024-06-12"}]
    assert [block.booking_id for block in view.blocks] == ["a", "b"]
    assert view.blocks[0].top_offset == pytest.approx(540 * 3.2 + 4)
    assert view.blocks[1].effective_end_minutes == 1440
    assert view.now_offset == pytest.approx(600 * 3.2)
    assert view.landing_offset == pytest.approx(600 * 3.2 - 100)
    assert view.statuses == {"a": TimeStatus.PAST, "b": TimeStatus.UPCOMING}
    assert view.remaining == 1
    assert view.labels[0].time == "00:00"


def test_day_view_on_other_day_has_no_now_marker():
    service, _ = _build_service()

    view = asyncio.run(service.day_view(DAY.add(days=1), NOW))

    assert view.now_offset is None
    assert view.landing_offset == pytest.approx(600 * 3.2 - 100)


def test_week_view_fetches_whole_week():
    service, source = _build_service()

    view = asyncio.run(service.week_view(DAY, NOW))

    assert source.calls == [{"start": "2024-06-09", "end": "2024-06-15"}]
    assert len(view.days) == 7
    assert [b.booking_id for b in view.columns[DAY]] == ["a", "b"]
    assert [b.booking_id for b in view.columns[DAY.add(days=1)]] == ["c"]
    assert view.timeline_height == pytest.approx(1440 * 3.2 * 0.4)
    assert view.now_offset == pytest.approx(600 * 3.2 * 0.4)


def test_week_view_without_today_has_no_now_marker():
    service, _ = _build_service()

    view = asyncio.run(service.week_view(DAY.add(days=7), NOW))

    assert view.now_offset is None
    assert [b.booking_id for b in view.columns[DAY.add(days=7)]] == ["d"]


def test_month_view_marks_booked_days():
    service, _ = _build_service()

    cells = asyncio.run(service.month_view(2024, 6, selected=DAY, today=DAY))
    by_date = {c.date: c for c in cells}

    assert by_date[DAY].has_bookings
    assert by_date[DAY].is_today
    assert by_date[DAY].is_selected
    assert not by_date[DAY.add(days=2)].has_bookings


def test_utilization_for_single_date():
    service, _ = _build_service()

    report = asyncio.run(service.utilization(date=DAY))

    assert report.total_bookings == 2
    assert report.total_waste == 10
    assert list(report.bookings_by_date) == ["2024-06-12"]


def test_utilization_for_all_bookings():
    service, source = _build_service()

    report = asyncio.run(service.utilization())

    assert source.calls == [{"start": None, "end": None}]
    assert report.total_bookings == 4
    assert report.total_service_duration == 175
    assert report.total_booked_duration == 195


def test_approve_pending_booking():
    service, _ = _build_service()

    timing = asyncio.run(service.approve("c"))

    assert timing.duration_minutes == 45
    assert timing.end_time == "10:45"


def test_approve_rejects_confirmed_booking():
    service, _ = _build_service()

    with pytest.raises(SlotboardError, match="not pending"):
        asyncio.run(service.approve("a"))


def test_approve_unknown_booking():
    service, _ = _build_service()

    with pytest.raises(SlotboardError, match="not found"):
        asyncio.run(service.approve("zzz"))


def test_working_hours_shift_geometry():
    config = SlotConfig(slot_duration=30, working_hours=WorkingHours(start=8, end=20))
    service, _ = _build_service(slot_config=config)

    view = asyncio.run(service.day_view(DAY, NOW))

    assert [b.booking_id for b in view.blocks] == ["a"]
    assert view.blocks[0].top_offset == pytest.approx(60 * 3.2 + 4)
    assert [label.time for label in view.labels[:3]] == ["08:00", "08:30", "09:00"]


def test_views_accept_string_and_datetime_days():
    """Day arguments are normalized before reaching the source and the layout."""
    service, source = _build_service()

    view = asyncio.run(service.day_view("2024-06-12", NOW))
    week = asyncio.run(service.week_view(pendulum.datetime(2024, 6, 12, 22, 0), NOW))
    report = asyncio.run(service.utilization(date="2024-06-13"))

    assert view.date == DAY
    assert [b.booking_id for b in view.blocks] == ["a", "b"]
    assert source.calls[0] == {"start": "2024-06-12", "end": "2024-06-12"}
    assert week.days[0] == pendulum.date(2024, 6, 9)
    assert week.now_offset is not None
    assert [r.booking_id for r in report.records] == ["c"]
