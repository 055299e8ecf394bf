"""
Date math for the timeline views: which days to show and where "now" is.
"""

from typing import Iterable, List, Optional, Set, Tuple

import pendulum
from pendulum import Date, DateTime

from .layout import DAY_METRICS, BookingLayoutEngine, LayoutMetrics
from .models import Booking, MonthCell, SlotConfig, to_date
from .time_arithmetic import MINUTES_PER_HOUR

DAYS_PER_WEEK = 7
MONTH_GRID_CELLS = 42  # 6 rows x 7 columns

# Callers re-invoke now_offset on this cadence while a view is mounted.
NOW_REFRESH_SECONDS = 60

LANDING_LEAD_PIXELS = 100
DEFAULT_LANDING_HOUR = 9


def _days_since_sunday(day: Date) -> int:
    return day.isoweekday() % DAYS_PER_WEEK


def week_of(day: Date) -> List[Date]:
    """The seven dates of the Sunday-anchored week containing ``day``."""
    day = to_date(day)
    sunday = day.subtract(days=_days_since_sunday(day))
    return [sunday.add(days=offset) for offset in range(DAYS_PER_WEEK)]


def shift_week(day: Date, weeks: int) -> Date:
    """Move the selected date by whole weeks (negative goes back)."""
    return to_date(day).add(days=DAYS_PER_WEEK * weeks)


def is_current_week(day: Date, today: Date) -> bool:
    return to_date(today) in week_of(day)


def shift_month(year: int, month: int, months: int) -> Tuple[int, int]:
    """Step a (year, month) pair, rolling over year boundaries."""
    index = year * 12 + (month - 1) + months
    return index // 12, index % 12 + 1


def month_grid(
    year: int,
    month: int,
    selected: Optional[Date] = None,
    bookings: Iterable[Booking] = (),
    today: Optional[Date] = None,
) -> List[MonthCell]:
    """
    Build the 42-cell month picker grid.

    Leading cells come from the previous month and trailing cells from the
    next one so that every row is full. Only days of the displayed month
    can be flagged as today.
    """
    today = to_date(today) if today is not None else pendulum.today().date()
    selected = to_date(selected) if selected is not None else None
    booked_days: Set[Date] = {booking.date for booking in bookings}

    first = pendulum.date(year, month, 1)
    grid_start = first.subtract(days=_days_since_sunday(first))

    cells: List[MonthCell] = []
    for offset in range(MONTH_GRID_CELLS):
        day = grid_start.add(days=offset)
        in_month = day.month == month
        cells.append(
            MonthCell(
                date=day,
                in_month=in_month,
                is_today=in_month and day == today,
                is_selected=day == selected,
                has_bookings=day in booked_days,
            )
        )
    return cells


class TimelineNavigator:
    """
    Positions the "now" marker and the initial scroll for a displayed day.

    Holds no timer and no state beyond its configuration.
    """

    def __init__(self, slot_config: SlotConfig, metrics: LayoutMetrics = DAY_METRICS):
        self.engine = BookingLayoutEngine(slot_config, metrics)

    def now_offset(self, displayed: Date, now: DateTime) -> Optional[float]:
        """Offset of the current time, or None when ``displayed`` is not today."""
        if to_date(displayed) != to_date(now):
            return None
        return self.engine.offset_for_minutes(now.hour * MINUTES_PER_HOUR + now.minute)

    def landing_offset(
        self,
        displayed: Date,
        bookings: Iterable[Booking],
        now: DateTime,
    ) -> float:
        """
        One-time scroll position for a newly displayed date.

        Lands near the current time when viewing today, else near the
        earliest booking of the day, else at the default opening hour.
        """
        displayed = to_date(displayed)
        target = self.now_offset(displayed, now)

        if target is None:
            day_starts = [b.start_minutes for b in bookings if b.date == displayed]
            if day_starts:
                target = self.engine.offset_for_minutes(min(day_starts))
            else:
                target = self.engine.offset_for_minutes(DEFAULT_LANDING_HOUR * MINUTES_PER_HOUR)

        return max(0.0, target - LANDING_LEAD_PIXELS)
