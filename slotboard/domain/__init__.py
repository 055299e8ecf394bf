"""
Domain layer - Pure scheduling logic without external I/O.
"""

from .duration import DurationNormalizer
from .layout import DAY_METRICS, WEEK_METRICS, BookingLayoutEngine, LayoutMetrics
from .models import Booking, LayoutBlock, SlotConfig, UtilizationReport, WorkingHours
from .navigator import TimelineNavigator, month_grid, week_of
from .utilization import UtilizationAggregator

__all__ = [
    "Booking",
    "BookingLayoutEngine",
    "DAY_METRICS",
    "DurationNormalizer",
    "LayoutBlock",
    "LayoutMetrics",
    "SlotConfig",
    "TimelineNavigator",
    "UtilizationAggregator",
    "UtilizationReport",
    "WEEK_METRICS",
    "WorkingHours",
    "month_grid",
    "week_of",
]
