"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .schedule_board import BookingSourceProtocol, DayView, ScheduleBoardService, WeekView

__all__ = ["BookingSourceProtocol", "DayView", "ScheduleBoardService", "WeekView"]
