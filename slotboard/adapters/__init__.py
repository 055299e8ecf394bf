"""
Adapters layer - Sources of booking data.
"""

from .json_booking_source import JsonBookingSource

__all__ = ["JsonBookingSource"]
