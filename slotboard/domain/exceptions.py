"""
Domain-specific exception hierarchy for slotboard.
"""


class SlotboardError(Exception):
    """Base class for all application-level errors."""


class InvalidTimeError(SlotboardError, ValueError):
    """Raised when a wall-clock "HH:MM" string cannot be parsed."""


class InvalidDurationError(SlotboardError, ValueError):
    """Raised when a duration or slot size is not a positive integer."""


class BookingSourceError(SlotboardError):
    """Raised when booking data cannot be loaded from its source."""
