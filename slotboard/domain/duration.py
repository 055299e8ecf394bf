"""
Snapping service durations onto the business's slot grid.

Two policies live here:
- occupancy: a booking consumes ``ceil(duration / slot)`` slots, so the
  booked duration is never shorter than what was requested;
- approval: a confirmed booking stores the duration rounded to the
  *nearest* slot multiple, never less than one slot.
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional, Union

from .exceptions import InvalidDurationError
from .time_arithmetic import add_minutes, parse_duration, round_to_grid, to_minutes

logger = logging.getLogger(__name__)


def _check_slot_size(slot_size: int) -> None:
    if slot_size <= 0:
        raise InvalidDurationError(f"Slot size must be positive, got {slot_size}")


def slots_needed(service_duration_minutes: int, slot_size: int) -> int:
    """Number of grid slots a service occupies (at least one)."""
    _check_slot_size(slot_size)
    if service_duration_minutes <= 0:
        raise InvalidDurationError(
            f"Service duration must be positive, got {service_duration_minutes}"
        )
    return max(1, math.ceil(service_duration_minutes / slot_size))


def booked_duration(service_duration_minutes: int, slot_size: int) -> int:
    """Grid-aligned duration actually reserved for a service."""
    return slots_needed(service_duration_minutes, slot_size) * slot_size


@dataclass(frozen=True)
class NormalizedDuration:
    """Result of snapping one requested duration onto the grid."""
    service_duration_minutes: int
    slots_needed: int
    booked_duration_minutes: int

    @property
    def waste_minutes(self) -> int:
        return self.booked_duration_minutes - self.service_duration_minutes


@dataclass(frozen=True)
class ApprovedTiming:
    """Duration and end time stored when a pending request is approved."""
    duration_minutes: int
    end_time: str


class DurationNormalizer:
    """
    Applies the grid policies for one slot size.

    Example (slot size 15):
        normalize(50) -> 4 slots, 60 booked minutes, 10 minutes waste
        approved_duration(50) -> 45
    """

    def __init__(self, slot_size: int = 15):
        _check_slot_size(slot_size)
        self.slot_size = slot_size

    def normalize(self, service_duration_minutes: int) -> NormalizedDuration:
        slots = slots_needed(service_duration_minutes, self.slot_size)
        return NormalizedDuration(
            service_duration_minutes=service_duration_minutes,
            slots_needed=slots,
            booked_duration_minutes=slots * self.slot_size,
        )

    def approved_duration(self, raw_duration: Union[int, str, None]) -> int:
        """
        Round a requested duration to the nearest slot multiple.

        Free-text durations ("60 min") are parsed first. The result is
        never shorter than one slot.
        """
        minutes = parse_duration(raw_duration)
        rounded = round_to_grid(minutes, self.slot_size)
        if rounded <= 0:
            rounded = self.slot_size
        if rounded != minutes:
            logger.debug(
                "Rounded approved duration %s -> %s (slot %s)",
                minutes, rounded, self.slot_size,
            )
        return rounded

    def approve(
        self,
        start_time: str,
        raw_duration: Union[int, str, None],
        end_time: Optional[str] = None,
    ) -> ApprovedTiming:
        """
        Compute the grid-exact duration and end time for an approval.

        An end time already present on the request is kept as-is; otherwise
        it is derived from the start time and the approved duration.
        """
        duration = self.approved_duration(raw_duration)
        if end_time:
            to_minutes(end_time)
        else:
            end_time = add_minutes(start_time, duration)
        return ApprovedTiming(duration_minutes=duration, end_time=end_time)
