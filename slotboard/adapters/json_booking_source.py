"""
Read-only booking source backed by a JSON export of the booking store.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from pendulum import Date

from ..domain.exceptions import BookingSourceError
from ..domain.models import Booking, to_date

logger = logging.getLogger(__name__)


def _with_pending(record: Any, pending: bool) -> Any:
    """Tag a record with its list of origin; non-objects pass through for load() to skip."""
    if not isinstance(record, dict):
        return record
    return dict(record, isPending=pending)


class JsonBookingSource:
    """
    Loads bookings from a JSON file exported by the booking store.

    The file is either a flat list of records, or an object with
    ``sessions`` (confirmed) and ``pendingBookings`` (awaiting approval)
    lists. Records that cannot be parsed are skipped with a warning.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def _load_raw(self) -> Any:
        if not self.path.exists():
            raise BookingSourceError(f"Bookings file not found: {self.path}")
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                return json.load(f)
        except json.JSONDecodeError as exc:
            raise BookingSourceError(f"Invalid JSON in {self.path}: {exc}") from exc

    def _records(self) -> List[Dict[str, Any]]:
        data = self._load_raw()

        if isinstance(data, list):
            return data

        if isinstance(data, dict):
            records = [_with_pending(r, False) for r in data.get("sessions") or []]
            records.extend(_with_pending(r, True) for r in data.get("pendingBookings") or [])
            return records

        raise BookingSourceError(
            f"Bookings file must contain a list or an object, got {type(data).__name__}"
        )

    def load(self) -> List[Booking]:
        """Parse every valid record in the file."""
        bookings: List[Booking] = []

        for record in self._records():
            if not isinstance(record, dict):
                logger.warning("Skipping non-object booking record: %r", record)
                continue
            try:
                bookings.append(Booking.from_record(record))
            except (TypeError, ValueError) as exc:
                logger.warning("Skipping booking record %s: %s", record.get("id", "?"), exc)

        return bookings

    async def get_bookings(
        self,
        start_date: Optional[Date] = None,
        end_date: Optional[Date] = None,
    ) -> List[Booking]:
        """Return bookings dated within the optional inclusive range."""
        start_date = to_date(start_date) if start_date is not None else None
        end_date = to_date(end_date) if end_date is not None else None
        return [
            booking for booking in self.load()
            if (start_date is None or booking.date >= start_date)
            and (end_date is None or booking.date <= end_date)
        ]
