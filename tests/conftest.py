"""
Shared fixtures: a small bookings export and matching config file.
"""

import json

import pytest

BOOKINGS_EXPORT = {
    "sessions": [
        {"id": "s1", "date": "2024-06-12", "time": "09:00", "endTime": "09:50", "duration": 50, "service": "Massage"},
        {"id": "s2", "date": "2024-06-12", "time": "23:30", "endTime": "00:15", "duration": 45, "service": "Late"},
        {"id": "s3", "date": "2024-06-14", "time": "14:00", "duration": 30, "service": "Cut"},
    ],
    "pendingBookings": [
        {"id": "p1", "date": "2024-06-13", "time": "10:00", "duration": "50 min", "service": "Color"},
        {"id": "broken", "date": "2024-06-13", "time": "10h"},
    ],
}


@pytest.fixture
def bookings_file(tmp_path):
    path = tmp_path / "bookings.json"
    path.write_text(json.dumps(BOOKINGS_EXPORT), encoding="utf-8")
    return path


@pytest.fixture
def config_file(tmp_path, bookings_file):
    path = tmp_path / "config.yaml"
    path.write_text(
        "slot_duration: 15\n"
        "working_hours:\n"
        "  start_hour: 0\n"
        "  end_hour: 24\n"
        f"bookings_file: {bookings_file.name}\n",
        encoding="utf-8",
    )
    return path
