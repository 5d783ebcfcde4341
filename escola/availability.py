"""Booking conflict detection.

Dates (``YYYY-MM-DD``) and times (``HH:MM``) are compared as strings, which
orders correctly only because both are zero-padded and fixed width. Windows are
half-open: a booking ending at 10:00 does not collide with one starting at 10:00.
"""
from typing import List, Optional

from .models import BookingStatus
from .schemas import Booking
from .store import DirectoryStore


def windows_overlap(start_time: str, end_time: str, existing_start: str, existing_end: str) -> bool:
    return (
        (start_time >= existing_start and start_time < existing_end)
        or (end_time > existing_start and end_time <= existing_end)
        or (start_time <= existing_start and end_time >= existing_end)
    )


def find_conflicts(
    store: DirectoryStore,
    resource_id: str,
    date: str,
    start_time: str,
    end_time: str,
    exclude_booking_id: Optional[str] = None,
) -> List[Booking]:
    """Return the active bookings of ``resource_id`` on ``date`` that overlap the window."""

    return [
        booking
        for booking in store.find_bookings_by_resource(resource_id)
        if booking.date == date
        and booking.status != BookingStatus.CANCELLED
        and booking.id != exclude_booking_id
        and windows_overlap(start_time, end_time, booking.start_time, booking.end_time)
    ]


def is_available(
    store: DirectoryStore,
    resource_id: str,
    date: str,
    start_time: str,
    end_time: str,
    exclude_booking_id: Optional[str] = None,
) -> bool:
    """Whether ``resource_id`` can be booked for ``[start_time, end_time)`` on ``date``.

    Callers validate ``start_time < end_time`` beforehand. An unknown resource, or
    one whose ``available`` flag is off, is never available.
    """

    resource = store.find_resource_by_id(resource_id)
    if resource is None or not resource.available:
        return False
    return not find_conflicts(store, resource_id, date, start_time, end_time, exclude_booking_id)
