"""Unit tests for the booking conflict rule."""
import pytest

from escola.availability import find_conflicts, is_available, windows_overlap
from escola.storage import MemoryStorage
from escola.store import DirectoryStore

DATE = "2025-05-20"


@pytest.fixture()
def store():
    directory = DirectoryStore(MemoryStorage()).open()
    yield directory
    directory.close()


def book(store, start, end, status="confirmed", resource_id="2", date=DATE):
    return store.create_booking(
        {
            "professorId": "1",
            "resourceId": resource_id,
            "date": date,
            "startTime": start,
            "endTime": end,
            "status": status,
        }
    )


class TestWindowsOverlap:
    """Test the three-way interval comparison."""

    @pytest.mark.parametrize(
        "window, existing, expected",
        [
            (("09:30", "10:30"), ("09:00", "10:00"), True),
            (("08:30", "09:30"), ("09:00", "10:00"), True),
            (("08:00", "11:00"), ("09:00", "10:00"), True),
            (("09:15", "09:45"), ("09:00", "10:00"), True),
            (("10:00", "11:00"), ("09:00", "10:00"), False),
            (("08:00", "09:00"), ("09:00", "10:00"), False),
            (("11:00", "12:00"), ("09:00", "10:00"), False),
        ],
    )
    def test_overlap_cases(self, window, existing, expected):
        assert windows_overlap(*window, *existing) is expected


class TestIsAvailable:
    """Test availability against the store's bookings."""

    def test_identical_window_is_unavailable(self, store):
        book(store, "09:00", "10:00")
        assert is_available(store, "2", DATE, "09:00", "10:00") is False

    def test_back_to_back_is_available(self, store):
        book(store, "09:00", "10:00")
        assert is_available(store, "2", DATE, "10:00", "11:00") is True

    def test_containment_is_unavailable(self, store):
        book(store, "09:00", "11:00")
        assert is_available(store, "2", DATE, "09:30", "10:30") is False

    def test_cancelled_booking_ignored(self, store):
        book(store, "09:00", "10:00", status="cancelado")
        assert is_available(store, "2", DATE, "09:00", "10:00") is True

    def test_pending_booking_blocks(self, store):
        book(store, "09:00", "10:00", status="pending")
        assert is_available(store, "2", DATE, "09:00", "10:00") is False

    def test_other_date_and_resource_ignored(self, store):
        book(store, "09:00", "10:00", date="2025-05-21")
        book(store, "09:00", "10:00", resource_id="3")
        assert is_available(store, "2", DATE, "09:00", "10:00") is True

    def test_resource_flagged_unavailable(self, store):
        store.find_resource_by_id("2").available = False
        assert is_available(store, "2", DATE, "09:00", "10:00") is False

    def test_unknown_resource(self, store):
        assert is_available(store, "missing", DATE, "09:00", "10:00") is False

    def test_excluded_booking_does_not_conflict(self, store):
        booking = book(store, "09:00", "10:00")
        assert is_available(store, "2", DATE, "09:00", "10:00", exclude_booking_id=booking.id) is True

    def test_find_conflicts_lists_overlaps(self, store):
        first = book(store, "09:00", "10:00")
        book(store, "10:00", "11:00")
        conflicts = find_conflicts(store, "2", DATE, "09:30", "10:00")
        assert [booking.id for booking in conflicts] == [first.id]

    def test_check_does_not_mutate(self, store):
        book(store, "09:00", "10:00")
        before = [booking.model_dump() for booking in store.list_bookings()]
        is_available(store, "2", DATE, "09:00", "10:00")
        assert [booking.model_dump() for booking in store.list_bookings()] == before
