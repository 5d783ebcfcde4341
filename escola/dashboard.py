"""Counters for the admin overview page."""
from .models import BookingStatus, ResourceType
from .schemas import DashboardStats
from .store import DirectoryStore


def compute_stats(store: DirectoryStore) -> DashboardStats:
    bookings = store.list_bookings()
    resources = store.list_resources()
    chromebooks = store.list_resources_by_type(ResourceType.CHROMEBOOK)
    return DashboardStats(
        total_bookings=len(bookings),
        pending_bookings=sum(1 for b in bookings if b.status == BookingStatus.PENDING),
        confirmed_bookings=sum(1 for b in bookings if b.status == BookingStatus.CONFIRMED),
        cancelled_bookings=sum(1 for b in bookings if b.status == BookingStatus.CANCELLED),
        total_resources=len(resources),
        available_resources=sum(1 for r in resources if r.available),
        total_chromebooks=len(chromebooks),
        available_chromebooks=sum(1 for r in chromebooks if r.available),
    )
