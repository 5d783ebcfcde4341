from fastapi import APIRouter, Depends

from escola import bookings as workflow
from escola.dashboard import compute_stats
from escola.dependencies import get_store, require_admin
from escola.schemas import Booking, DashboardStats, Identity
from escola.store import DirectoryStore

router = APIRouter(prefix="/admin", tags=["admin"])


@router.post("/bookings/{booking_id}/approve", response_model=Booking)
def approve_booking(
    booking_id: str,
    admin: Identity = Depends(require_admin),
    store: DirectoryStore = Depends(get_store),
) -> Booking:
    return workflow.approve_booking(store, admin, booking_id)


@router.post("/bookings/{booking_id}/reject", response_model=Booking)
def reject_booking(
    booking_id: str,
    admin: Identity = Depends(require_admin),
    store: DirectoryStore = Depends(get_store),
) -> Booking:
    return workflow.reject_booking(store, admin, booking_id)


@router.get("/stats", response_model=DashboardStats)
def stats(
    _: Identity = Depends(require_admin),
    store: DirectoryStore = Depends(get_store),
) -> DashboardStats:
    return compute_stats(store)
