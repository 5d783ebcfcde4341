from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status

from escola import bookings as workflow
from escola.availability import is_available
from escola.dependencies import get_current_identity, get_store
from escola.rate_limit import limiter
from escola.schemas import AvailabilityRead, Booking, BookingRequest, Identity, RescheduleRequest
from escola.store import DirectoryStore

router = APIRouter(prefix="/bookings", tags=["bookings"])


@router.get("/availability", response_model=AvailabilityRead)
@limiter.limit("40/minute")
def check_availability(
    request: Request,
    resource_id: str = Query(..., alias="resourceId"),
    date: str = Query(...),
    start_time: str = Query(..., alias="startTime"),
    end_time: str = Query(..., alias="endTime"),
    _: Identity = Depends(get_current_identity),
    store: DirectoryStore = Depends(get_store),
) -> AvailabilityRead:
    workflow.validate_window(date, start_time, end_time)
    return AvailabilityRead(
        resource_id=resource_id,
        date=date,
        start_time=start_time,
        end_time=end_time,
        available=is_available(store, resource_id, date, start_time, end_time),
    )


@router.get("", response_model=List[Booking])
def list_bookings(
    date: Optional[str] = None,
    identity: Identity = Depends(get_current_identity),
    store: DirectoryStore = Depends(get_store),
) -> List[Booking]:
    bookings = store.find_bookings_by_date(date) if date else store.list_bookings()
    if identity.is_admin:
        return bookings
    return [booking for booking in bookings if booking.professor_id == identity.id]


@router.get("/me", response_model=List[Booking])
def list_my_bookings(
    identity: Identity = Depends(get_current_identity),
    store: DirectoryStore = Depends(get_store),
) -> List[Booking]:
    return sorted(store.find_bookings_by_professor(identity.id), key=lambda b: (b.date, b.start_time))


@router.post("", response_model=Booking, status_code=status.HTTP_201_CREATED)
@limiter.limit("20/minute")
def create_booking(
    request: Request,
    booking_in: BookingRequest,
    identity: Identity = Depends(get_current_identity),
    store: DirectoryStore = Depends(get_store),
) -> Booking:
    return workflow.submit_booking(store, identity, booking_in)


@router.get("/{booking_id}", response_model=Booking)
def get_booking(
    booking_id: str,
    identity: Identity = Depends(get_current_identity),
    store: DirectoryStore = Depends(get_store),
) -> Booking:
    booking = store.find_booking_by_id(booking_id)
    if booking is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Agendamento não encontrado")
    if not identity.is_admin and booking.professor_id != identity.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Acesso negado")
    return booking


@router.patch("/{booking_id}", response_model=Booking)
@limiter.limit("20/minute")
def reschedule_booking(
    request: Request,
    booking_id: str,
    changes: RescheduleRequest,
    identity: Identity = Depends(get_current_identity),
    store: DirectoryStore = Depends(get_store),
) -> Booking:
    return workflow.reschedule_booking(store, identity, booking_id, changes)


@router.post("/{booking_id}/cancel", response_model=Booking)
def cancel_booking(
    booking_id: str,
    identity: Identity = Depends(get_current_identity),
    store: DirectoryStore = Depends(get_store),
) -> Booking:
    return workflow.cancel_booking(store, identity, booking_id)


@router.delete("/{booking_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_booking(
    booking_id: str,
    identity: Identity = Depends(get_current_identity),
    store: DirectoryStore = Depends(get_store),
) -> Response:
    workflow.delete_booking(store, identity, booking_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
