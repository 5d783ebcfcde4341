"""Booking workflow: professors request, admins approve or reject."""
from __future__ import annotations

import logging
import re

from .availability import find_conflicts
from .exceptions import (
    BookingConflictError,
    BookingNotFoundError,
    BookingValidationError,
    InvalidTransitionError,
    PermissionDeniedError,
    ResourceNotFoundError,
)
from .models import BookingStatus
from .schemas import DATE_PATTERN, TIME_PATTERN, Booking, BookingCreate, BookingRequest, Identity, RescheduleRequest
from .store import DirectoryStore

logger = logging.getLogger(__name__)

MISSING_FIELDS_MESSAGE = "Todos os campos são obrigatórios"
TIME_ORDER_MESSAGE = "O horário de início deve ser anterior ao horário de fim"
FORMAT_MESSAGE = "Data ou horário em formato inválido"
CONFLICT_MESSAGE = "Recurso indisponível neste horário"


def validate_window(date: str, start_time: str, end_time: str) -> None:
    if not re.match(DATE_PATTERN, date) or not re.match(TIME_PATTERN, start_time) or not re.match(TIME_PATTERN, end_time):
        raise BookingValidationError(FORMAT_MESSAGE)
    if start_time >= end_time:
        raise BookingValidationError(TIME_ORDER_MESSAGE)


def validate_request(request: BookingRequest) -> None:
    required = (
        request.resource_id,
        request.date,
        request.start_time,
        request.end_time,
        request.series,
        request.purpose,
    )
    if not all(value.strip() for value in required):
        raise BookingValidationError(MISSING_FIELDS_MESSAGE)
    validate_window(request.date, request.start_time, request.end_time)


def _get_booking(store: DirectoryStore, booking_id: str) -> Booking:
    booking = store.find_booking_by_id(booking_id)
    if booking is None:
        raise BookingNotFoundError("Agendamento não encontrado")
    return booking


def _ensure_owner_or_admin(identity: Identity, booking: Booking) -> None:
    if not identity.is_admin and booking.professor_id != identity.id:
        raise PermissionDeniedError("Acesso negado")


def _ensure_admin(identity: Identity) -> None:
    if not identity.is_admin:
        raise PermissionDeniedError("Apenas administradores podem revisar agendamentos")


def _ensure_free(
    store: DirectoryStore,
    resource_id: str,
    date: str,
    start_time: str,
    end_time: str,
    exclude_booking_id: str | None = None,
) -> None:
    resource = store.find_resource_by_id(resource_id)
    if resource is None:
        raise ResourceNotFoundError("Recurso não encontrado")
    if not resource.available:
        raise BookingConflictError(CONFLICT_MESSAGE)
    conflicts = find_conflicts(store, resource_id, date, start_time, end_time, exclude_booking_id)
    if conflicts:
        raise BookingConflictError(CONFLICT_MESSAGE, conflicts)


def submit_booking(store: DirectoryStore, identity: Identity, request: BookingRequest) -> Booking:
    """Validate the form and record a pending booking for ``identity``.

    The conflict check and the insert run under the store lock, so two
    concurrent requests for one slot cannot both be recorded.
    """

    validate_request(request)
    with store.lock:
        _ensure_free(store, request.resource_id, request.date, request.start_time, request.end_time)
        resource = store.find_resource_by_id(request.resource_id)
        return store.create_booking(
            BookingCreate(
                professor_id=identity.id,
                professor_name=identity.name,
                resource_id=request.resource_id,
                resource_name=resource.name if resource else None,
                date=request.date,
                start_time=request.start_time,
                end_time=request.end_time,
                series=request.series.strip(),
                purpose=request.purpose.strip(),
                status=BookingStatus.PENDING,
            )
        )


def approve_booking(store: DirectoryStore, identity: Identity, booking_id: str) -> Booking:
    _ensure_admin(identity)
    with store.lock:
        booking = _get_booking(store, booking_id)
        if booking.status != BookingStatus.PENDING:
            raise InvalidTransitionError("Apenas agendamentos pendentes podem ser aprovados")
        _ensure_free(store, booking.resource_id, booking.date, booking.start_time, booking.end_time, booking.id)
        logger.info("Booking %s approved by %s", booking.id, identity.email)
        return store.update_booking(booking.id, {"status": BookingStatus.CONFIRMED}) or booking


def reject_booking(store: DirectoryStore, identity: Identity, booking_id: str) -> Booking:
    _ensure_admin(identity)
    with store.lock:
        booking = _get_booking(store, booking_id)
        if booking.status != BookingStatus.PENDING:
            raise InvalidTransitionError("Apenas agendamentos pendentes podem ser rejeitados")
        logger.info("Booking %s rejected by %s", booking.id, identity.email)
        return store.update_booking(booking.id, {"status": BookingStatus.CANCELLED}) or booking


def cancel_booking(store: DirectoryStore, identity: Identity, booking_id: str) -> Booking:
    with store.lock:
        booking = _get_booking(store, booking_id)
        _ensure_owner_or_admin(identity, booking)
        if booking.status == BookingStatus.CANCELLED:
            raise InvalidTransitionError("Agendamento já cancelado")
        return store.update_booking(booking.id, {"status": BookingStatus.CANCELLED}) or booking


def reschedule_booking(
    store: DirectoryStore, identity: Identity, booking_id: str, request: RescheduleRequest
) -> Booking:
    with store.lock:
        booking = _get_booking(store, booking_id)
        _ensure_owner_or_admin(identity, booking)
        if booking.status == BookingStatus.CANCELLED:
            raise InvalidTransitionError("Agendamentos cancelados não podem ser alterados")
        changes = request.model_dump(exclude_none=True)
        resource_id = changes.get("resource_id", booking.resource_id)
        date = changes.get("date", booking.date)
        start_time = changes.get("start_time", booking.start_time)
        end_time = changes.get("end_time", booking.end_time)
        validate_window(date, start_time, end_time)
        _ensure_free(store, resource_id, date, start_time, end_time, exclude_booking_id=booking.id)
        if resource_id != booking.resource_id:
            resource = store.find_resource_by_id(resource_id)
            changes["resource_name"] = resource.name if resource else None
        return store.update_booking(booking.id, changes) or booking


def delete_booking(store: DirectoryStore, identity: Identity, booking_id: str) -> None:
    _ensure_admin(identity)
    if not store.delete_booking(booking_id):
        raise BookingNotFoundError("Agendamento não encontrado")
    logger.info("Booking %s deleted by %s", booking_id, identity.email)
