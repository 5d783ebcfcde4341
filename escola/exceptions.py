"""Domain errors raised by the booking workflow and the store lifecycle."""
from __future__ import annotations

from typing import TYPE_CHECKING, List, Sequence

if TYPE_CHECKING:
    from .schemas import Booking


class EscolaError(Exception):
    """Base class for errors surfaced to users as plain text."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class BookingValidationError(EscolaError):
    pass


class ResourceNotFoundError(EscolaError):
    pass


class BookingNotFoundError(EscolaError):
    pass


class BookingConflictError(EscolaError):
    def __init__(self, message: str, conflicts: Sequence["Booking"] = ()) -> None:
        super().__init__(message)
        self.conflicts: List["Booking"] = list(conflicts)


class PermissionDeniedError(EscolaError):
    pass


class InvalidTransitionError(EscolaError):
    pass


class StoreClosedError(EscolaError):
    pass


class StorageError(EscolaError):
    """A storage backend could not read or write a key."""
