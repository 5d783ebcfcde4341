"""In-memory directory of professors, resources and bookings with write-through persistence."""
from __future__ import annotations

import json
import logging
import threading
import time
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError

from .defaults import default_bookings, default_professors, default_resources
from .exceptions import StorageError, StoreClosedError
from .models import ResourceType
from .schemas import Booking, BookingCreate, BookingUpdate, Professor, Resource
from .storage import BOOKINGS_KEY, PROFESSORS_KEY, RESOURCES_KEY, KeyValueStorage

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _serialize(records: Sequence[BaseModel], unreadable: Sequence[Any] = ()) -> str:
    return json.dumps(
        [record.model_dump(mode="json", by_alias=True, exclude_none=True) for record in records] + list(unreadable),
        ensure_ascii=False,
    )


class DirectoryStore:
    """Owns the three collections for one process.

    The store must be opened before use and closed when the owner shuts down.
    Every mutation rewrites all three collections to the storage backend; a
    failed write is logged and the in-memory state stays authoritative.

    Mutations hold ``lock``. Callers that check state and then write (the
    booking workflow) hold it across both steps.
    """

    def __init__(self, storage: KeyValueStorage) -> None:
        self._storage = storage
        self._lock = threading.RLock()
        self._professors: List[Professor] = []
        self._resources: List[Resource] = []
        self._bookings: List[Booking] = []
        # Persisted records that failed validation, written back untouched.
        self._unreadable: Dict[str, List[Any]] = {}
        self._last_booking_id = 0
        self._is_open = False

    @property
    def is_open(self) -> bool:
        return self._is_open

    @property
    def lock(self) -> threading.RLock:
        return self._lock

    def open(self) -> "DirectoryStore":
        with self._lock:
            if self._is_open:
                return self
            self._storage.open()
            self._unreadable = {}
            self._professors, professors_absent = self._load(PROFESSORS_KEY, Professor, default_professors)
            self._resources, resources_absent = self._load(RESOURCES_KEY, Resource, default_resources)
            self._bookings, bookings_absent = self._load(BOOKINGS_KEY, Booking, default_bookings)
            self._is_open = True
            logger.info(
                "Store opened: %d professors, %d resources, %d bookings",
                len(self._professors),
                len(self._resources),
                len(self._bookings),
            )
            seeded = [
                key
                for key, absent in (
                    (PROFESSORS_KEY, professors_absent),
                    (RESOURCES_KEY, resources_absent),
                    (BOOKINGS_KEY, bookings_absent),
                )
                if absent
            ]
            if seeded:
                self._save(seeded)
            return self

    def close(self) -> None:
        with self._lock:
            if not self._is_open:
                return
            self._save()
            self._storage.close()
            self._is_open = False
            logger.info("Store closed")

    def __enter__(self) -> "DirectoryStore":
        return self.open()

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _ensure_open(self) -> None:
        if not self._is_open:
            raise StoreClosedError("Directory store is not open")

    def _load(self, key: str, model: Type[M], fallback: Callable[[], List[M]]) -> Tuple[List[M], bool]:
        """Load one collection. The flag tells whether the key was absent and defaults were seeded.

        A present but unparseable blob also yields the defaults, but is not
        rewritten on open. Individual records that fail validation are skipped
        in memory and kept verbatim in storage.
        """

        try:
            raw = self._storage.get(key)
        except StorageError as exc:
            logger.warning("Could not read %s, using defaults: %s", key, exc)
            return fallback(), False
        if raw is None:
            logger.info("No saved data for %s, using defaults", key)
            return fallback(), True
        try:
            items = json.loads(raw)
        except ValueError as exc:
            logger.warning("Saved data for %s is not valid JSON, using defaults: %s", key, exc)
            return fallback(), False
        if not isinstance(items, list):
            logger.warning("Saved data for %s is not a list, using defaults", key)
            return fallback(), False

        records: List[M] = []
        for index, item in enumerate(items):
            try:
                records.append(model.model_validate(item))
            except ValidationError as exc:
                logger.warning("Skipping unreadable record %d in %s: %s", index, key, exc)
                self._unreadable.setdefault(key, []).append(item)
        return records, False

    def _save(self, keys: Optional[Sequence[str]] = None) -> None:
        collections = {
            PROFESSORS_KEY: self._professors,
            RESOURCES_KEY: self._resources,
            BOOKINGS_KEY: self._bookings,
        }
        try:
            for key, records in collections.items():
                if keys is None or key in keys:
                    self._storage.set(key, _serialize(records, self._unreadable.get(key, ())))
        except (StorageError, TypeError, ValueError) as exc:
            logger.error("Could not persist store, keeping in-memory state: %s", exc)

    def _next_booking_id(self) -> str:
        with self._lock:
            taken = {booking.id for booking in self._bookings}
            skipped = self._unreadable.get(BOOKINGS_KEY, [])
            taken.update(str(item.get("id")) for item in skipped if isinstance(item, dict))
            candidate = max(int(time.time() * 1000), self._last_booking_id + 1)
            while str(candidate) in taken:
                candidate += 1
            self._last_booking_id = candidate
            return str(candidate)

    # Professors

    def list_professors(self) -> List[Professor]:
        self._ensure_open()
        return list(self._professors)

    def find_professor_by_email(self, email: str) -> Optional[Professor]:
        self._ensure_open()
        return next((professor for professor in self._professors if professor.email == email), None)

    def find_professor_by_id(self, professor_id: str) -> Optional[Professor]:
        self._ensure_open()
        return next((professor for professor in self._professors if professor.id == professor_id), None)

    # Resources

    def list_resources(self) -> List[Resource]:
        self._ensure_open()
        return list(self._resources)

    def list_resources_by_type(self, resource_type: Union[ResourceType, str]) -> List[Resource]:
        self._ensure_open()
        return [resource for resource in self._resources if resource.type == resource_type]

    def find_resource_by_id(self, resource_id: str) -> Optional[Resource]:
        self._ensure_open()
        return next((resource for resource in self._resources if resource.id == resource_id), None)

    # Bookings

    def list_bookings(self) -> List[Booking]:
        self._ensure_open()
        return list(self._bookings)

    def find_bookings_by_date(self, date: str) -> List[Booking]:
        self._ensure_open()
        return [booking for booking in self._bookings if booking.date == date]

    def find_bookings_by_professor(self, professor_id: str) -> List[Booking]:
        self._ensure_open()
        return [booking for booking in self._bookings if booking.professor_id == professor_id]

    def find_bookings_by_resource(self, resource_id: str) -> List[Booking]:
        self._ensure_open()
        return [booking for booking in self._bookings if booking.resource_id == resource_id]

    def find_booking_by_id(self, booking_id: str) -> Optional[Booking]:
        self._ensure_open()
        return next((booking for booking in self._bookings if booking.id == booking_id), None)

    def create_booking(self, data: Union[BookingCreate, Mapping[str, object]]) -> Booking:
        payload = data if isinstance(data, BookingCreate) else BookingCreate.model_validate(data)
        with self._lock:
            self._ensure_open()
            booking = Booking(
                **payload.model_dump(),
                id=self._next_booking_id(),
                created_at=_utc_timestamp(),
            )
            self._bookings.append(booking)
            self._save()
        logger.info("Booking %s created for resource %s on %s", booking.id, booking.resource_id, booking.date)
        return booking

    def update_booking(
        self, booking_id: str, fields: Union[BookingUpdate, Mapping[str, object]]
    ) -> Optional[Booking]:
        changes = fields if isinstance(fields, BookingUpdate) else BookingUpdate.model_validate(fields)
        with self._lock:
            self._ensure_open()
            booking = self.find_booking_by_id(booking_id)
            if booking is None:
                return None
            merged = {**booking.model_dump(), **changes.model_dump(exclude_unset=True)}
            updated = Booking.model_validate(merged)
            for name in Booking.model_fields:
                setattr(booking, name, getattr(updated, name))
            self._save()
            return booking

    def delete_booking(self, booking_id: str) -> bool:
        with self._lock:
            self._ensure_open()
            booking = self.find_booking_by_id(booking_id)
            if booking is None:
                return False
            self._bookings.remove(booking)
            self._save()
            return True
