"""Unit tests for the directory store."""
import json

import pytest

from escola.exceptions import StorageError, StoreClosedError
from escola.models import BookingStatus, ResourceType
from escola.storage import BOOKINGS_KEY, PROFESSORS_KEY, RESOURCES_KEY, MemoryStorage
from escola.store import DirectoryStore

NEW_BOOKING = {
    "professorId": "2",
    "resourceId": "3",
    "date": "2025-06-01",
    "startTime": "07:00",
    "endTime": "07:40",
    "series": "8º Ano",
    "purpose": "Óptica",
    "status": "pending",
}


class FailingStorage(MemoryStorage):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fail_writes = False

    def set(self, key, value):
        if self.fail_writes:
            raise StorageError("disk full")
        super().set(key, value)


class TestLifecycle:
    """Test opening, closing and initial load."""

    def test_operations_require_open_store(self):
        store = DirectoryStore(MemoryStorage())
        with pytest.raises(StoreClosedError):
            store.list_bookings()

    def test_closed_store_rejects_operations(self):
        store = DirectoryStore(MemoryStorage()).open()
        store.close()
        with pytest.raises(StoreClosedError):
            store.list_resources()

    def test_context_manager(self):
        with DirectoryStore(MemoryStorage()) as store:
            assert store.is_open
        assert not store.is_open

    def test_empty_storage_loads_and_saves_defaults(self):
        storage = MemoryStorage()
        with DirectoryStore(storage) as store:
            assert len(store.list_professors()) == 3
            assert len(store.list_resources()) == 3
            assert len(store.list_bookings()) == 2
        assert set(storage.snapshot()) == {PROFESSORS_KEY, RESOURCES_KEY, BOOKINGS_KEY}

    def test_missing_key_falls_back_independently(self):
        professors = [{"id": "9", "name": "Ana Lima", "email": "ana@escola.com", "role": "professor"}]
        storage = MemoryStorage({PROFESSORS_KEY: json.dumps(professors), RESOURCES_KEY: "[]"})
        with DirectoryStore(storage) as store:
            assert [professor.email for professor in store.list_professors()] == ["ana@escola.com"]
            assert store.list_resources() == []
            assert len(store.list_bookings()) == 2
        assert json.loads(storage.get(RESOURCES_KEY)) == []

    def test_corrupt_key_falls_back_independently(self):
        storage = MemoryStorage({PROFESSORS_KEY: "{not json", RESOURCES_KEY: "[]", BOOKINGS_KEY: "[]"})
        with DirectoryStore(storage) as store:
            assert len(store.list_professors()) == 3
            assert store.list_resources() == []
            assert store.list_bookings() == []

    def test_corrupt_key_is_not_overwritten_on_open(self):
        storage = MemoryStorage({PROFESSORS_KEY: "{not json", RESOURCES_KEY: "[]", BOOKINGS_KEY: "[]"})
        DirectoryStore(storage).open()
        assert storage.get(PROFESSORS_KEY) == "{not json"

    def test_invalid_record_does_not_discard_the_rest(self):
        good = {**NEW_BOOKING, "id": "77", "createdAt": "2025-05-01T10:00:00.000Z"}
        bad = {**NEW_BOOKING, "id": "78", "startTime": "9:00", "createdAt": "2025-05-01T10:00:00.000Z"}
        storage = MemoryStorage({BOOKINGS_KEY: json.dumps([good, bad])})
        with DirectoryStore(storage) as store:
            assert [booking.id for booking in store.list_bookings()] == ["77"]
            created = store.create_booking(NEW_BOOKING)
        persisted = {record["id"]: record for record in json.loads(storage.get(BOOKINGS_KEY))}
        assert set(persisted) == {"77", "78", created.id}
        assert persisted["78"]["startTime"] == "9:00"

    def test_zero_length_legacy_booking_is_skipped(self):
        legacy = {
            "id": "5",
            "professorId": "1",
            "resourceId": "1",
            "date": "2024-01-15",
            "time": "08:20",
            "duration": 0,
            "series": "1º Ano EM",
            "purpose": "Aula",
            "status": "confirmed",
            "createdAt": "2024-01-10T10:00:00Z",
        }
        with DirectoryStore(MemoryStorage({BOOKINGS_KEY: json.dumps([legacy])})) as store:
            assert store.list_bookings() == []

    def test_legacy_booking_shape_is_normalized(self):
        legacy = [
            {
                "id": "1",
                "professorId": "1",
                "resourceId": "1",
                "date": "2024-01-15",
                "time": "08:20",
                "duration": 40,
                "series": "1º Ano EM",
                "purpose": "Aula",
                "status": "confirmado",
                "createdAt": "2024-01-10T10:00:00Z",
            }
        ]
        with DirectoryStore(MemoryStorage({BOOKINGS_KEY: json.dumps(legacy)})) as store:
            booking = store.list_bookings()[0]
            assert (booking.start_time, booking.end_time) == ("08:20", "09:00")
            assert booking.status == BookingStatus.CONFIRMED


class TestLookups:
    """Test read operations."""

    def test_find_professor_by_email(self, store):
        assert store.find_professor_by_email("maria@escola.com").id == "2"
        assert store.find_professor_by_email("MARIA@escola.com") is None
        assert store.find_professor_by_email("nobody@escola.com") is None

    def test_find_resource_by_id(self, store):
        assert store.find_resource_by_id("2").type == ResourceType.LAB_QUIMICA
        assert store.find_resource_by_id("99") is None

    def test_list_resources_by_type(self, store):
        assert [resource.id for resource in store.list_resources_by_type("lab_fisica")] == ["3"]

    def test_filters_keep_insertion_order(self, store):
        first = store.create_booking({**NEW_BOOKING, "startTime": "09:00", "endTime": "10:00"})
        second = store.create_booking(NEW_BOOKING)
        ids = [booking.id for booking in store.find_bookings_by_date("2025-06-01")]
        assert ids == [first.id, second.id]

    def test_list_returns_copy(self, store):
        store.list_bookings().clear()
        assert len(store.list_bookings()) == 2


class TestMutations:
    """Test create, update and delete with write-through."""

    def test_create_round_trip(self, store):
        booking = store.create_booking(NEW_BOOKING)
        found = [b for b in store.find_bookings_by_professor("2") if b.id == booking.id]
        assert len(found) == 1
        stored = found[0].model_dump(by_alias=True, mode="json", exclude_none=True)
        assert stored.pop("id")
        assert stored.pop("createdAt")
        assert stored == NEW_BOOKING

    def test_created_ids_are_unique(self, store):
        ids = {store.create_booking(NEW_BOOKING).id for _ in range(20)}
        assert len(ids) == 20

    def test_create_writes_through(self, store, storage):
        booking = store.create_booking(NEW_BOOKING)
        persisted = json.loads(storage.get(BOOKINGS_KEY))
        assert persisted[-1]["id"] == booking.id
        assert persisted[-1]["startTime"] == "07:00"

    def test_update_merges_in_place(self, store, storage):
        booking = store.create_booking(NEW_BOOKING)
        updated = store.update_booking(booking.id, {"status": "confirmado", "purpose": "Lentes"})
        assert updated is booking
        assert booking.status == BookingStatus.CONFIRMED
        assert booking.purpose == "Lentes"
        assert booking.start_time == "07:00"
        assert json.loads(storage.get(BOOKINGS_KEY))[-1]["status"] == "confirmed"

    def test_update_unknown_id(self, store):
        before = [booking.model_dump() for booking in store.list_bookings()]
        assert store.update_booking("missing", {"status": "cancelled"}) is None
        assert [booking.model_dump() for booking in store.list_bookings()] == before

    def test_delete(self, store, storage):
        booking = store.create_booking(NEW_BOOKING)
        assert store.delete_booking(booking.id) is True
        assert store.delete_booking(booking.id) is False
        assert booking.id not in storage.get(BOOKINGS_KEY)

    def test_write_failure_keeps_memory_state(self):
        storage = FailingStorage()
        with DirectoryStore(storage) as store:
            storage.fail_writes = True
            booking = store.create_booking(NEW_BOOKING)
            assert store.find_booking_by_id(booking.id) is booking
            assert booking.id not in storage.get(BOOKINGS_KEY)
            storage.fail_writes = False

    def test_reopen_reads_persisted_state(self, storage):
        with DirectoryStore(storage) as store:
            booking = store.create_booking(NEW_BOOKING)
        with DirectoryStore(storage) as reopened:
            assert reopened.find_booking_by_id(booking.id) is not None
