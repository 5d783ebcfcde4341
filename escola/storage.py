"""Key-value storage backends holding the store's JSON blobs."""
from __future__ import annotations

import logging
from typing import Dict, Optional, Protocol

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from .config import Settings
from .database import Base, build_engine, build_session_factory
from .exceptions import StorageError
from .models import StorageEntry

logger = logging.getLogger(__name__)

PROFESSORS_KEY = "escola_professors"
RESOURCES_KEY = "escola_resources"
BOOKINGS_KEY = "escola_bookings"
SESSION_KEY = "user"


class KeyValueStorage(Protocol):
    def open(self) -> None: ...

    def close(self) -> None: ...

    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...


class MemoryStorage:
    """Dict-backed storage; contents live as long as the instance."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._data: Dict[str, str] = dict(initial or {})

    def open(self) -> None:
        pass

    def close(self) -> None:
        pass

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def snapshot(self) -> Dict[str, str]:
        return dict(self._data)


class SqlStorage:
    """Storage backed by the ``storage_entries`` table of any SQLAlchemy database."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine
        self._session_factory = build_session_factory(engine)

    @classmethod
    def from_url(cls, database_url: str) -> "SqlStorage":
        return cls(build_engine(database_url))

    def open(self) -> None:
        try:
            Base.metadata.create_all(bind=self._engine)
        except SQLAlchemyError as exc:
            raise StorageError(f"Could not prepare storage table: {exc}") from exc

    def close(self) -> None:
        self._engine.dispose()

    def get(self, key: str) -> Optional[str]:
        try:
            with self._session_factory() as session:
                entry = session.get(StorageEntry, key)
                return entry.value if entry else None
        except SQLAlchemyError as exc:
            raise StorageError(f"Could not read key {key!r}: {exc}") from exc

    def set(self, key: str, value: str) -> None:
        try:
            with self._session_factory() as session:
                entry = session.get(StorageEntry, key)
                if entry is None:
                    session.add(StorageEntry(key=key, value=value))
                else:
                    entry.value = value
                session.commit()
        except SQLAlchemyError as exc:
            raise StorageError(f"Could not write key {key!r}: {exc}") from exc

    def remove(self, key: str) -> None:
        try:
            with self._session_factory() as session:
                entry = session.get(StorageEntry, key)
                if entry is not None:
                    session.delete(entry)
                    session.commit()
        except SQLAlchemyError as exc:
            raise StorageError(f"Could not remove key {key!r}: {exc}") from exc


def storage_from_settings(settings: Settings) -> KeyValueStorage:
    if settings.storage_backend == "memory":
        logger.info("Using in-memory storage")
        return MemoryStorage()
    logger.info("Using SQL storage")
    return SqlStorage.from_url(settings.database_url)
