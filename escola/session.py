"""Login sessions: created by a successful authentication, ended by logout."""
from __future__ import annotations

import json
import logging
import time
import uuid
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional, Union

from cachetools import TLRUCache
from pydantic import TypeAdapter, ValidationError

from .auth import AuthFailure, Authenticator
from .exceptions import StorageError
from .schemas import Credentials, SessionRecord
from .storage import SESSION_KEY, KeyValueStorage

logger = logging.getLogger(__name__)

_records_adapter = TypeAdapter(Dict[str, SessionRecord])


class SessionManager:
    """Keeps live sessions in a cache mirrored to the ``user`` storage key.

    Each session expires ``ttl_seconds`` after it was created, including
    sessions restored from a previous process.
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        authenticator: Authenticator,
        ttl_seconds: int,
        maxsize: int = 1024,
    ) -> None:
        self._storage = storage
        self._authenticator = authenticator
        self._ttl = timedelta(seconds=ttl_seconds)
        self._sessions: TLRUCache[str, SessionRecord] = TLRUCache(
            maxsize=maxsize,
            ttu=lambda _key, record, _now: record.created_at.timestamp() + ttl_seconds,
            timer=time.time,
        )

    def restore(self) -> int:
        """Reload unexpired sessions saved by a previous process. Returns how many were restored."""

        try:
            raw = self._storage.get(SESSION_KEY)
        except StorageError as exc:
            logger.warning("Could not read saved sessions: %s", exc)
            return 0
        if raw is None:
            return 0
        try:
            records = _records_adapter.validate_json(raw)
        except ValidationError as exc:
            logger.warning("Discarding unreadable saved sessions: %s", exc)
            return 0
        cutoff = datetime.now(timezone.utc) - self._ttl
        restored = 0
        for session_id, record in records.items():
            if record.created_at >= cutoff:
                self._sessions[session_id] = record
                restored += 1
        return restored

    def login(self, credentials: Credentials) -> Union[SessionRecord, AuthFailure]:
        result = self._authenticator.authenticate(credentials)
        if isinstance(result, AuthFailure):
            logger.info("Login refused for %s: %s", credentials.email, result.reason)
            return result
        record = SessionRecord(id=uuid.uuid4().hex, identity=result, created_at=datetime.now(timezone.utc))
        self._sessions[record.id] = record
        self._persist()
        logger.info("Session %s opened for %s", record.id, result.email)
        return record

    def get(self, session_id: str) -> Optional[SessionRecord]:
        return self._sessions.get(session_id)

    def logout(self, session_id: str) -> bool:
        if self._sessions.pop(session_id, None) is None:
            return False
        self._persist()
        logger.info("Session %s closed", session_id)
        return True

    def _persist(self) -> None:
        payload = {
            session_id: record.model_dump(mode="json", by_alias=True)
            for session_id, record in self._sessions.items()
        }
        try:
            if payload:
                self._storage.set(SESSION_KEY, json.dumps(payload, ensure_ascii=False))
            else:
                self._storage.remove(SESSION_KEY)
        except StorageError as exc:
            logger.error("Could not persist sessions: %s", exc)
