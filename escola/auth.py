"""Pluggable authentication and session token helpers."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, Optional, Protocol, Union

from fastapi import HTTPException, status
from jose import JWTError, jwt

from .config import get_settings
from .schemas import Credentials, Identity
from .store import DirectoryStore


@dataclass(frozen=True)
class AuthFailure:
    reason: str


AuthResult = Union[Identity, AuthFailure]


class Authenticator(Protocol):
    def authenticate(self, credentials: Credentials) -> AuthResult: ...


class EmailDirectoryAuthenticator:
    """Accepts any email registered in the professor directory.

    There is no credential check: being listed is enough. Swap in another
    ``Authenticator`` to verify passwords or delegate to an identity provider.
    """

    def __init__(self, store: DirectoryStore) -> None:
        self._store = store

    def authenticate(self, credentials: Credentials) -> AuthResult:
        professor = self._store.find_professor_by_email(credentials.email)
        if professor is None:
            return AuthFailure("Email não encontrado")
        return Identity(id=professor.id, name=professor.name, email=professor.email, role=professor.role)


def create_session_token(session_id: str, identity: Identity, expires_delta: Optional[timedelta] = None) -> str:
    settings = get_settings()
    expire = datetime.utcnow() + (expires_delta or timedelta(minutes=settings.session_ttl_minutes))
    to_encode: Dict[str, Any] = {
        "sid": session_id,
        "sub": identity.email,
        "role": identity.role.value,
        "exp": expire,
    }
    return jwt.encode(to_encode, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_session_token(token: str) -> Dict[str, Any]:
    settings = get_settings()
    try:
        return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token") from exc
