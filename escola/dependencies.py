"""Reusable FastAPI dependencies for the store, sessions and roles."""
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer

from .auth import decode_session_token
from .schemas import Identity, SessionRecord
from .session import SessionManager
from .store import DirectoryStore

oauth_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")


def get_store(request: Request) -> DirectoryStore:
    return request.app.state.store


def get_sessions(request: Request) -> SessionManager:
    return request.app.state.sessions


def get_current_session(
    request: Request,
    token: str = Depends(oauth_scheme),
    sessions: SessionManager = Depends(get_sessions),
) -> SessionRecord:
    payload = decode_session_token(token)
    session_id: str | None = payload.get("sid")
    if session_id is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing session in token")
    session = sessions.get(session_id)
    if session is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Session expired or logged out")
    request.state.user_email = session.identity.email
    return session


def get_current_identity(session: SessionRecord = Depends(get_current_session)) -> Identity:
    return session.identity


def require_admin(identity: Identity = Depends(get_current_identity)) -> Identity:
    if not identity.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions")
    return identity
