from fastapi import APIRouter, Depends, HTTPException, Request, Response, status

from escola.auth import AuthFailure, create_session_token
from escola.dependencies import get_current_identity, get_current_session, get_sessions
from escola.rate_limit import limiter
from escola.schemas import Credentials, Identity, SessionRecord, Token
from escola.session import SessionManager

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=Token)
@limiter.limit("10/minute")
def login(
    request: Request,
    credentials: Credentials,
    sessions: SessionManager = Depends(get_sessions),
) -> Token:
    result = sessions.login(credentials)
    if isinstance(result, AuthFailure):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=result.reason)
    return Token(access_token=create_session_token(result.id, result.identity), user=result.identity)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
def logout(
    session: SessionRecord = Depends(get_current_session),
    sessions: SessionManager = Depends(get_sessions),
) -> Response:
    sessions.logout(session.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/me", response_model=Identity)
def me(identity: Identity = Depends(get_current_identity)) -> Identity:
    return identity
