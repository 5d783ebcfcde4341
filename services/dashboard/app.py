from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from escola.auth import EmailDirectoryAuthenticator
from escola.config import get_settings
from escola.exceptions import (
    BookingConflictError,
    BookingNotFoundError,
    BookingValidationError,
    EscolaError,
    InvalidTransitionError,
    PermissionDeniedError,
    ResourceNotFoundError,
    StoreClosedError,
)
from escola.logging_middleware import add_audit_middleware
from escola.rate_limit import apply_rate_limiter
from escola.schemas import ConflictDetail
from escola.session import SessionManager
from escola.storage import KeyValueStorage, storage_from_settings
from escola.store import DirectoryStore

from .routers import admin, auth, bookings, directory, reports

settings = get_settings()

_ERROR_STATUS = {
    BookingValidationError: status.HTTP_400_BAD_REQUEST,
    ResourceNotFoundError: status.HTTP_404_NOT_FOUND,
    BookingNotFoundError: status.HTTP_404_NOT_FOUND,
    PermissionDeniedError: status.HTTP_403_FORBIDDEN,
    InvalidTransitionError: status.HTTP_409_CONFLICT,
    StoreClosedError: status.HTTP_503_SERVICE_UNAVAILABLE,
}


@asynccontextmanager
async def lifespan(fastapi_app: FastAPI):
    storage: KeyValueStorage = fastapi_app.state.storage
    store = DirectoryStore(storage).open()
    sessions = SessionManager(
        storage,
        EmailDirectoryAuthenticator(store),
        ttl_seconds=settings.session_ttl_minutes * 60,
    )
    sessions.restore()
    fastapi_app.state.store = store
    fastapi_app.state.sessions = sessions
    try:
        yield
    finally:
        store.close()


def escola_error_handler(_: Request, exc: EscolaError) -> JSONResponse:
    if isinstance(exc, BookingConflictError):
        body = ConflictDetail(detail=exc.message, conflicts=exc.conflicts)
        return JSONResponse(status_code=status.HTTP_409_CONFLICT, content=body.model_dump(mode="json", by_alias=True))
    status_code = next(
        (code for error_type, code in _ERROR_STATUS.items() if isinstance(exc, error_type)),
        status.HTTP_400_BAD_REQUEST,
    )
    return JSONResponse(status_code=status_code, content={"detail": exc.message})


def create_app(storage: Optional[KeyValueStorage] = None) -> FastAPI:
    fastapi_app = FastAPI(title="Escola Agenda", version="0.1.0", lifespan=lifespan)
    fastapi_app.state.storage = storage if storage is not None else storage_from_settings(settings)
    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    apply_rate_limiter(fastapi_app)
    add_audit_middleware(fastapi_app, "dashboard")
    fastapi_app.add_exception_handler(EscolaError, escola_error_handler)

    @fastapi_app.get("/health", tags=["health"])
    def health() -> dict[str, str]:
        return {"status": "ok", "service": "dashboard"}

    fastapi_app.include_router(auth.router)
    fastapi_app.include_router(directory.router)
    fastapi_app.include_router(bookings.router)
    fastapi_app.include_router(admin.router)
    fastapi_app.include_router(reports.router)
    return fastapi_app


app = create_app()
