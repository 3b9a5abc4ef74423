"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from prontuario.auth import PIN_HEADER
from prontuario.config import settings
from prontuario.database import engine
from prontuario.exceptions import (
    AccessDeniedError,
    InvalidBackupError,
    NotFoundError,
    ProntuarioError,
    StorageUnavailableError,
    ValidationError,
)
from prontuario.repositories import RecordStore
from prontuario.routes import backup, events, patients, session
from prontuario.routes import settings as settings_routes
from prontuario.services.session import open_session

logger = logging.getLogger(__name__)

ERROR_STATUS: dict[type[ProntuarioError], int] = {
    ValidationError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    InvalidBackupError: status.HTTP_400_BAD_REQUEST,
    AccessDeniedError: status.HTTP_403_FORBIDDEN,
    StorageUnavailableError: status.HTTP_503_SERVICE_UNAVAILABLE,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the record store and build the application session."""
    store = RecordStore(engine)
    app.state.store = store
    app.state.session = await open_session(store)
    logger.info(
        "Session opened with %d patients and %d events",
        len(app.state.session.patients),
        len(app.state.session.events),
    )

    yield  # Application runs here

    await engine.dispose()


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses."""

    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)
        # Prevent clickjacking
        response.headers["X-Frame-Options"] = "DENY"
        # Prevent MIME type sniffing
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["Referrer-Policy"] = "no-referrer"
        # Records never leave the machine through a cache
        response.headers["Cache-Control"] = "no-store"
        return response


app = FastAPI(
    title="Prontuário",
    description="Offline electronic health record for a single practitioner",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(SecurityHeadersMiddleware)

# Parse comma-separated origins from config
_cors_origins = [origin.strip() for origin in settings.cors_origins.split(",") if origin.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_credentials=False,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=[PIN_HEADER, "Content-Type"],
    expose_headers=["Content-Disposition"],
)


@app.exception_handler(ProntuarioError)
async def domain_error_handler(request: Request, exc: ProntuarioError) -> JSONResponse:
    """Map domain errors to HTTP status codes."""
    status_code = next(
        (code for error_class, code in ERROR_STATUS.items() if isinstance(exc, error_class)),
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
    if status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


# Include API routers
app.include_router(patients.router, prefix="/api")
app.include_router(events.router, prefix="/api")
app.include_router(settings_routes.router, prefix="/api")
app.include_router(session.router, prefix="/api")
app.include_router(backup.router, prefix="/api")


@app.get("/health")
async def health_check() -> dict:
    """Health check endpoint."""
    return {"status": "healthy"}


@app.get("/")
async def root() -> dict:
    """Root endpoint with API info."""
    return {
        "name": "Prontuário API",
        "version": "0.1.0",
        "docs": "/docs",
    }
