"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from attendance_capture.api.session import router as session_router
from attendance_capture.app_logging import configure_logging
from attendance_capture.containers import AppContainer
from attendance_capture.errors import (
    AttendanceError,
    CaptureFailed,
    DeviceUnavailable,
    InvalidSessionState,
    JobInProgress,
    NothingToSubmit,
    NotFound,
    PermissionDenied,
)

_ERROR_STATUS: dict[type[AttendanceError], int] = {
    NotFound: 404,
    JobInProgress: 409,
    InvalidSessionState: 409,
    NothingToSubmit: 422,
    PermissionDenied: 403,
    DeviceUnavailable: 503,
    CaptureFailed: 502,
}


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(session_router)

    @app.exception_handler(AttendanceError)
    async def attendance_error_handler(
        request: Request, exc: AttendanceError
    ) -> JSONResponse:
        status_code = _status_for(exc)
        logger.info(
            "%s %s failed: %s", request.method, request.url.path, exc.message
        )
        return JSONResponse(
            status_code=status_code,
            content={"error": type(exc).__name__, "message": exc.message},
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    return app


def _status_for(exc: AttendanceError) -> int:
    for error_type, status_code in _ERROR_STATUS.items():
        if isinstance(exc, error_type):
            return status_code
    return 400
