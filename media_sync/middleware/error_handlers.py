"""Map exceptions onto the ``{"error": {code, message, details}}`` response body."""

from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from media_sync.exceptions import ErrorCode, MediaSyncException
from media_sync.logging_config import get_logger, log_with_context

logger = get_logger(__name__)


def _error_response(
    status_code: int,
    code: ErrorCode,
    message: str,
    details: dict[str, Any] | None = None,
) -> JSONResponse:
    body: dict[str, Any] = {"code": code.value, "message": message}
    if details is not None:
        body["details"] = details
    return JSONResponse(status_code=status_code, content={"error": body})


async def media_sync_exception_handler(request: Request, exc: MediaSyncException) -> JSONResponse:
    """Unknown sessions, store lifecycle conflicts and transport outages.

    Client errors (4xx) are logged at info, server-side ones at warning.
    """
    log_with_context(
        logger,
        "info" if exc.status_code < 500 else "warning",
        "Request failed",
        error_code=exc.code.value,
        error_message=exc.message,
        status_code=exc.status_code,
        session_id=exc.details.get("session_id"),
        path=request.url.path,
        event_type="media_sync_error",
    )
    return _error_response(exc.status_code, exc.code, exc.message, exc.details)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Bad path or query values, e.g. a negative media key code."""
    errors = [{"loc": list(err["loc"]), "msg": err["msg"]} for err in exc.errors()]
    log_with_context(
        logger,
        "info",
        "Request validation failed",
        path=request.url.path,
        errors=errors,
        event_type="validation_error",
    )
    return _error_response(422, ErrorCode.VALIDATION_ERROR, "Invalid request", {"errors": errors})


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    log_with_context(
        logger,
        "error",
        "Unhandled exception",
        error=str(exc),
        error_type=type(exc).__name__,
        path=request.url.path,
        event_type="unhandled_error",
    )
    logger.error("Exception traceback:", exc_info=exc)
    return _error_response(500, ErrorCode.INTERNAL_ERROR, "Internal server error")


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(MediaSyncException, media_sync_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)
