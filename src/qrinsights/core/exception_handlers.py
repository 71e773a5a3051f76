"""Global exception handlers for FastAPI."""

import sentry_sdk
from fastapi import Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from qrinsights.core.errors import AppError, DatabaseError, InternalError
from qrinsights.core.logging import get_logger

logger = get_logger(__name__)


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """
    Handle all AppError exceptions and convert to JSON response.

    Returns standardized error format:
    {
        "error": "Serial number is required",
        "code": "VALIDATION_ERROR"
    }
    """
    log = logger.warning if exc.status_code < 500 else logger.error
    log(
        "app_error",
        code=exc.code,
        status_code=exc.status_code,
        error=exc.message,
        path=request.url.path,
    )
    error_response = exc.to_response()
    return JSONResponse(
        status_code=exc.status_code,
        content=error_response.model_dump(exclude_none=True),
    )


async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Store failures become a 500 carrying the driver's message. Never retried."""
    logger.error(
        "database_error",
        error=str(exc),
        error_type=type(exc).__name__,
        path=request.url.path,
        exc_info=exc,
    )
    sentry_sdk.capture_exception(exc)
    message = str(getattr(exc, "orig", None) or exc)
    return await app_error_handler(request, DatabaseError(message))


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last resort: any other failure is a 500 scoped to this request."""
    logger.error(
        "unhandled_error",
        error=str(exc),
        error_type=type(exc).__name__,
        path=request.url.path,
        exc_info=exc,
    )
    sentry_sdk.capture_exception(exc)
    return await app_error_handler(request, InternalError(str(exc) or type(exc).__name__))


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Routing errors (404, 405) in the same body shape as everything else."""
    logger.warning(
        "http_exception",
        status_code=exc.status_code,
        detail=exc.detail,
        path=request.url.path,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail), "code": "HTTP_ERROR"},
        headers=getattr(exc, "headers", None),
    )


def register_exception_handlers(app) -> None:
    """Register all custom exception handlers with FastAPI app."""
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
