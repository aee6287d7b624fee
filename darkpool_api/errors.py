"""Exception handlers: typed pool errors to HTTP responses."""

from __future__ import annotations

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from darkpool_kernel.exceptions import (
    DarkPoolError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from darkpool_kernel.logging_config import get_logger

logger = get_logger("api.errors")

_STATUS_BY_TYPE: tuple[tuple[type[DarkPoolError], int], ...] = (
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (PersistenceError, status.HTTP_503_SERVICE_UNAVAILABLE),
)


def status_for(exc: DarkPoolError) -> int:
    for exc_type, code in _STATUS_BY_TYPE:
        if isinstance(exc, exc_type):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def _error_response(status_code: int, code: str, message: str, details=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "error": {
                "code": code,
                "message": message,
                "details": jsonable_encoder(details),
            },
        },
    )


async def dark_pool_error_handler(request: Request, exc: DarkPoolError) -> JSONResponse:
    status_code = status_for(exc)
    details = None
    if isinstance(exc, ValidationError):
        details = [
            {"code": e.code, "message": e.message, "field": e.field}
            for e in exc.errors
        ]

    if status_code >= 500:
        logger.error(
            "request_failed",
            extra={"method": request.method, "path": request.url.path},
            exc_info=exc,
        )
    else:
        logger.info(
            "request_rejected",
            extra={
                "method": request.method,
                "path": request.url.path,
                "status_code": status_code,
                "error_code": exc.code,
            },
        )
    return _error_response(status_code, exc.code, str(exc), details)


async def request_validation_error_handler(
    request: Request, exc: RequestValidationError,
) -> JSONResponse:
    """Unparseable bodies are client errors like any other invalid submission."""
    logger.info(
        "request_rejected",
        extra={
            "method": request.method,
            "path": request.url.path,
            "status_code": status.HTTP_400_BAD_REQUEST,
            "error_code": "INVALID_REQUEST",
        },
    )
    return _error_response(
        status.HTTP_400_BAD_REQUEST,
        "INVALID_REQUEST",
        "Request body must be a JSON object",
        exc.errors(),
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "request_unhandled_exception",
        extra={"method": request.method, "path": request.url.path},
        exc_info=exc,
    )
    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "INTERNAL_ERROR",
        "Internal server error",
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DarkPoolError, dark_pool_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
