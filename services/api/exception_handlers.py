"""FastAPI exception handlers for file server exceptions."""

from __future__ import annotations

from fastapi import Request, status
from fastapi.responses import JSONResponse
from loguru import logger

from fileserver.exceptions import (
    ConfigurationError,
    FileServerError,
    NotFoundError,
    StorageError,
    ValidationError,
)


async def fileserver_exception_handler(request: Request, exc: FileServerError) -> JSONResponse:
    """Map file server exceptions onto HTTP status codes without leaking storage internals."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = exc.message
    details = exc.details

    if isinstance(exc, ValidationError):
        status_code = status.HTTP_400_BAD_REQUEST
    elif isinstance(exc, NotFoundError):
        status_code = status.HTTP_404_NOT_FOUND
        message = "File not found"
        details = {}
    elif isinstance(exc, (StorageError, ConfigurationError)):
        message = "Storage operation failed"
        details = {}

    logger.opt(exception=exc if status_code >= 500 else None).log(
        "ERROR" if status_code >= 500 else "DEBUG",
        "File server exception on {method} {path}: {type} - {message}",
        method=request.method,
        path=request.url.path,
        type=type(exc).__name__,
        message=exc.message,
    )

    return JSONResponse(
        status_code=status_code,
        content={
            "error": type(exc).__name__,
            "message": message,
            "details": details,
        },
    )
