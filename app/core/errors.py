# app/core/errors.py
"""
Domain errors and their HTTP translation.

Services raise the StorefrontError subclasses below; repositories let
SQLAlchemy errors propagate. The cart service wraps failures of its store
in StoreError; any other SQLAlchemyError reaches `database_error_handler`
directly. Everything is translated to a JSON response
at the request boundary by the handlers registered in
`register_exception_handlers`, so clients only ever see a short message,
never a stack trace, raw input or driver error.
"""
import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


class StorefrontError(Exception):
    """Base class for errors that map to a client-facing status code."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(StorefrontError):
    status_code = status.HTTP_400_BAD_REQUEST


class AuthenticationError(StorefrontError):
    status_code = status.HTTP_401_UNAUTHORIZED


class NotFoundError(StorefrontError):
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(StorefrontError):
    status_code = status.HTTP_409_CONFLICT


class StoreError(StorefrontError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


GENERIC_SERVER_ERROR = "Internal server error"


async def storefront_error_handler(
    request: Request, exc: StorefrontError
) -> JSONResponse:
    headers = None
    if isinstance(exc, AuthenticationError):
        headers = {"WWW-Authenticate": "Bearer"}

    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        message = GENERIC_SERVER_ERROR
    else:
        message = exc.message

    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": message},
        headers=headers,
    )


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """
    Report which fields were rejected, not what was sent.

    Pydantic error messages can echo the offending input (e.g. a password),
    so only the dotted locations are returned.
    """
    fields = sorted(
        {".".join(str(part) for part in err.get("loc", ())) for err in exc.errors()}
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": "Invalid request", "fields": fields},
    )


async def database_error_handler(
    request: Request, exc: SQLAlchemyError
) -> JSONResponse:
    logger.exception("Database error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": GENERIC_SERVER_ERROR},
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": GENERIC_SERVER_ERROR},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register all exception handlers on the FastAPI app.

    Usage:
        from app.core.errors import register_exception_handlers
        register_exception_handlers(app)
    """
    app.add_exception_handler(StorefrontError, storefront_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
