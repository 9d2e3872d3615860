"""
Typed service errors.

Services raise one of the ``ServiceError`` subclasses below; the HTTP layer
maps the ``kind`` to a status code in one place instead of re-parsing
messages. NotFound is used both for "absent" and for "outside the caller's
scope" so existence never leaks.
"""
import logging
from enum import Enum

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class ErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    BAD_REQUEST = "bad_request"
    FORBIDDEN = "forbidden"
    UNAUTHORIZED = "unauthorized"
    UPSTREAM = "upstream"


class ServiceError(Exception):
    kind: ErrorKind = ErrorKind.BAD_REQUEST

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(ServiceError):
    kind = ErrorKind.NOT_FOUND


class BadRequestError(ServiceError):
    kind = ErrorKind.BAD_REQUEST


class ForbiddenError(ServiceError):
    kind = ErrorKind.FORBIDDEN


class UnauthorizedError(ServiceError):
    kind = ErrorKind.UNAUTHORIZED


class UpstreamError(ServiceError):
    """Payment gateway failed or answered with a non-success status."""

    kind = ErrorKind.UPSTREAM

    def __init__(self, message: str, retryable: bool = False):
        super().__init__(message)
        self.retryable = retryable


STATUS_CODES = {
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.BAD_REQUEST: 400,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.UNAUTHORIZED: 401,
    ErrorKind.UPSTREAM: 502,
}


def status_code_for(error: ServiceError) -> int:
    if isinstance(error, UpstreamError) and error.retryable:
        return 503
    return STATUS_CODES[error.kind]


async def service_error_handler(request: Request, exc: ServiceError):
    status_code = status_code_for(exc)
    if status_code >= 500:
        logger.warning(f"{request.method} {request.url.path} -> {status_code}: {exc.message}")

    return JSONResponse(
        status_code=status_code,
        content={"message": exc.message, "error": exc.kind.value},
    )


def register_error_handlers(app: FastAPI):
    app.add_exception_handler(ServiceError, service_error_handler)
