"""Exception handlers for converting custom exceptions to HTTP responses."""

import logging

from fastapi import Request, status
from fastapi.responses import JSONResponse

from backend.app.core.exceptions import (
    ContestException,
    ValidationError,
    ConflictError,
    NotFoundError,
    UnauthorizedError,
    ForbiddenError,
    StorageError,
)

logger = logging.getLogger(__name__)


async def contest_exception_handler(request: Request, exc: ContestException) -> JSONResponse:
    """
    Handle all contest exceptions and convert to appropriate HTTP responses.

    Args:
        request: The incoming request
        exc: The exception that was raised

    Returns:
        JSONResponse with appropriate status code, error details and reason code
    """
    # Map exception types to HTTP status codes
    if isinstance(exc, ValidationError):
        status_code = status.HTTP_400_BAD_REQUEST
    elif isinstance(exc, ConflictError):
        status_code = status.HTTP_409_CONFLICT
    elif isinstance(exc, NotFoundError):
        status_code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, UnauthorizedError):
        status_code = status.HTTP_401_UNAUTHORIZED
    elif isinstance(exc, ForbiddenError):
        status_code = status.HTTP_403_FORBIDDEN
    elif isinstance(exc, StorageError):
        logger.error(f"[STORAGE] {request.method} {request.url.path} failed: {exc.message}")
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    else:
        # Generic ContestException
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, UnauthorizedError) else None

    return JSONResponse(
        status_code=status_code,
        content={
            "detail": exc.message,
            "type": exc.__class__.__name__,
            "reason": exc.reason.value,
            **({"info": exc.details} if exc.details else {})
        },
        headers=headers,
    )


def register_exception_handlers(app):
    """
    Register all custom exception handlers with the FastAPI app.

    Args:
        app: FastAPI application instance
    """
    app.add_exception_handler(ContestException, contest_exception_handler)
