"""Error taxonomy and the converters that turn errors into HTTP responses."""
from typing import Any, Optional, Sequence

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from taskmanager.utils.logger import get_logger

logger = get_logger(__name__)


class AppError(Exception):
    """Base exception for errors surfaced to API callers."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, headers: Optional[dict] = None):
        self.message = message
        self.headers = headers
        super().__init__(self.message)


class ValidationFailed(AppError):
    """Malformed or out-of-range field."""
    status_code = status.HTTP_400_BAD_REQUEST


class AuthenticationError(AppError):
    """Missing, invalid or revoked token. The message is always generic."""
    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, message: str = "Please authenticate."):
        super().__init__(message, headers={"WWW-Authenticate": "Bearer"})


class NotFound(AppError):
    """Record absent or not owned by the requester."""
    status_code = status.HTTP_404_NOT_FOUND


class UploadRejected(AppError):
    """Uploaded file has the wrong type or size."""
    status_code = status.HTTP_400_BAD_REQUEST


class StoreFailure(AppError):
    """Unexpected persistence error."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class ServiceUnavailable(AppError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


def error_response(exc: AppError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.message},
        headers=exc.headers,
    )


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("Request failed", path=request.url.path, error=exc.message)
    return error_response(exc)


def first_error_message(errors: Sequence[Any]) -> str:
    """Flatten the first pydantic error into a single "field: problem" line."""
    if not errors:
        return "Invalid request"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path"))
    return f"{location}: {first.get('msg')}" if location else str(first.get("msg"))


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render body/query validation failures as 400 instead of FastAPI's 422."""
    return error_response(ValidationFailed(first_error_message(exc.errors())))


def add_error_handlers(app: FastAPI) -> None:
    """Register the error-to-response converters on the application."""
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
