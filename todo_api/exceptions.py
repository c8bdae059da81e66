"""Custom exceptions and error handlers for todo-api."""

from enum import StrEnum

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from starlette.exceptions import HTTPException as StarletteHTTPException

from todo_api.config import settings
from todo_api.logger import get_logger

log = get_logger(__name__)


class ErrorCode(StrEnum):
    """Machine-readable error codes returned in the error envelope."""

    VALIDATION = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    CONFLICT = "CONFLICT"
    TOO_MANY_REQUESTS = "TOO_MANY_REQUESTS"
    INTERNAL = "INTERNAL_ERROR"


class ErrorDetail(BaseModel):
    """Error response envelope."""

    error: str = Field(..., description="Error message")
    code: ErrorCode = Field(..., description="Error code")
    details: str | None = Field(None, description="Underlying cause (debug only)")
    request_id: str | None = Field(None, description="Request ID for tracking")


class APIError(Exception):
    """Base exception for API errors."""

    code: ErrorCode = ErrorCode.INTERNAL

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: str | None = None,
    ) -> None:
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(self.message)


class ValidationError(APIError):
    """Invalid input."""

    code = ErrorCode.VALIDATION

    def __init__(self, message: str = "Invalid input", details: str | None = None) -> None:
        super().__init__(message, status.HTTP_400_BAD_REQUEST, details)


class NotFoundError(APIError):
    """Resource not found error."""

    code = ErrorCode.NOT_FOUND

    def __init__(self, message: str = "Resource not found") -> None:
        super().__init__(message, status_code=status.HTTP_404_NOT_FOUND)


class ConflictError(APIError):
    """Resource already exists (unique constraint)."""

    code = ErrorCode.CONFLICT

    def __init__(self, message: str = "Conflict", details: str | None = None) -> None:
        super().__init__(message, status.HTTP_409_CONFLICT, details)


class UnauthorizedError(APIError):
    """Unauthorized error."""

    code = ErrorCode.UNAUTHORIZED

    def __init__(self, message: str = "Unauthorized", details: str | None = None) -> None:
        super().__init__(message, status.HTTP_401_UNAUTHORIZED, details)


class InternalError(APIError):
    """Unexpected failure in a collaborator (hashing, storage, ...)."""

    code = ErrorCode.INTERNAL

    def __init__(
        self, message: str = "Internal server error", details: str | None = None
    ) -> None:
        super().__init__(message, status.HTTP_500_INTERNAL_SERVER_ERROR, details)


class DatabaseError(InternalError):
    """Database operation failed."""

    def __init__(self, message: str = "Database error", details: str | None = None) -> None:
        super().__init__(message, details)


_STATUS_CODES = {
    status.HTTP_400_BAD_REQUEST: ErrorCode.VALIDATION,
    status.HTTP_401_UNAUTHORIZED: ErrorCode.UNAUTHORIZED,
    status.HTTP_403_FORBIDDEN: ErrorCode.FORBIDDEN,
    status.HTTP_404_NOT_FOUND: ErrorCode.NOT_FOUND,
    status.HTTP_409_CONFLICT: ErrorCode.CONFLICT,
    status.HTTP_429_TOO_MANY_REQUESTS: ErrorCode.TOO_MANY_REQUESTS,
}


def error_response(
    request: Request,
    status_code: int,
    message: str,
    code: ErrorCode,
    details: str | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Render the error envelope. details are dropped unless expose_error_details is set."""
    error_detail = ErrorDetail(
        error=message,
        code=code,
        details=details if settings.expose_error_details else None,
        request_id=getattr(request.state, "request_id", None),
    )
    return JSONResponse(
        status_code=status_code,
        content=error_detail.model_dump(mode="json", exclude_none=True),
        headers=headers,
    )


async def api_error_handler(  # noqa: RUF029 - FastAPI requires async exception handlers
    request: Request, exc: APIError
) -> JSONResponse:
    """Handle APIError exceptions."""
    if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        log.error(
            f"{exc.__class__.__name__}: {exc.message}",
            extra={"error_details": exc.details},
        )
    headers = None
    if exc.status_code == status.HTTP_401_UNAUTHORIZED:
        headers = {"WWW-Authenticate": "Bearer"}
    return error_response(
        request, exc.status_code, exc.message, exc.code, exc.details, headers
    )


async def http_exception_handler(  # noqa: RUF029 - FastAPI requires async exception handlers
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Render framework HTTP errors (404 route, 405 method, ...) in the error envelope."""
    return error_response(
        request,
        exc.status_code,
        str(exc.detail),
        _STATUS_CODES.get(exc.status_code, ErrorCode.INTERNAL),
        headers=getattr(exc, "headers", None),
    )


async def general_exception_handler(  # noqa: RUF029 - FastAPI requires async exception handlers
    request: Request, exc: Exception
) -> JSONResponse:
    """Handle unexpected exceptions."""
    log.error("Unhandled exception", exc_info=exc)
    return error_response(
        request,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Internal server error",
        ErrorCode.INTERNAL,
        details=str(exc),
    )


async def validation_exception_handler(  # noqa: RUF029 - FastAPI requires async exception handlers
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report request body/query validation failures as 400."""
    errors = [
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
        for error in exc.errors()
    ]
    log.info(f"Validation error: {'; '.join(errors)}")
    # field-level messages describe the caller's input, so they are always returned
    error_detail = ErrorDetail(
        error="Invalid input: " + "; ".join(errors),
        code=ErrorCode.VALIDATION,
        request_id=getattr(request.state, "request_id", None),
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_detail.model_dump(mode="json", exclude_none=True),
    )
