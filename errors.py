"""
Application error hierarchy and FastAPI exception handlers.

AppError is the base for all typed errors. Core code (repository, services)
raises these; the global exception handler converts them to consistent JSON
responses, so nothing below the route layer touches status codes or headers.

Authorization failures on mutating endpoints are reported as NotFoundError
so callers cannot discover which document IDs exist. ForbiddenError is reserved
for share requests that try to hand out permissions the caller lacks.

Non-AppError exceptions bubble up as 500s (with Sentry reporting in production).
"""

from __future__ import annotations

from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from shared.logging import get_logger

log = get_logger(__name__)


class AppError(Exception):
    """Base application error. All typed errors inherit from this."""

    status_code: int = 500
    error_code: str = "internal_error"

    def __init__(
        self,
        message: str,
        *,
        field: Optional[str] = None,
        details: Optional[Any] = None,
        headers: Optional[dict[str, str]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.field = field
        self.details = details
        self.headers = headers

    def to_dict(self) -> dict:
        payload: dict = {"error": self.message, "code": self.error_code}
        if self.field is not None:
            payload["field"] = self.field
        if self.details is not None:
            payload["details"] = self.details
        return payload


class ValidationError(AppError):
    status_code = 400
    error_code = "validation_error"


class AuthenticationError(AppError):
    status_code = 401
    error_code = "authentication_error"


class InvalidTokenError(AuthenticationError):
    """Bearer token is malformed, badly signed, expired or carries unknown claims."""

    error_code = "invalid_token"


class ForbiddenError(AppError):
    status_code = 403
    error_code = "forbidden"


class NotFoundError(AppError):
    status_code = 404
    error_code = "not_found"


class ConflictError(AppError):
    status_code = 409
    error_code = "conflict"


class RateLimitError(AppError):
    status_code = 429
    error_code = "rate_limit_exceeded"


class StorageError(AppError):
    """The persistence layer failed. Fatal for the request, never retried here."""

    status_code = 503
    error_code = "storage_error"


def document_not_found() -> NotFoundError:
    return NotFoundError("document not found")


def _request_id(request: Request) -> Optional[str]:
    return getattr(request.state, "request_id", None)


def _error_response(
    request: Request,
    status_code: int,
    payload: dict,
    headers: Optional[dict[str, str]] = None,
) -> JSONResponse:
    payload["path"] = request.url.path
    payload["request_id"] = _request_id(request)
    return JSONResponse(status_code=status_code, content=payload, headers=headers)


def register_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers on the FastAPI app."""

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        if isinstance(exc, StorageError):
            log.error(
                "storage_error",
                path=request.url.path,
                error=exc.message,
                cause=repr(exc.__cause__) if exc.__cause__ else None,
            )
        return _error_response(request, exc.status_code, exc.to_dict(), exc.headers)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        errors = exc.errors()
        field = None
        if errors and errors[0].get("loc"):
            field = str(errors[0]["loc"][-1])
        payload = {
            "error": errors[0]["msg"] if errors else "invalid request",
            "code": ValidationError.error_code,
        }
        if field is not None:
            payload["field"] = field
        return _error_response(request, ValidationError.status_code, payload)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        # Sentry integration: if sentry_sdk is initialized it will auto-capture
        # unhandled exceptions before this handler fires.
        log.error(
            "unhandled_exception",
            path=request.url.path,
            error=str(exc),
            error_type=type(exc).__name__,
            exc_info=exc,
        )
        return _error_response(
            request,
            500,
            {"error": "An internal server error occurred.", "code": "internal_error"},
        )
