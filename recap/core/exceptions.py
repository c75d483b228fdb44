"""
Custom exception classes and the enveloped error responses they render to.

Every error leaves the API as ``{"success": false, "error": "<detail>"}``.
"""
from typing import Dict, Optional

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger
from pydantic import BaseModel, ConfigDict
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException


class ErrorResponse(BaseModel):
    """Envelope returned for every failed request."""
    success: bool = False
    error: str

    model_config = ConfigDict(frozen=True)


class AppException(Exception):
    """Base application exception."""

    def __init__(
        self,
        status_code: int,
        error_type: str,
        title: str,
        detail: str,
        headers: Optional[Dict[str, str]] = None,
    ):
        self.status_code = status_code
        self.error_type = error_type
        self.title = title
        self.detail = detail
        self.headers = headers
        super().__init__(detail)


class BadRequestError(AppException):
    """Missing or invalid input."""

    def __init__(self, detail: str):
        super().__init__(
            status_code=400,
            error_type="validation_error",
            title="Bad Request",
            detail=detail,
        )


class AuthenticationError(AppException):
    """Missing, invalid or expired credential."""

    def __init__(self, detail: str = "Authentication required."):
        super().__init__(
            status_code=401,
            error_type="authentication_error",
            title="Unauthorized",
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class ForbiddenError(AppException):
    """Access forbidden exception."""

    def __init__(self, detail: str = "You do not have permission to perform this action."):
        super().__init__(
            status_code=403,
            error_type="forbidden",
            title="Forbidden",
            detail=detail,
        )


class InsufficientCreditsError(ForbiddenError):
    """The user has no credit left for a generation."""

    def __init__(self, detail: str = "Insufficient credits"):
        super().__init__(detail=detail)
        self.error_type = "insufficient_credits"


class NotFoundError(AppException):
    """
    Resource not found exception.

    Also raised for resources owned by someone else, so callers cannot tell
    other users' records from missing ones.
    """

    def __init__(self, resource: str):
        super().__init__(
            status_code=404,
            error_type="not_found",
            title="Resource Not Found",
            detail=f"{resource} not found",
        )


class RateLimitError(AppException):
    """Rate limit exceeded exception."""

    def __init__(self, detail: str = "Rate limit exceeded. Please try again later."):
        super().__init__(
            status_code=429,
            error_type="rate_limit_exceeded",
            title="Too Many Requests",
            detail=detail,
        )


class UpstreamServiceError(AppException):
    """An external collaborator (LLM provider, identity provider) failed."""

    def __init__(self, detail: str = "Summary generation failed"):
        super().__init__(
            status_code=500,
            error_type="upstream_failure",
            title="Upstream Failure",
            detail=detail,
        )


class InternalServerError(AppException):
    """Internal server error exception."""

    def __init__(self, detail: str = "An unexpected error occurred."):
        super().__init__(
            status_code=500,
            error_type="internal_error",
            title="Internal Server Error",
            detail=detail,
        )


def create_error_response(
    status_code: int,
    detail: str,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    """Create an enveloped JSON error response."""
    error = ErrorResponse(error=detail)
    return JSONResponse(
        status_code=status_code,
        content=error.model_dump(),
        headers=headers,
    )


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Handle AppException and its subclasses."""
    if exc.status_code >= 500:
        logger.error(f"{exc.title} on {request.url.path}: {exc.detail}")
    return create_error_response(exc.status_code, exc.detail, exc.headers)


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report request body/query validation failures as 400."""
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        problems.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    detail = "Invalid request: " + "; ".join(problems) if problems else "Invalid request"
    return create_error_response(400, detail)


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Envelope framework-level HTTP errors (unknown route, wrong method)."""
    return create_error_response(exc.status_code, str(exc.detail), getattr(exc, "headers", None))


async def rate_limit_exception_handler(
    request: Request, exc: RateLimitExceeded
) -> JSONResponse:
    """Translate slowapi's exception into a RateLimitError envelope."""
    error = RateLimitError(f"Rate limit exceeded: {exc.detail}")
    return create_error_response(error.status_code, error.detail)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last-resort handler; the traceback goes to the log, not to the client."""
    logger.opt(exception=exc).error(f"Unhandled error on {request.url.path}")
    return create_error_response(500, InternalServerError().detail)
