"""
Custom exceptions and error handlers.
"""
from typing import Any, Dict, Optional
from fastapi import Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from .logging import get_logger

logger = get_logger(__name__)


class ContentStudioException(Exception):
    """Base exception for the content studio API."""

    def __init__(
        self,
        message: str,
        error_code: str = "internal_error",
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}
        self.headers = headers
        super().__init__(self.message)


class ValidationException(ContentStudioException):
    """Validation error exception."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            error_code="validation_error",
            status_code=status.HTTP_400_BAD_REQUEST,
            details=details,
        )


class AuthenticationException(ContentStudioException):
    """Authentication error exception."""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(
            message=message,
            error_code="authentication_error",
            status_code=status.HTTP_401_UNAUTHORIZED,
        )


class NotFoundException(ContentStudioException):
    """Resource not found exception."""

    def __init__(self, message: str = "Resource not found"):
        super().__init__(
            message=message,
            error_code="not_found",
            status_code=status.HTTP_404_NOT_FOUND,
        )


class RateLimitException(ContentStudioException):
    """Rate limit exceeded exception."""

    def __init__(
        self,
        message: str = "Rate limit exceeded",
        reset_time: Optional[int] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        super().__init__(
            message=message,
            error_code="rate_limit_error",
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            details={"reset_time": reset_time} if reset_time is not None else None,
            headers=headers,
        )


class ExternalServiceException(ContentStudioException):
    """A third-party integration failed or is not configured."""

    def __init__(
        self,
        message: str,
        service: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.service = service
        super().__init__(
            message=message,
            error_code=f"{service}_error",
            status_code=status_code,
            details=details,
        )


def error_body(message: Any, error_code: str, details: Optional[Any] = None) -> Dict[str, Any]:
    """Build the error envelope shared by every handler."""
    body = {
        "success": False,
        "error": message,
        "code": error_code,
    }
    if details:
        body["details"] = details
    return body


async def content_studio_exception_handler(request: Request, exc: ContentStudioException) -> JSONResponse:
    """Handle application exceptions."""
    log = logger.warning if exc.status_code < 500 else logger.error
    log(
        "Application exception occurred",
        error_code=exc.error_code,
        message=exc.message,
        status_code=exc.status_code,
        details=exc.details,
        path=request.url.path,
        method=request.method,
    )

    return JSONResponse(
        status_code=exc.status_code,
        content=jsonable_encoder(error_body(exc.message, exc.error_code, exc.details)),
        headers=exc.headers,
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handle FastAPI validation errors."""
    logger.warning(
        "Validation error occurred",
        errors=exc.errors(),
        path=request.url.path,
        method=request.method,
    )

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=jsonable_encoder(
            error_body("Invalid request parameters", "validation_error", exc.errors())
        ),
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Handle FastAPI HTTP exceptions."""
    logger.warning(
        "HTTP exception occurred",
        status_code=exc.status_code,
        detail=exc.detail,
        path=request.url.path,
        method=request.method,
    )

    # Map status codes to error codes
    error_code_map = {
        400: "validation_error",
        401: "authentication_error",
        403: "authorization_error",
        404: "not_found",
        429: "rate_limit_error",
        500: "server_error",
        503: "service_unavailable",
    }

    error_code = error_code_map.get(exc.status_code, "http_error")

    return JSONResponse(
        status_code=exc.status_code,
        content=jsonable_encoder(error_body(exc.detail, error_code)),
        headers=getattr(exc, "headers", None),
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    logger.exception(
        "Unexpected exception occurred",
        exception_type=type(exc).__name__,
        path=request.url.path,
        method=request.method,
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body("An unexpected error occurred", "server_error"),
    )
