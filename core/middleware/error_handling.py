"""
Error responses for the API.

All failures share one body shape:

    {"success": false, "message": "...",
     "error": {"code": "...", "path": "...", "method": "...",
               "request_id": "...", "details": ...}}

``setup_error_handlers`` covers exceptions raised inside routes;
``ErrorHandlingMiddleware`` is the outermost safety net for anything that
escapes the application (including middleware failures).
"""

import logging
import re
from typing import Any, Callable, Optional
from fastapi import Request, Response, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from sqlalchemy.exc import SQLAlchemyError, IntegrityError, OperationalError
from redis.exceptions import RedisError, ConnectionError as RedisConnectionError

from core.exceptions import ServiceError

logger = logging.getLogger(__name__)

# Patterns for sensitive data that must never reach a response body
SENSITIVE_PATTERNS = [
    re.compile(r'password["\s:=]+[^"\s,}]+', re.IGNORECASE),
    re.compile(r'token["\s:=]+[^"\s,}]+', re.IGNORECASE),
    re.compile(r'api[_-]?key["\s:=]+[^"\s,}]+', re.IGNORECASE),
    re.compile(r'secret["\s:=]+[^"\s,}]+', re.IGNORECASE),
    re.compile(r'authorization["\s:]+[^"\s,}]+', re.IGNORECASE),
    re.compile(r'bearer\s+[A-Za-z0-9._-]+', re.IGNORECASE),
]


def sanitize_error_message(message: Any) -> str:
    """Remove credentials from an error message."""
    sanitized = str(message)
    for pattern in SENSITIVE_PATTERNS:
        sanitized = pattern.sub('[REDACTED]', sanitized)
    return sanitized


def format_validation_errors(exc: RequestValidationError) -> list[dict[str, Any]]:
    errors = []
    for error in exc.errors():
        errors.append(
            {
                "field": ".".join(str(loc) for loc in error["loc"]),
                "message": sanitize_error_message(error["msg"]),
                "type": error["type"],
            }
        )
    return errors


def error_response(
    status_code: int,
    code: str,
    message: str,
    path: str,
    method: str,
    request_id: Optional[str] = None,
    details: Any = None,
) -> JSONResponse:
    error: dict[str, Any] = {"code": code, "path": path, "method": method}
    if request_id:
        error["request_id"] = request_id
    if details is not None:
        error["details"] = details
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": message, "error": error},
    )


def _request_id(request: Request) -> Optional[str]:
    return getattr(request.state, "request_id", None) or request.headers.get("x-request-id")


class ErrorHandlingMiddleware:
    """
    Outermost ASGI middleware turning escaped exceptions into error bodies.

    Database and cache failures are reported with generic messages; the
    original exception is only logged.
    """

    def __init__(self, app: Callable, debug: bool = False):
        """
        Initialize error handling middleware.

        Args:
            app: The ASGI application
            debug: Whether to include exception type details in responses
        """
        self.app = app
        self.debug = debug

    async def __call__(self, scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        try:
            await self.app(scope, receive, send)
        except Exception as exc:
            response = self._handle_exception(exc, scope)
            await response(scope, receive, send)

    def _classify(self, exc: Exception) -> tuple[int, str, str]:
        """(status, code, client message) for an exception."""
        if isinstance(exc, ServiceError):
            return exc.status_code, exc.error_code, exc.message
        if isinstance(exc, StarletteHTTPException):
            return exc.status_code, "HTTP_EXCEPTION", sanitize_error_message(exc.detail)
        if isinstance(exc, RequestValidationError):
            return (
                status.HTTP_422_UNPROCESSABLE_ENTITY,
                "VALIDATION_ERROR",
                "Request validation failed",
            )
        if isinstance(exc, IntegrityError):
            return (
                status.HTTP_409_CONFLICT,
                "INTEGRITY_ERROR",
                "Database integrity constraint violated",
            )
        if isinstance(exc, OperationalError):
            return (
                status.HTTP_503_SERVICE_UNAVAILABLE,
                "DATABASE_ERROR",
                "Database service temporarily unavailable",
            )
        if isinstance(exc, SQLAlchemyError):
            return (
                status.HTTP_500_INTERNAL_SERVER_ERROR,
                "DATABASE_ERROR",
                "A database error occurred",
            )
        if isinstance(exc, RedisConnectionError):
            return (
                status.HTTP_503_SERVICE_UNAVAILABLE,
                "CACHE_ERROR",
                "Cache service temporarily unavailable",
            )
        if isinstance(exc, RedisError):
            return (
                status.HTTP_500_INTERNAL_SERVER_ERROR,
                "CACHE_ERROR",
                "A cache error occurred",
            )
        if isinstance(exc, TimeoutError):
            return status.HTTP_504_GATEWAY_TIMEOUT, "TIMEOUT", "The request timed out"
        return (
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "INTERNAL_SERVER_ERROR",
            "An unexpected error occurred",
        )

    def _handle_exception(self, exc: Exception, scope: dict) -> Response:
        request_path = scope.get("path", "unknown")
        request_method = scope.get("method", "unknown")
        status_code, error_code, message = self._classify(exc)

        details = None
        if isinstance(exc, RequestValidationError):
            details = format_validation_errors(exc)
        elif self.debug and status_code >= 500:
            details = {
                "type": type(exc).__name__,
                "message": sanitize_error_message(exc),
            }

        if status_code >= 500:
            logger.error(
                f"Unhandled exception: {request_method} {request_path} - "
                f"{type(exc).__name__}: {sanitize_error_message(exc)}",
                exc_info=True,
            )
        else:
            logger.warning(
                f"{error_code}: {request_method} {request_path} - "
                f"Status: {status_code}, Message: {message}"
            )

        request_id = None
        headers = dict(scope.get("headers") or [])
        if headers.get(b"x-request-id"):
            request_id = headers[b"x-request-id"].decode()

        return error_response(
            status_code,
            error_code,
            message,
            request_path,
            request_method,
            request_id=request_id,
            details=details,
        )


def setup_error_handlers(app):
    """
    Set up exception handlers for FastAPI application.

    Args:
        app: FastAPI application instance
    """

    @app.exception_handler(ServiceError)
    async def service_exception_handler(request: Request, exc: ServiceError):
        """Handle errors raised deliberately by services."""
        if exc.status_code >= 500:
            logger.error(f"{exc.error_code}: {request.method} {request.url.path} - {exc.message}")
        else:
            logger.info(f"{exc.error_code}: {request.method} {request.url.path} - {exc.message}")
        return error_response(
            exc.status_code,
            exc.error_code,
            exc.message,
            str(request.url.path),
            request.method,
            request_id=_request_id(request),
            details=exc.details,
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """Handle HTTP exceptions."""
        return error_response(
            exc.status_code,
            "HTTP_EXCEPTION",
            sanitize_error_message(exc.detail),
            str(request.url.path),
            request.method,
            request_id=_request_id(request),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Handle validation errors."""
        return error_response(
            status.HTTP_422_UNPROCESSABLE_ENTITY,
            "VALIDATION_ERROR",
            "Request validation failed",
            str(request.url.path),
            request.method,
            request_id=_request_id(request),
            details=format_validation_errors(exc),
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        """Handle all other exceptions."""
        logger.error(
            f"Unhandled exception: {request.method} {request.url.path} - "
            f"{type(exc).__name__}: {sanitize_error_message(exc)}",
            exc_info=True
        )
        return error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "INTERNAL_SERVER_ERROR",
            "An unexpected error occurred",
            str(request.url.path),
            request.method,
            request_id=_request_id(request),
        )
