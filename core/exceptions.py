"""
Service-layer exceptions.

Services raise these with the message the client should see. Anything else
escaping a service method is logged and replaced with a fixed message by
``service_errors`` so persistence and network error text never reaches a
response body.
"""

import functools
from typing import Any, Callable

from fastapi import status


class ServiceError(Exception):
    """Base exception for errors surfaced to API clients."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code: str = "INTERNAL_SERVER_ERROR"

    def __init__(self, message: str, details: Any = None):
        super().__init__(message)
        self.message = message
        self.details = details


class BadRequestError(ServiceError):
    """Raised for validation failures and state mismatches."""

    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "BAD_REQUEST"


class NotFoundError(ServiceError):
    """Raised when an owning resource (company, job, player) is missing."""

    status_code = status.HTTP_404_NOT_FOUND
    error_code = "NOT_FOUND"


class RequestTimeoutError(ServiceError):
    """Raised when waiting on an external system ran out of attempts."""

    status_code = status.HTTP_408_REQUEST_TIMEOUT
    error_code = "REQUEST_TIMEOUT"


class InternalServiceError(ServiceError):
    """Catch-all carrying a fixed, client-safe message."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code = "INTERNAL_SERVER_ERROR"


def service_errors(message: str) -> Callable:
    """
    Decorator for async service methods.

    Known ``ServiceError`` subclasses propagate unchanged. Any other exception
    is logged on the service's ``logger`` and re-raised as
    ``InternalServiceError(message)``.

    Usage:
        class JobService:
            @service_errors("Failed to fetch jobs")
            async def get_all_jobs(self, company_id, query):
                ...
    """

    def decorator(func: Callable):
        @functools.wraps(func)
        async def wrapper(self, *args, **kwargs):
            try:
                return await func(self, *args, **kwargs)
            except ServiceError:
                raise
            except Exception as exc:
                self.logger.error(
                    f"{func.__qualname__} failed: {type(exc).__name__}",
                    exc_info=True,
                )
                raise InternalServiceError(message) from exc

        return wrapper

    return decorator
