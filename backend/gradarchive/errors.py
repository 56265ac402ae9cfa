"""Typed HTTP failures raised by gates, validators and services.

Every failure carries its own status code and is serialised by the
handlers in :mod:`gradarchive.api.handlers` as a flat ``{message, status}``
body.
"""

from __future__ import annotations

import functools
import logging
from typing import Any, Awaitable, Callable, TypeVar

logger = logging.getLogger("gradarchive.errors")

T = TypeVar("T")


class HttpError(Exception):
    """Base class for failures that map directly onto an HTTP status."""

    status_code: int = 500
    default_message: str = "Something went wrong"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_body(self) -> dict[str, Any]:
        return {"message": self.message, "status": self.status_code}


class BadRequestError(HttpError):
    status_code = 400
    default_message = "Bad request"


class UnauthorizedError(HttpError):
    status_code = 401
    default_message = "Unauthorized"


class ForbiddenError(HttpError):
    status_code = 403
    default_message = "You are not allowed to do that"


class NotFoundError(HttpError):
    status_code = 404
    default_message = "Not found"


class ConflictError(HttpError):
    status_code = 409
    default_message = "Conflict"


class ValidationError(HttpError):
    """Schema violation; carries the ordered list of ``{path, message}``."""

    status_code = 422
    default_message = "Invalid request data"

    def __init__(self, violations: list[dict[str, str]], message: str | None = None) -> None:
        self.violations = violations
        super().__init__(message)

    def to_body(self) -> dict[str, Any]:
        body = super().to_body()
        body["errors"] = self.violations
        return body


class InternalServerError(HttpError):
    status_code = 500
    default_message = "Something went wrong"


def store_call(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
    """Wrap a service coroutine so lower-level failures surface as 500s.

    Typed :class:`HttpError` failures pass through untouched; anything else
    (driver errors, integrity errors, SDK errors) becomes an
    :class:`InternalServerError` that keeps the original message text.
    """

    @functools.wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> T:
        try:
            return await func(*args, **kwargs)
        except HttpError:
            raise
        except Exception as exc:
            logger.debug("%s failed: %s", func.__qualname__, exc)
            raise InternalServerError(str(exc) or None) from exc

    return wrapper
