"""Application-level exception types.

Routes and dependencies raise these; ``exception_handlers`` turns them into
consistent JSON error responses.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, NotRequired, TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability and clients."""

    field: str
    limit: int
    remaining: int
    retry_after: int
    window_ms: int
    context: NotRequired[dict[str, Any]]


@dataclass
class AppError(Exception):
    """Base error for application failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable error message.
        details: Optional structured details for debugging/observability.
    """

    code: str
    message: str
    details: ErrorDetails | None = None

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)


class ValidationAppError(AppError):
    """Raised when request input is invalid."""


@dataclass
class RateLimitedAppError(AppError):
    """Raised when a client exhausted its budget for the current window.

    Attributes:
        retry_after: Whole seconds until the client's window resets.
        headers: Extra response headers (Retry-After, X-RateLimit-*).
    """

    retry_after: int = 0
    headers: dict[str, str] | None = None
