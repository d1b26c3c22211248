"""Global exception handlers for consistent error responses.

Design:
- ValidationAppError and RequestValidationError → 400
- RateLimitedAppError → 429 with Retry-After (and X-RateLimit-* when enabled)
- Unexpected Exception → generic 500 (safety net)
- All responses include request_id for tracing
"""

import logging

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from coach_api.core.errors import AppError, RateLimitedAppError
from coach_api.core.logging import get_request_id
from coach_api.core.request_body import validation_error_from

logger = logging.getLogger(__name__)


def _status_for(exc: AppError) -> int:
    if isinstance(exc, RateLimitedAppError):
        return 429
    return 400


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Handle application errors with a consistent JSON body.

    The body always carries ``error.code``, ``error.message`` and
    ``error.request_id``; ``error.details`` is present when the error has
    structured context. Throttling errors also expose ``error.retry_after``.

    Args:
        request: FastAPI request object.
        exc: AppError instance (or subclass).

    Returns:
        JSONResponse with the mapped status code.
    """
    status_code = _status_for(exc)

    logger.warning(
        "app_error_handled",
        extra={
            "error_code": exc.code,
            "status_code": status_code,
            "has_details": bool(exc.details),
            "request_path": request.url.path,
        },
    )

    error_content: dict = {
        "code": exc.code,
        "message": exc.message,
        "request_id": get_request_id(),
    }
    if exc.details:
        error_content["details"] = exc.details

    headers: dict[str, str] | None = None
    if isinstance(exc, RateLimitedAppError):
        error_content["retry_after"] = exc.retry_after
        headers = {"Retry-After": str(exc.retry_after)}
        headers.update(exc.headers or {})

    return JSONResponse(
        status_code=status_code,
        content={"error": error_content},
        headers=headers,
    )


async def request_validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Render FastAPI's own parameter validation failures as 400 app errors."""
    return await app_error_handler(request, validation_error_from(exc.errors()))


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Fallback handler for unexpected errors.

    Logs the failure server-side and returns a generic message so no
    implementation details reach the client.
    """
    logger.error(
        "unhandled_exception",
        extra={
            "error_type": type(exc).__name__,
            "error_msg": str(exc),
            "request_path": request.url.path,
            "request_method": request.method,
        },
    )

    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "internal_server_error",
                "message": "An unexpected error occurred. Please try again later.",
                "request_id": get_request_id(),
            }
        },
    )


def setup_exception_handlers(app) -> None:
    """Register all exception handlers with a FastAPI app.

    Args:
        app: FastAPI application instance.
    """
    app.exception_handler(AppError)(app_error_handler)
    app.exception_handler(RequestValidationError)(request_validation_error_handler)
    app.exception_handler(Exception)(general_exception_handler)
