"""Application factory for the FastAPI app.

Centralizes app construction (middleware, handlers, routers and the shared
in-process state) so tests can build isolated apps.
"""

from __future__ import annotations

from fastapi import FastAPI

from coach_api.adapters.rate_limit.base import AbstractRateLimiter
from coach_api.adapters.rate_limit.in_memory import InMemoryFixedWindowRateLimiter
from coach_api.api.routes import coach_router, health_router, waitlist_router
from coach_api.core.config import settings
from coach_api.core.exception_handlers import setup_exception_handlers
from coach_api.core.logging import configure_logging
from coach_api.core.middleware import request_id_middleware
from coach_api.services.waitlist_service import WaitlistStore


def build_rate_limiter() -> InMemoryFixedWindowRateLimiter:
    """Create a limiter configured from settings."""
    return InMemoryFixedWindowRateLimiter(
        sweep_interval_ms=settings.app.rate_limit_sweep_interval_ms,
        retention_ms=settings.app.rate_limit_retention_ms,
    )


def create_app(
    *,
    rate_limiter: AbstractRateLimiter | None = None,
    waitlist_store: WaitlistStore | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application instance.

    Args:
        rate_limiter: Limiter shared by every throttled route; a fresh
            in-memory one is built when omitted.
        waitlist_store: Waitlist storage; a fresh one is built when omitted.

    Returns:
        Configured FastAPI app.
    """
    configure_logging(settings.log)

    app = FastAPI(
        title="Chess Coach API",
        description=(
            "Server endpoints of the chess coaching app: waitlist signups and "
            "game coaching, throttled per client with a fixed-window limiter."
        ),
        version="0.1.0",
        debug=settings.app.debug,
    )

    if rate_limiter is None:
        rate_limiter = build_rate_limiter()
    if waitlist_store is None:
        waitlist_store = WaitlistStore()
    app.state.rate_limiter = rate_limiter
    app.state.waitlist_store = waitlist_store

    app.middleware("http")(request_id_middleware)
    setup_exception_handlers(app)

    app.include_router(coach_router, prefix="/api")
    app.include_router(waitlist_router, prefix="/api")
    app.include_router(health_router)

    return app
