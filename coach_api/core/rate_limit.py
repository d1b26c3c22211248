"""Rate limiting dependency for FastAPI routes.

This module wires the rate limiting adapter into the HTTP layer.

Design goals:
- The limiter instance lives on ``app.state`` (set by ``create_app``); there
  is no module-level singleton, so each app (and each test) owns its table.
- Routes opt in per policy: ``Depends(enforce_rate_limit("coach"))``.
- Policies are read from settings on every request so config overrides in
  tests take effect without rebuilding the app.

Keys are ``"<policy>:<client ip>"``, the client ip being the first
``X-Forwarded-For`` entry when a proxy sets it.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Annotated, Awaitable, Callable

from fastapi import Depends, Request

from coach_api.adapters.rate_limit.base import AbstractRateLimiter, RateLimitDecision
from coach_api.core.config import settings
from coach_api.core.errors import RateLimitedAppError
from coach_api.core.logging import hash_identifier

logger = logging.getLogger(__name__)

UNKNOWN_CLIENT = "unknown"


@dataclass(frozen=True)
class RateLimitPolicy:
    """Named limit applied to a group of routes."""

    name: str
    limit: int
    window_ms: int


def get_policy(name: str) -> RateLimitPolicy:
    """Build the policy ``name`` from the current settings.

    Raises:
        KeyError: If no ``{name}_rate_limit_*`` settings exist.
    """

    app_settings = settings.app
    try:
        limit = getattr(app_settings, f"{name}_rate_limit_requests")
        window_ms = getattr(app_settings, f"{name}_rate_limit_window_ms")
    except AttributeError as exc:
        raise KeyError(f"unknown rate limit policy: {name}") from exc
    return RateLimitPolicy(name=name, limit=limit, window_ms=window_ms)


def get_rate_limiter(request: Request) -> AbstractRateLimiter:
    """Return the limiter attached to the running app."""

    return request.app.state.rate_limiter


def get_client_ip(request: Request) -> str:
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        first = forwarded_for.split(",")[0].strip()
        if first:
            return first
    if request.client and request.client.host:
        return request.client.host
    return UNKNOWN_CLIENT


def build_rate_limit_key(policy: RateLimitPolicy, client_ip: str) -> str:
    return f"{policy.name}:{client_ip}"


def retry_after_seconds(decision: RateLimitDecision) -> int:
    """Whole seconds a blocked client should wait (never 0)."""

    return max(1, math.ceil(decision.reset_in_ms / 1000))


def _throttle_headers(policy: RateLimitPolicy, decision: RateLimitDecision) -> dict[str, str]:
    return {
        "X-RateLimit-Limit": str(policy.limit),
        "X-RateLimit-Remaining": str(decision.remaining),
        "X-RateLimit-Reset": str(retry_after_seconds(decision)),
    }


def enforce_rate_limit(
    policy_name: str,
) -> Callable[..., Awaitable[RateLimitDecision | None]]:
    """Create a FastAPI dependency enforcing the policy ``policy_name``.

    Each call consumes one attempt from the client's budget. Blocked attempts
    raise RateLimitedAppError, rendered as HTTP 429 by the exception handlers.

    Args:
        policy_name: Settings prefix of the policy (e.g., ``"coach"``).

    Returns:
        Dependency returning the decision, or None when limiting is disabled.
    """

    async def dependency(
        request: Request,
        limiter: Annotated[AbstractRateLimiter, Depends(get_rate_limiter)],
    ) -> RateLimitDecision | None:
        if not settings.app.rate_limit_enabled:
            return None

        policy = get_policy(policy_name)
        key = build_rate_limit_key(policy, get_client_ip(request))
        decision = limiter.check(key, policy.limit, policy.window_ms)

        log_extra = {
            "policy": policy.name,
            "key_hash": hash_identifier(key),
            "limit": policy.limit,
            "remaining": decision.remaining,
            "window_ms": policy.window_ms,
        }

        if decision.allowed:
            logger.info("rate_limit.allowed", extra=log_extra)
            return decision

        retry_after = retry_after_seconds(decision)
        logger.warning(
            "rate_limit.exceeded",
            extra={**log_extra, "retry_after_s": retry_after},
        )

        raise RateLimitedAppError(
            code="rate_limited",
            message="Too many requests. Please try again later.",
            details={
                "limit": policy.limit,
                "remaining": decision.remaining,
                "retry_after": retry_after,
            },
            retry_after=retry_after,
            headers=(
                _throttle_headers(policy, decision)
                if settings.app.rate_limit_include_headers
                else None
            ),
        )

    dependency.__name__ = f"enforce_{policy_name}_rate_limit"
    return dependency
