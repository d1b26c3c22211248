"""Rate limiter interfaces.

Routes and dependencies talk to this abstraction (not the concrete
implementation) so the storage backend can change with minimal edits.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


class RateLimitUsageError(ValueError):
    """Raised when the limiter is called with invalid arguments.

    This is a programming error on the caller side (e.g., a zero limit),
    never a runtime condition to recover from.
    """


@dataclass(frozen=True)
class RateLimitDecision:
    """Outcome of a single check against a key.

    Attributes:
        allowed: Whether the attempt is admitted in the current window.
        remaining: Attempts left in the current window (0 once exhausted).
        reset_in_ms: Milliseconds until the current window ends, in
            ``(0, window_ms]``.
    """

    allowed: bool
    remaining: int
    reset_in_ms: int


class AbstractRateLimiter(ABC):
    """Interface for keyed rate limiters."""

    @abstractmethod
    def check(self, key: str, limit: int, window_ms: int) -> RateLimitDecision:
        """Evaluate an attempt for ``key`` and consume a slot.

        Args:
            key: Caller identity (e.g., ``"coach:203.0.113.7"``).
            limit: Maximum attempts admitted per window.
            window_ms: Window length in milliseconds.

        Returns:
            RateLimitDecision for this attempt.

        Raises:
            RateLimitUsageError: If key is empty or limit/window_ms are not
                positive.
        """
        raise NotImplementedError
