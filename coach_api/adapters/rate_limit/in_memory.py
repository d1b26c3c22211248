"""In-memory fixed-window rate limiter.

Notes:
- Per-process only: running multiple workers multiplies the effective limit.
- Thread-safe: a single lock guards the whole table.
- Each key gets its own window, opened by the first attempt after the
  previous window ended.
"""

from __future__ import annotations

import math
import threading
import time
from dataclasses import dataclass
from typing import Callable

from coach_api.adapters.rate_limit.base import (
    AbstractRateLimiter,
    RateLimitDecision,
    RateLimitUsageError,
)

DEFAULT_SWEEP_INTERVAL_MS = 60_000


def monotonic_ms() -> float:
    """Return a monotonic timestamp in milliseconds."""
    return time.monotonic_ns() / 1_000_000


@dataclass
class _CounterRecord:
    count: int
    reset_at: float


class InMemoryFixedWindowRateLimiter(AbstractRateLimiter):
    """Rate limiter keeping a counter and a deadline per key.

    Every attempt is counted, including blocked ones, so a key that went over
    its limit keeps reporting ``remaining == 0`` until its window ends. At the
    window boundary the counter starts from scratch, which lets up to twice
    the limit through around the boundary.

    Expired records are dropped lazily: ``check`` triggers a sweep at most
    once per ``sweep_interval_ms``. A swept key is recreated on its next
    attempt exactly as if it had expired in place.
    """

    def __init__(
        self,
        *,
        clock: Callable[[], float] = monotonic_ms,
        sweep_interval_ms: int = DEFAULT_SWEEP_INTERVAL_MS,
        retention_ms: int = 0,
    ) -> None:
        """Initialize the limiter.

        Args:
            clock: Time source returning milliseconds.
            sweep_interval_ms: Minimum delay between two lazy sweeps.
            retention_ms: How long an expired record is kept before a sweep
                may drop it.

        Raises:
            RateLimitUsageError: If sweep_interval_ms or retention_ms is negative.
        """
        if sweep_interval_ms < 0:
            raise RateLimitUsageError("sweep_interval_ms must be >= 0")
        if retention_ms < 0:
            raise RateLimitUsageError("retention_ms must be >= 0")

        self._clock = clock
        self._sweep_interval_ms = sweep_interval_ms
        self._retention_ms = retention_ms
        self._lock = threading.RLock()
        self._records: dict[str, _CounterRecord] = {}
        self._last_sweep: float | None = None

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def check(self, key: str, limit: int, window_ms: int) -> RateLimitDecision:
        """Evaluate an attempt for ``key`` and count it.

        Args:
            key: Caller identity.
            limit: Maximum attempts admitted per window.
            window_ms: Window length in milliseconds.

        Returns:
            RateLimitDecision with the admission, remaining budget and time
            until the window ends.

        Raises:
            RateLimitUsageError: If key is empty or limit/window_ms are not
                positive.
        """
        if not key:
            raise RateLimitUsageError("key must be a non-empty string")
        if limit < 1:
            raise RateLimitUsageError("limit must be >= 1")
        if window_ms < 1:
            raise RateLimitUsageError("window_ms must be >= 1")

        with self._lock:
            now = self._clock()
            self._maybe_sweep_locked(now)

            record = self._records.get(key)
            if record is None or now >= record.reset_at:
                record = _CounterRecord(count=0, reset_at=now + window_ms)
                self._records[key] = record

            record.count += 1
            reset_in = int(math.ceil(record.reset_at - now))

            return RateLimitDecision(
                allowed=record.count <= limit,
                remaining=max(0, limit - record.count),
                reset_in_ms=min(max(reset_in, 1), window_ms),
            )

    def sweep(self, now: float | None = None) -> int:
        """Drop records whose window ended at least ``retention_ms`` ago.

        Args:
            now: Timestamp to sweep against; defaults to the clock.

        Returns:
            Number of records dropped.
        """
        with self._lock:
            if now is None:
                now = self._clock()
            return self._sweep_locked(now)

    def reset(self, key: str | None = None) -> None:
        """Forget one key, or every key when ``key`` is None."""
        with self._lock:
            if key is None:
                self._records.clear()
            else:
                self._records.pop(key, None)

    def _maybe_sweep_locked(self, now: float) -> None:
        if self._last_sweep is None:
            self._last_sweep = now
            return
        if now - self._last_sweep < self._sweep_interval_ms:
            return
        self._sweep_locked(now)

    def _sweep_locked(self, now: float) -> int:
        self._last_sweep = now
        expired = [
            key
            for key, record in self._records.items()
            if now >= record.reset_at + self._retention_ms
        ]
        for key in expired:
            del self._records[key]
        return len(expired)
