"""Pytest configuration and fixtures shared across all test modules.

Environment variables are set before any import of ``coach_api`` so the
settings object never reads a developer's .env file.
"""

import os

# CRITICAL: Set this before any imports that might load settings
os.environ["TESTING"] = "true"
os.environ.setdefault("LOG_LEVEL", "WARNING")

from unittest.mock import Mock  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from coach_api.adapters.rate_limit.in_memory import InMemoryFixedWindowRateLimiter  # noqa: E402
from coach_api.core.app_factory import create_app  # noqa: E402


@pytest.fixture
def clock() -> Mock:
    """Millisecond clock frozen at t=1_000_000 until a test moves it."""
    return Mock(return_value=1_000_000.0)


@pytest.fixture
def limiter(clock: Mock) -> InMemoryFixedWindowRateLimiter:
    return InMemoryFixedWindowRateLimiter(clock=clock)


@pytest.fixture
def client(limiter: InMemoryFixedWindowRateLimiter) -> TestClient:
    return TestClient(create_app(rate_limiter=limiter))
