"""Tests for sensitive data filtering in logs."""

from __future__ import annotations

import json
import logging
from io import StringIO

import pytest

from coach_api.core.config import LogSettings
from coach_api.core.logging import (
    JsonFormatter,
    SensitiveDataFilter,
    clear_request_id,
    configure_logging,
    hash_identifier,
    redact,
    set_request_id,
)


@pytest.fixture
def capture():
    """Logger wired with the redaction filter and JSON formatter."""

    logger = logging.getLogger("test_redaction")
    logger.setLevel(logging.INFO)
    logger.handlers.clear()
    logger.propagate = False

    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.addFilter(SensitiveDataFilter())
    handler.setFormatter(JsonFormatter())
    logger.addHandler(handler)

    yield logger, stream

    logger.handlers.clear()
    logger.propagate = True


def test_redacts_client_identifiers(capture):
    logger, stream = capture

    logger.info(
        "rate_limit.allowed",
        extra={
            "client_ip": "203.0.113.7",
            "rate_limit_key": "coach:203.0.113.7",
            "policy": "coach",
        },
    )

    output = stream.getvalue()
    assert "203.0.113.7" not in output
    assert "[REDACTED]" in output
    assert "coach" in output


def test_redacts_user_content(capture):
    logger, stream = capture

    logger.info(
        "coach.request",
        extra={
            "pgn": "1. e4 e5 2. Qh5",
            "email": "player@example.com",
            "move_count": 3,
        },
    )

    output = stream.getvalue()
    assert "Qh5" not in output
    assert "player@example.com" not in output
    assert "move_count" in output


def test_safe_fields_pass_through(capture):
    logger, stream = capture

    logger.info(
        "safe_event",
        extra={
            "request_id": "req-123",
            "route": "/api/coach",
            "status": 429,
            "key_hash": "abcd1234",
        },
    )

    data = json.loads(stream.getvalue())
    assert data["request_id"] == "req-123"
    assert data["route"] == "/api/coach"
    assert data["status"] == 429
    assert data["key_hash"] == "abcd1234"
    assert "[REDACTED]" not in stream.getvalue()


def test_redacts_nested_headers(capture):
    logger, stream = capture

    logger.info(
        "nested_event",
        extra={
            "headers": {"X-Forwarded-For": "198.51.100.1", "user-agent": "pytest"},
        },
    )

    output = stream.getvalue()
    assert "198.51.100.1" not in output
    assert "pytest" in output


def test_json_formatter_uses_context_request_id(capture):
    logger, stream = capture

    set_request_id("ctx-42")
    try:
        logger.info("with_context")
    finally:
        clear_request_id()

    assert json.loads(stream.getvalue())["request_id"] == "ctx-42"


def test_redact_handles_sequences():
    value = [{"email": "a@b.co"}, ("x", {"token": "t"})]

    assert redact(value) == [{"email": "[REDACTED]"}, ("x", {"token": "[REDACTED]"})]


def test_hash_identifier_is_stable_and_short():
    assert hash_identifier("coach:1.2.3.4") == hash_identifier("coach:1.2.3.4")
    assert hash_identifier("coach:1.2.3.4") != hash_identifier("coach:1.2.3.5")
    assert len(hash_identifier("x")) == 16


def test_configure_logging_writes_plain_file(tmp_path):
    log_file = tmp_path / "logs" / "app.log"
    root = logging.getLogger()
    previous_handlers, previous_level = list(root.handlers), root.level

    try:
        configure_logging(
            LogSettings(output="file", file_path=str(log_file), format="plain", level="INFO")
        )
        logging.getLogger("coach_api.test").info("plain_line")
        for handler in root.handlers:
            handler.flush()
    finally:
        for handler in root.handlers:
            handler.close()
        root.handlers[:] = previous_handlers
        root.setLevel(previous_level)

    content = log_file.read_text(encoding="utf-8")
    assert "INFO coach_api.test plain_line" in content
