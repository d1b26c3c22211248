"""In-memory waitlist store.

Process-lifetime state like the rate limiter table: a restart empties it.
"""

from __future__ import annotations

import logging
import re
import threading
from datetime import datetime, timezone

from coach_api.core.errors import ValidationAppError

logger = logging.getLogger(__name__)

EMAIL_REGEX = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MAX_EMAIL_LENGTH = 254


def normalize_email(raw: str | None) -> str:
    """Trim, lower-case and validate an email address.

    Raises:
        ValidationAppError: If the address is missing or malformed.
    """

    if not raw or not isinstance(raw, str):
        raise ValidationAppError(
            code="email_required",
            message="Email is required",
            details={"field": "email"},
        )

    email = raw.strip().lower()
    if len(email) > MAX_EMAIL_LENGTH or not EMAIL_REGEX.match(email):
        raise ValidationAppError(
            code="invalid_email",
            message="Invalid email address",
            details={"field": "email"},
        )
    return email


class WaitlistStore:
    """Thread-safe set of signed-up emails with their signup time."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._signups: dict[str, datetime] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._signups)

    def __contains__(self, email: str) -> bool:
        with self._lock:
            return email in self._signups

    def add(self, raw_email: str | None) -> bool:
        """Register an email.

        Returns:
            True if the email was added, False if it was already present.

        Raises:
            ValidationAppError: If the email is missing or malformed.
        """

        email = normalize_email(raw_email)
        with self._lock:
            if email in self._signups:
                return False
            self._signups[email] = datetime.now(timezone.utc)

        logger.info(
            "waitlist.signup",
            extra={"email_prefix": f"{email[:3]}***", "size": len(self)},
        )
        return True
