from __future__ import annotations

from pydantic import BaseModel, Field


class WaitlistSignupRequest(BaseModel):
    """Waitlist signup payload.

    ``email`` is optional at the schema level so a missing value yields the
    same 400 error as a malformed one.
    """

    email: str | None = Field(None, description="Email address to add to the waitlist")


class WaitlistSignupResponse(BaseModel):
    message: str = Field(..., description="Outcome of the signup")
