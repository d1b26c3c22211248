from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from coach_api.core.rate_limit import enforce_rate_limit
from coach_api.core.request_body import read_json_body
from coach_api.schemas.waitlist import WaitlistSignupRequest, WaitlistSignupResponse
from coach_api.services.waitlist_service import WaitlistStore

router = APIRouter(tags=["Waitlist"])


def get_waitlist_store(request: Request) -> WaitlistStore:
    return request.app.state.waitlist_store


@router.post(
    "/waitlist",
    response_model=WaitlistSignupResponse,
    dependencies=[Depends(enforce_rate_limit("waitlist"))],
)
async def join_waitlist(
    request: Request,
    store: WaitlistStore = Depends(get_waitlist_store),
) -> WaitlistSignupResponse:
    """Add an email to the waitlist.

    Raises:
        ValidationAppError: 400 when the body or the email is malformed.
        RateLimitedAppError: 429 when the client exceeded the signup limit.
    """
    body = await read_json_body(request, WaitlistSignupRequest)
    if store.add(body.email):
        return WaitlistSignupResponse(message="Added to waitlist")
    return WaitlistSignupResponse(message="Already on waitlist")
