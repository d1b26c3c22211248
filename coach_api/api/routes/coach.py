from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request

from coach_api.core.rate_limit import enforce_rate_limit
from coach_api.core.request_body import read_json_body
from coach_api.schemas.coach import CoachRequest, CoachResponse
from coach_api.services.coaching_service import build_feedback

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Coach"])


@router.post(
    "/coach",
    response_model=CoachResponse,
    dependencies=[Depends(enforce_rate_limit("coach"))],
)
async def coach_game(request: Request) -> CoachResponse:
    """Return coaching feedback for an analysed game.

    The body carries the PGN, player color, result and engine analysis
    totals (see CoachRequest).

    Returns:
        CoachResponse with the feedback text.

    Raises:
        ValidationAppError: 400 when the body is malformed or required
            fields are missing or invalid.
        RateLimitedAppError: 429 when the client exceeded the coaching limit.
    """
    body = await read_json_body(request, CoachRequest)
    coaching = build_feedback(body)
    logger.info(
        "coach.feedback_built",
        extra={
            "player_color": body.player_color,
            "result": body.result,
            "mistake_count": len(body.mistakes),
            "blunder_count": len(body.blunders),
        },
    )
    return CoachResponse(coaching=coaching)
