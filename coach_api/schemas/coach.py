"""Request/response models for the coaching endpoint.

Field aliases keep the camelCase wire format used by the web client.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class AnalysisSummary(BaseModel):
    """Engine analysis totals for the player's moves."""

    accuracy: float = Field(..., ge=0, le=100, description="Player accuracy in percent")
    brilliant: int = Field(0, ge=0)
    great: int = Field(0, ge=0)
    good: int = Field(0, ge=0)
    inaccuracies: int = Field(0, ge=0)
    mistakes: int = Field(0, ge=0)
    blunders: int = Field(0, ge=0)


class CoachRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    pgn: str = Field("", description="Game in PGN notation")
    player_color: str = Field("", alias="playerColor", description="white or black")
    result: Literal["white", "black", "draw"] = Field(..., description="Game winner or draw")
    result_reason: str | None = Field(None, alias="resultReason")
    analysis_summary: AnalysisSummary | None = Field(None, alias="analysisSummary")
    mistakes: list[str] = Field(default_factory=list, description="Notable mistakes (SAN + note)")
    blunders: list[str] = Field(default_factory=list, description="Notable blunders (SAN + note)")


class CoachResponse(BaseModel):
    coaching: str = Field(..., description="Structured coaching feedback")
