"""Rule-based coaching feedback built from an engine analysis summary.

The web client sends the PGN plus per-move classification totals; this
service validates the request and turns the totals into the five-part
feedback the dashboard renders (summary, strengths, mistakes, lesson,
practice).
"""

from __future__ import annotations

from coach_api.core.errors import ValidationAppError
from coach_api.schemas.coach import AnalysisSummary, CoachRequest

PLAYER_COLORS = ("white", "black")


def validate_request(body: CoachRequest) -> AnalysisSummary:
    """Check the fields the coaching endpoint cannot work without.

    Returns:
        The analysis summary, guaranteed present.

    Raises:
        ValidationAppError: If pgn is blank, playerColor is invalid or the
            analysis summary is missing.
    """
    if not body.pgn.strip():
        raise ValidationAppError(
            code="pgn_required",
            message="PGN is required",
            details={"field": "pgn"},
        )
    if body.player_color not in PLAYER_COLORS:
        raise ValidationAppError(
            code="invalid_player_color",
            message="playerColor must be 'white' or 'black'",
            details={"field": "playerColor"},
        )
    if body.analysis_summary is None:
        raise ValidationAppError(
            code="analysis_summary_required",
            message="analysisSummary is required",
            details={"field": "analysisSummary"},
        )
    return body.analysis_summary


def describe_result(result: str, player_color: str, reason: str | None = None) -> str:
    if result == "draw":
        text = "draw"
    elif result == player_color:
        text = "win"
    else:
        text = "loss"
    if reason:
        text += f" ({reason})"
    return text


def _accuracy_band(accuracy: float) -> str:
    if accuracy >= 90:
        return "excellent"
    if accuracy >= 75:
        return "solid"
    if accuracy >= 60:
        return "uneven"
    return "difficult"


def _lesson(summary: AnalysisSummary) -> tuple[str, str]:
    """Pick the study topic and a matching exercise."""
    if summary.blunders > 0:
        return (
            "Blunder check: before every move, list the opponent's checks, captures and threats.",
            "Solve 10 tactics puzzles a day, saying the opponent's best reply aloud before moving.",
        )
    if summary.mistakes > 0:
        return (
            "Candidate moves: compare at least two options in critical positions.",
            "Replay this game and write down an alternative for each marked mistake.",
        )
    if summary.inaccuracies > 0:
        return (
            "Piece activity: improve your worst-placed piece when nothing is forced.",
            "Play three slow games focusing on one improving move per phase.",
        )
    return (
        "Endgame technique: convert good positions efficiently.",
        "Practice king and pawn endgames against the engine from a won position.",
    )


def _bullets(items: list[str]) -> str:
    if not items:
        return "  (none identified)"
    return "\n".join(f"  - {item}" for item in items)


def build_feedback(body: CoachRequest) -> str:
    """Compose the coaching text for a validated request.

    Args:
        body: Parsed coaching request.

    Returns:
        Multi-section plain-text feedback.

    Raises:
        ValidationAppError: If the request is missing required fields.
    """
    summary = validate_request(body)
    result_text = describe_result(body.result, body.player_color, body.result_reason)
    lesson, practice = _lesson(summary)

    good_moves = summary.brilliant + summary.great + summary.good
    errors = summary.inaccuracies + summary.mistakes + summary.blunders

    sections = [
        "1. GAME SUMMARY\n"
        f"  A {result_text} playing {body.player_color} with "
        f"{summary.accuracy:.0f}% accuracy: a {_accuracy_band(summary.accuracy)} game "
        f"with {good_moves} good-or-better moves and {errors} errors.",
        "2. WHAT YOU DID WELL\n"
        f"  Brilliant: {summary.brilliant}, great: {summary.great}, good: {summary.good}.",
        "3. KEY MISTAKES\n"
        f"  Mistakes:\n{_bullets(body.mistakes)}\n"
        f"  Blunders:\n{_bullets(body.blunders)}",
        f"4. LESSON TO FOCUS ON\n  {lesson}",
        f"5. PRACTICE SUGGESTION\n  {practice}",
    ]
    return "\n\n".join(sections)
