"""JSON body parsing for throttled routes.

Throttled handlers read their body here instead of declaring a Pydantic
parameter: FastAPI parses declared bodies before any dependency runs, so a
malformed request would skip the rate limiter. Reading the body inside the
handler keeps the limiter first, as every attempt must be counted.
"""

from __future__ import annotations

from typing import Any, Sequence, TypeVar

from fastapi import Request
from pydantic import BaseModel, ValidationError

from coach_api.core.errors import ValidationAppError

ModelT = TypeVar("ModelT", bound=BaseModel)


def field_from_loc(loc: Sequence[Any]) -> str:
    """Turn a Pydantic error location into a dotted field name.

    The leading ``"body"`` segment FastAPI adds is dropped; an empty location
    means the body itself was rejected.
    """

    parts = [str(part) for part in loc]
    if parts and parts[0] == "body":
        parts = parts[1:]
    return ".".join(parts) or "body"


def validation_error_from(errors: Sequence[dict[str, Any]]) -> ValidationAppError:
    """Build the 400 error for the first failing field."""

    first = errors[0] if errors else {}
    field = field_from_loc(first.get("loc", ()))
    return ValidationAppError(
        code="invalid_request",
        message=f"Invalid value for '{field}'",
        details={"field": field},
    )


async def read_json_body(request: Request, model: type[ModelT]) -> ModelT:
    """Parse the request body as JSON and validate it against ``model``.

    Raises:
        ValidationAppError: 400 ``invalid_json`` for unparseable bodies,
            ``invalid_request`` when the payload does not match ``model``.
    """

    try:
        payload = await request.json()
    except ValueError as exc:
        raise ValidationAppError(
            code="invalid_json",
            message="Request body must be valid JSON",
            details={"field": "body"},
        ) from exc

    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise validation_error_from(exc.errors()) from exc
