"""HTTP middleware for request correlation.

Usage:
    app.middleware("http")(request_id_middleware)
"""

from __future__ import annotations

import time
import uuid

from fastapi import Request, Response

from coach_api.core.config import settings
from coach_api.core.logging import clear_request_id, set_request_id


async def request_id_middleware(request: Request, call_next) -> Response:
    """Propagate a request id and report the request duration.

    Reuses the incoming request id header (``LOG_REQUEST_ID_HEADER``) or
    generates a UUID, keeps it in contextvars while the request runs so every
    log line carries it, and echoes it on the response together with
    ``X-Request-Duration-ms``.
    """

    header_name = settings.log.request_id_header
    request_id = request.headers.get(header_name) or str(uuid.uuid4())
    set_request_id(request_id)
    start = time.perf_counter()
    try:
        response: Response = await call_next(request)
    finally:
        clear_request_id()

    duration_ms = (time.perf_counter() - start) * 1000
    response.headers[header_name] = request_id
    response.headers.setdefault("X-Request-Duration-ms", f"{duration_ms:.2f}")
    return response
