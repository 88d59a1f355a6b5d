"""HTTP middleware for request correlation and access logging.

Each request is bound to a correlation id (the incoming header named by
LOG_REQUEST_ID_HEADER, or a fresh UUID) for as long as it is being handled,
so log records and error bodies can carry it. The id and the handling time
are echoed on the response, and one ``http.request`` event is logged per
request.

Usage:
    app.middleware("http")(request_id_middleware)
"""

from __future__ import annotations

import logging
import time
import uuid

from fastapi import Request, Response

from app.core.config import settings
from app.core.exception_handlers import general_exception_handler
from app.core.logging import clear_request_id, set_request_id

logger = logging.getLogger(__name__)

DURATION_HEADER = "X-Request-Duration-ms"


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)


async def request_id_middleware(request: Request, call_next) -> Response:
    """Bind a request id, time the request and echo both as headers.

    Unhandled exceptions are logged and turned into the generic 500 body
    while the request's id is still bound, so the error response carries it
    too.
    """

    header_name = settings.log.request_id_header
    request_id = request.headers.get(header_name) or str(uuid.uuid4())
    set_request_id(request_id)
    started = time.perf_counter()

    try:
        try:
            response: Response = await call_next(request)
        except Exception as exc:
            logger.exception(
                "http.request_failed",
                extra={
                    "method": request.method,
                    "path": request.url.path,
                    "duration_ms": _elapsed_ms(started),
                },
            )
            response = await general_exception_handler(request, exc)
        duration_ms = _elapsed_ms(started)
        logger.info(
            "http.request",
            extra={
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
            },
        )
    finally:
        clear_request_id()

    response.headers[header_name] = request_id
    response.headers.setdefault(DURATION_HEADER, f"{duration_ms:.2f}")
    return response
