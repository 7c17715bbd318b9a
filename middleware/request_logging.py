"""
Request logging and correlation middleware.

Provides:
- Request ID generation (or reuse of a sane incoming X-Request-ID)
- Request context bound into structlog contextvars for every log line
- One request_completed line per request with status and timing
"""

from __future__ import annotations

import time
from typing import Optional

import structlog
from fastapi import FastAPI, Request

from shared.generators import generate_request_id
from shared.ip_utils import get_client_ip
from shared.logging import get_logger, hash_ip

REQUEST_ID_HEADER = "X-Request-ID"
MAX_REQUEST_ID_LENGTH = 64

# Heartbeat paths are too frequent to be worth a log line
QUIET_PATHS = frozenset({"/ping", "/health"})

log = get_logger("gobin.request")


def resolve_request_id(incoming: Optional[str]) -> str:
    """Reuse the caller's request ID when it is short and printable."""
    if (
        incoming
        and len(incoming) <= MAX_REQUEST_ID_LENGTH
        and incoming.isprintable()
        and " " not in incoming
    ):
        return incoming
    return generate_request_id()


def log_request_end(status_code: int, duration_ms: int) -> None:
    """Log the end of a request, at a level matching the status code."""
    if status_code >= 500:
        log_fn = log.error
    elif status_code >= 400:
        log_fn = log.warning
    else:
        log_fn = log.info

    log_fn(
        "request_completed",
        status_code=status_code,
        duration_ms=duration_ms,
    )


def setup_logging_middleware(app: FastAPI) -> None:
    """Register the request context middleware on *app*."""

    @app.middleware("http")
    async def request_context(request: Request, call_next):
        started = time.perf_counter()
        request_id = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        request.state.request_id = request_id

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
            ip_hash=hash_ip(get_client_ip(request)),
        )

        response = await call_next(request)

        if request.url.path not in QUIET_PATHS:
            duration_ms = int((time.perf_counter() - started) * 1000)
            log_request_end(response.status_code, duration_ms)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
