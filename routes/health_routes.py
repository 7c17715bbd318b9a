"""
Health and liveness endpoints.

GET /health  — checks MongoDB and the rate-limit counter storage.
GET /ping    — bare liveness probe.
GET /version — build version string.

Rules:
- MongoDB failure → "unhealthy" (503) — no document can be read or written.
- Rate-limit storage failure → "degraded" (200) — reads still work.
"""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, PlainTextResponse

from schemas.dto.responses.common import HealthResponse

router = APIRouter(tags=["health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"model": HealthResponse}},
)
async def health_check(request: Request) -> JSONResponse:
    checks: dict[str, str] = {}
    overall = "healthy"

    try:
        db = request.app.state.db
        await db.client.admin.command("ping")
        checks["mongodb"] = "ok"
    except Exception:
        checks["mongodb"] = "error"
        overall = "unhealthy"

    limiter = request.app.state.rate_limiter
    if not limiter.enabled:
        checks["rate_limit"] = "disabled"
    else:
        try:
            checks["rate_limit"] = "ok" if await limiter.check_storage() else "error"
        except Exception:
            checks["rate_limit"] = "error"
        if checks["rate_limit"] == "error" and overall == "healthy":
            overall = "degraded"

    status_code = 503 if overall == "unhealthy" else 200
    return JSONResponse(
        status_code=status_code,
        content=HealthResponse(status=overall, checks=checks).model_dump(),
    )


@router.get("/ping", response_class=PlainTextResponse)
async def ping() -> str:
    return "."


@router.get("/version", response_class=PlainTextResponse)
async def build_version(request: Request) -> str:
    return request.app.state.settings.build_version
