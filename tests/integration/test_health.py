"""Integration tests for GET /health, /ping and /version."""

from contextlib import asynccontextmanager
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

from fastapi import FastAPI
from fastapi.testclient import TestClient

from errors import register_error_handlers
from routes.health_routes import router as health_router


def _build_test_app(
    mongo_ok: bool = True,
    limiter_ok: bool = True,
    limiter_enabled: bool = True,
) -> FastAPI:
    """
    Build a minimal FastAPI app with mocked DB/limiter injected via lifespan.
    No real network connections are made.
    """
    mock_db = MagicMock()
    if mongo_ok:
        mock_db.client.admin.command = AsyncMock(return_value={"ok": 1})
    else:
        mock_db.client.admin.command = AsyncMock(
            side_effect=Exception("connection refused")
        )

    mock_limiter = MagicMock()
    mock_limiter.enabled = limiter_enabled
    if limiter_ok:
        mock_limiter.check_storage = AsyncMock(return_value=True)
    else:
        mock_limiter.check_storage = AsyncMock(side_effect=Exception("redis down"))

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.db = mock_db
        app.state.rate_limiter = mock_limiter
        app.state.settings = SimpleNamespace(build_version="1.2.3")
        yield

    app = FastAPI(lifespan=lifespan)
    register_error_handlers(app)
    app.include_router(health_router)
    return app


class TestHealthEndpoint:
    def test_healthy_when_both_ok(self):
        app = _build_test_app()
        with TestClient(app) as client:
            resp = client.get("/health")
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "healthy"
        assert body["checks"] == {"mongodb": "ok", "rate_limit": "ok"}

    def test_unhealthy_when_mongo_fails(self):
        app = _build_test_app(mongo_ok=False)
        with TestClient(app) as client:
            resp = client.get("/health")
        assert resp.status_code == 503
        body = resp.json()
        assert body["status"] == "unhealthy"
        assert body["checks"]["mongodb"] == "error"

    def test_degraded_when_limiter_storage_fails(self):
        app = _build_test_app(limiter_ok=False)
        with TestClient(app) as client:
            resp = client.get("/health")
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "degraded"
        assert body["checks"]["rate_limit"] == "error"

    def test_healthy_when_limiter_disabled(self):
        app = _build_test_app(limiter_enabled=False)
        with TestClient(app) as client:
            resp = client.get("/health")
        body = resp.json()
        assert body["status"] == "healthy"
        assert body["checks"]["rate_limit"] == "disabled"

    def test_limiter_storage_check_is_awaited(self):
        app = _build_test_app()
        with TestClient(app) as client:
            client.get("/health")
            app.state.rate_limiter.check_storage.assert_awaited_once()

    def test_openapi_documents_health_response(self):
        with TestClient(_build_test_app()) as client:
            responses = client.get("/openapi.json").json()["paths"]["/health"]["get"][
                "responses"
            ]
        for code in ("200", "503"):
            schema = responses[code]["content"]["application/json"]["schema"]
            assert schema["$ref"] == "#/components/schemas/HealthResponse"


class TestProbes:
    def test_ping(self):
        with TestClient(_build_test_app()) as client:
            resp = client.get("/ping")
        assert resp.status_code == 200
        assert resp.text == "."

    def test_version(self):
        with TestClient(_build_test_app()) as client:
            resp = client.get("/version")
        assert resp.text == "1.2.3"
