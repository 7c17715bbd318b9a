"""
FastAPI application factory.
create_app() is the single entry point for building the app.
"""

from __future__ import annotations

import asyncio
import contextlib
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional

import sentry_sdk
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pymongo.asynchronous.mongo_client import AsyncMongoClient

from config import AppSettings
from errors import register_error_handlers
from middleware.request_logging import setup_logging_middleware
from repositories.document_repository import DocumentRepository
from routes.document_routes import router as document_router
from routes.health_routes import router as health_router
from routes.raw_routes import router as raw_router
from services.document_service import DocumentService
from services.rate_limiter import RateLimiter
from services.token_service import TokenService
from shared.logging import get_logger, setup_logging
from workers.expiry_worker import run_expiry_cleanup

log = get_logger(__name__)


def create_app(
    settings: Optional[AppSettings] = None, mongo_client: Optional[Any] = None
) -> FastAPI:
    """Create and return a fully configured FastAPI application.

    *mongo_client* replaces the client built from MONGODB_URI; an injected
    client is left open on shutdown since the caller owns it.
    """
    if settings is None:
        settings = AppSettings()

    setup_logging(
        settings.logging.log_level,
        settings.logging.log_format,
        production=settings.is_production,
    )

    # Initialise Sentry before anything else so it captures startup errors
    if settings.sentry.sentry_dsn:
        sentry_sdk.init(
            dsn=settings.sentry.sentry_dsn,
            send_default_pii=settings.sentry.sentry_send_pii,
            traces_sample_rate=settings.sentry.sentry_traces_sample_rate,
            profiles_sample_rate=settings.sentry.sentry_profile_sample_rate,
            environment=settings.env,
            release=settings.build_version,
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        # ── Startup ──────────────────────────────────────────────────────────
        owns_client = mongo_client is None
        client = mongo_client if mongo_client is not None else AsyncMongoClient(
            settings.db.mongodb_uri
        )
        app.state.mongo_client = client
        app.state.db = client[settings.db.db_name]
        app.state.settings = settings

        repository = DocumentRepository(app.state.db[settings.db.documents_collection])
        await repository.ensure_indexes()

        rate_limiter = RateLimiter.from_settings(settings.rate_limit)
        app.state.rate_limiter = rate_limiter
        app.state.document_service = DocumentService(
            repository,
            TokenService.from_settings(settings.tokens),
            rate_limiter,
            max_document_size=settings.max_document_size,
        )

        cleanup_task = None
        if settings.db.expire_after_seconds > 0:
            cleanup_task = asyncio.create_task(
                run_expiry_cleanup(
                    app.state.document_service,
                    settings.db.expire_after_seconds,
                    settings.db.cleanup_interval_seconds,
                )
            )

        log.info("app_started", **settings.safe_summary())

        yield

        # ── Shutdown ─────────────────────────────────────────────────────────
        if cleanup_task is not None:
            cleanup_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await cleanup_task
        if owns_client:
            await client.close()
        log.info("app_stopped")

    app = FastAPI(
        title=settings.app_name,
        version=settings.build_version,
        docs_url=settings.docs_url,
        redoc_url=None,
        debug=settings.debug,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[
            "X-Request-ID",
            "X-RateLimit-Limit",
            "X-RateLimit-Remaining",
            "X-RateLimit-Reset",
            "Retry-After",
        ],
    )

    register_error_handlers(app)
    setup_logging_middleware(app)

    app.include_router(document_router)
    app.include_router(raw_router)
    app.include_router(health_router)

    return app
