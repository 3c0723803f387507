"""FastAPI application entrypoint."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from restaurant_kpi.api.errors import register_error_handlers
from restaurant_kpi.api.routes import build_api_router
from restaurant_kpi.config import AppSettings, get_settings
from restaurant_kpi.core.logging import setup_logging
from restaurant_kpi.core.telemetry import setup_telemetry
from restaurant_kpi.db.database import Database

logger = logging.getLogger(__name__)


def create_app(database: Database | None = None, settings: AppSettings | None = None) -> FastAPI:
    """Build the API around ``database``; tests pass their own."""

    settings = settings or get_settings()
    database = database or Database(settings.database_url)
    setup_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        logger.info("Starting %s with settings %s", settings.app_name, settings.dict_for_logging())
        await database.create_all()
        yield
        await database.dispose()

    app = FastAPI(title=settings.app_name, version="0.1.0", lifespan=lifespan)
    app.state.database = database
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["traceparent", "tracestate", "x-request-id"],
    )
    register_error_handlers(app)
    app.include_router(build_api_router(database, settings))

    @app.get("/health", tags=["health"])
    async def health() -> dict[str, str]:
        """Return service readiness metadata."""

        return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}

    setup_telemetry(app, settings, engine=database.engine)
    return app


__all__ = ["create_app"]
