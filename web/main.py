"""FastAPI entrypoint exposing the feature flag debug surface."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI

from core.env import load_dotenv_if_available
from core.logging import get_logger, setup_logging
from services.bootstrap import AppServices, build_app_services
from web import routers

load_dotenv_if_available()
setup_logging()

logger = get_logger(__name__)


def create_app(services: Optional[AppServices] = None) -> FastAPI:
    """Build the application.

    When ``services`` is given the caller owns their lifecycle; otherwise they
    are built on startup and closed on shutdown.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        owned = services is None
        if owned:
            app.state.services = build_app_services()
        try:
            yield
        finally:
            if owned:
                app.state.services.close()
                logger.info("Feature flag services closed.")

    app = FastAPI(
        title="Timetable Feature Flags API",
        description="Debug endpoints for feature flags, remote parameters and premium access.",
        version="1.0.0",
        lifespan=lifespan,
    )
    if services is not None:
        app.state.services = services

    @app.get("/", summary="Health Check", tags=["Default"])
    def health_check():
        return {"status": "ok", "message": "Feature flag API is running."}

    @app.get("/healthz", include_in_schema=False)
    def readiness_check():
        current: Optional[AppServices] = getattr(app.state, "services", None)
        if current is None:
            return {"status": "starting"}
        return {
            "status": "ok",
            "flags": current.flags.phase.value,
            "parameters": current.parameters.phase.value,
        }

    app.include_router(routers.feature_flags.router, prefix="/api/v1")
    app.include_router(routers.premium.router, prefix="/api/v1")
    return app


app = create_app()
