"""
burgerhero.api.app

FastAPI app factory for the BurgerHero session service.

Responsibilities:
- Build the FastAPI application and register routers/middleware/handlers.
- Create the `AppContext` on startup (load persisted state, bootstrap the
  session) and dispose it on shutdown.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from burgerhero import __version__
from burgerhero.api.errors import register_exception_handlers
from burgerhero.api.routers.auth import router as auth_router
from burgerhero.api.routers.debug import router as debug_router
from burgerhero.api.routers.health import router as health_router
from burgerhero.api.routers.navigation import router as navigation_router
from burgerhero.api.routers.preferences import router as preferences_router
from burgerhero.context import build_context
from burgerhero.observability.logging import configure_logging, get_logger
from burgerhero.observability.middleware import RequestContextMiddleware
from burgerhero.settings import Settings
from burgerhero.storage import PersistentStorage

log = get_logger(__name__)


def create_app(
    *,
    settings: Settings,
    storage: PersistentStorage | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    configure_logging(
        service_name=settings.service_name,
        level=settings.log_level,
        json_logs=settings.env != "dev",
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        log.info("startup", env=settings.env)
        context = await build_context(settings, storage=storage, transport=transport)
        app.state.context = context
        try:
            await context.start()
            yield
        finally:
            await context.close()
            log.info("shutdown")

    app = FastAPI(
        title="BurgerHero Session Service",
        version=__version__,
        docs_url="/docs",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(RequestContextMiddleware)
    register_exception_handlers(app)
    app.include_router(health_router, tags=["health"])
    app.include_router(auth_router)
    app.include_router(navigation_router)
    app.include_router(preferences_router)
    app.include_router(debug_router)
    return app


# --- Module Notes -----------------------------------------------------------
# `storage` and `transport` exist for tests: MemoryStorage replaces SQLite and an
# httpx.MockTransport stands in for the hosted backend.
