"""CleanQuest device API - FastAPI Application Entry Point.

One process is one device: it owns a local store and talks to the remote
registry configured in settings, if any.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from cleanquest.config import settings
from cleanquest.database import engine, init_db
from cleanquest.device import Device
from cleanquest.stores.remote_registry import build_registry

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"


def create_app(device: Device | None = None) -> FastAPI:
    """Build the app. Without a device, one is wired from settings at startup."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if device is None:
            init_db()
            registry = build_registry(
                settings.remote_database_url,
                settings.remote_auth_token,
                settings.remote_timeout_seconds,
            )
            app.state.device = Device.build(engine, registry, settings)
        else:
            app.state.device = device
        logger.info(
            "Device ready (remote=%s, available=%s)",
            app.state.device.remote.registry.name,
            app.state.device.remote.available(),
        )
        yield

    app = FastAPI(
        title="CleanQuest",
        description="Family chores, chat and calendar: device sync API",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # --- Register API routers ---
    from cleanquest.api.auth import router as auth_router
    from cleanquest.api.chat import router as chat_router
    from cleanquest.api.family import router as family_router
    from cleanquest.api.system import router as system_router

    app.include_router(auth_router, prefix=API_PREFIX)
    app.include_router(family_router, prefix=API_PREFIX)
    app.include_router(chat_router, prefix=API_PREFIX)
    app.include_router(system_router, prefix=API_PREFIX)

    @app.get("/")
    def root():
        """Health check / app info."""
        return {
            "name": settings.app_name,
            "version": "0.1.0",
            "status": "running",
        }

    @app.get("/api/v1/health")
    def health():
        return {
            "status": "ok",
            "remote_available": app.state.device.remote.available(),
        }

    return app


app = create_app()


def run() -> None:
    import uvicorn

    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    uvicorn.run(app, host=settings.host, port=settings.port)
