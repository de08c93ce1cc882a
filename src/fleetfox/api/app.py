"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import asdict

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from fleetfox.api.notifications import router as notifications_router
from fleetfox.api.sessions import router as sessions_router
from fleetfox.app_logging import configure_logging
from fleetfox.config import public_config
from fleetfox.containers import AppContainer


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if not await app.state.container.config_loader.wait_for_load():
            logger.error("Starting without usable configuration")
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(sessions_router)
    app.include_router(notifications_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/api/config")
    async def api_config(request: Request) -> JSONResponse:
        """Expose public configuration to browser clients."""
        state_container: AppContainer = request.app.state.container
        payload = public_config(state_container.settings)
        if "error" in payload:
            logger.error("Missing required environment variables")
        return JSONResponse(
            payload,
            headers={
                "Access-Control-Allow-Origin": "*",
                "Access-Control-Allow-Methods": "GET",
                "Cache-Control": "no-store",
            },
        )

    @app.get("/clients")
    async def clients(request: Request) -> dict[str, object]:
        """List the active clients a submission can be filed under."""
        state_container: AppContainer = request.app.state.container
        options = state_container.client_service.list_options()
        return {"clients": [asdict(option) for option in options]}

    return app
