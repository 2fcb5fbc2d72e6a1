from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from bitget_grid.engine import GridEngine
from bitget_grid.exchange import BitgetSpotClient
from bitget_grid.logging_utils import configure_logging
from bitget_grid.service.routes import router
from bitget_grid.settings import Settings

logger = logging.getLogger("bitget_grid.service")


def create_app(*, settings: Settings | None = None, engine: GridEngine | None = None) -> FastAPI:
    """Build the service app.

    When ``engine`` is given it is used as-is and its client is left open;
    otherwise a Bitget client is created on startup and closed on shutdown.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if engine is not None:
            app.state.grid_engine = engine
            yield
            return

        cfg = settings if settings is not None else Settings()
        configure_logging(cfg.log_level)
        client = BitgetSpotClient(
            api_key=cfg.bitget_api_key,
            api_secret=cfg.bitget_api_secret,
            passphrase=cfg.bitget_passphrase,
            base_url=cfg.bitget_base_url,
            timeout_seconds=cfg.http_timeout_seconds,
        )
        app.state.grid_engine = GridEngine(client=client)
        logger.info("service_started")
        try:
            yield
        finally:
            await client.aclose()
            logger.info("service_stopped")

    app = FastAPI(lifespan=lifespan)
    app.include_router(router)
    return app
