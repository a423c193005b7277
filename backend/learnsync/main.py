import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, Optional

import httpx
from fastapi import FastAPI

from .config import Settings, get_settings
from .content_fetcher import ContentFetcher
from .dashboard import DashboardService
from .dashboard_routes import router as dashboard_router
from .logging_config import configure_logging
from .telemetry import Telemetry

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    *,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    telemetry: Optional[Telemetry] = None,
) -> FastAPI:
    resolved = settings or get_settings()
    hub = telemetry or Telemetry()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        fetcher = ContentFetcher(resolved, transport=transport, telemetry=hub)
        service = DashboardService(resolved, fetcher, telemetry=hub)
        app.state.dashboard = service
        logger.info("Dashboard sync starting against %s", resolved.api_base_url)
        if resolved.refresh_on_startup:
            service.scheduler.trigger("mount")
        try:
            yield
        finally:
            await service.aclose()

    app = FastAPI(title="Learnsync Dashboard Backend", version="0.1.0", lifespan=lifespan)
    app.include_router(dashboard_router)

    @app.get("/healthz")
    def health() -> Dict[str, str]:
        return {"status": "ok"}

    return app


def build_default_app() -> FastAPI:
    configure_logging()
    return create_app()
