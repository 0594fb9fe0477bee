"""
Hoops Monitor API Server

Runs the threshold monitor inside a FastAPI app and exposes a small
token-authenticated control API for checking status and triggering cycles.

Usage:
    uvicorn main:app --host 0.0.0.0 --port 8001

Environment Variables:
    MONITOR_CONFIG_PATH - Path to the JSON config (default ./config.json)
    MONITOR_API_TOKEN - Required secret token for the /v1 endpoints
"""

import asyncio
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Optional

import pytz
from fastapi import FastAPI

from api.v1 import monitor as monitor_routes
from core.logging import get_logger, setup_logging
from core.scheduler import MonitorScheduler
from core.settings import Settings, load_settings
from monitor import build_scheduler, log_configuration
from schemas.monitor import HealthResponse


def _configure_state(app: FastAPI, settings: Settings) -> None:
    app.state.settings = settings
    app.state.api_token = settings.api_token.get_secret_value() if settings.api_token else None


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = app.state.settings
    if settings is None:
        settings = load_settings()
        _configure_state(app, settings)

    setup_logging(
        log_level=settings.log_level,
        json_format=settings.log_format == "json",
        service_name=settings.service_name,
    )
    log = get_logger()
    log.info("monitor_api_starting", service=settings.service_name)

    if app.state.scheduler is None:
        app.state.scheduler = build_scheduler(settings)
        log_configuration(settings, app.state.scheduler)

    scheduler: MonitorScheduler = app.state.scheduler
    loop_task = asyncio.create_task(scheduler.run_forever())

    yield

    scheduler.stop()
    await loop_task
    log.info("monitor_api_stopped")


def create_app(
    settings: Optional[Settings] = None,
    scheduler: Optional[MonitorScheduler] = None,
) -> FastAPI:
    """
    Build the API app.

    Args:
        settings: Loaded settings. When omitted they are loaded at startup
                  from $MONITOR_CONFIG_PATH.
        scheduler: Prebuilt scheduler. When omitted one is built from settings
                   at startup.
    """
    app = FastAPI(
        title="Hoops Monitor",
        description="Fantasy basketball threshold monitor control API",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = None
    app.state.api_token = None
    app.state.scheduler = scheduler
    if settings is not None:
        _configure_state(app, settings)

    app.include_router(monitor_routes.router, prefix="/v1")

    @app.get("/health", response_model=HealthResponse)
    async def health_check():
        """Health check endpoint (no auth required)."""
        loaded = app.state.settings
        timezone = loaded.monitoring.timezone if loaded else "America/New_York"
        now = datetime.now(pytz.timezone(timezone))
        return HealthResponse(status="healthy", timestamp=now.isoformat())

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8001)
