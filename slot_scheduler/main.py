"""Slot Scheduler API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map SchedulerError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Store, engines, and the periodic sweep runner are created in the lifespan

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - A Services bundle already on app.state is kept (tests install their own)
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from slot_scheduler.api.dependencies import services_from_settings
from slot_scheduler.api.error_handlers import register_error_handlers
from slot_scheduler.api.routes import calendar, health, notifications, sweep
from slot_scheduler.config import get_settings
from slot_scheduler.infrastructure.observability import setup_logging
from slot_scheduler.infrastructure.sweep_runner import SweepRunner

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    if getattr(app.state, "services", None) is None:
        app.state.services = services_from_settings(settings)
    services = app.state.services

    runner = None
    if settings.sweep_enabled:
        runner = SweepRunner(services.sweep.sweep, settings.sweep_interval_seconds)
        runner.start()
    logger.info(f"Slot Scheduler API started ({services.persistence} store)")
    yield
    if runner:
        await runner.stop()
    if services.db:
        await services.db.dispose()
    logger.info("Slot Scheduler API shutting down")


app = FastAPI(
    title="Slot Scheduler API", version="1.0.0", lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(calendar.router)
app.include_router(notifications.router)
app.include_router(sweep.router)

register_error_handlers(app)
