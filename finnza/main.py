"""Finnza API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map FinnzaError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Database, partner clients and the cache-cleanup scheduler live and die
      with the lifespan context manager

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Scheduler skipped when SCHEDULER_ENABLED=false (tests, one-off scripts)
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from finnza.api.error_handlers import register_error_handlers
from finnza.api.routes import (
    auth, bomcontrole, clients, clint, contracts, health, users, webhooks,
)
from finnza.config import get_settings
from finnza.infrastructure.database import close_db, init_db
from finnza.infrastructure.observability import setup_logging
from finnza.infrastructure.partners import (
    close_partners, get_bomcontrole_limiter, init_partners,
)
from finnza.infrastructure.scheduler import build_scheduler

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    init_partners(settings)

    scheduler = None
    if settings.scheduler_enabled:
        scheduler = build_scheduler(
            get_bomcontrole_limiter(), settings.rate_limiter_cleanup_minutes,
        )
        scheduler.start()
    logger.info("Finnza API started")
    yield
    logger.info("Finnza API shutting down")
    if scheduler is not None:
        scheduler.shutdown(wait=False)
    await close_partners()
    await close_db()


app = FastAPI(
    title="Finnza Back-Office API", version="1.0.0", lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

app.include_router(health.router)
app.include_router(auth.router)
app.include_router(users.router)
app.include_router(clients.router)
app.include_router(contracts.router)
app.include_router(webhooks.router)
app.include_router(bomcontrole.router)
app.include_router(clint.router)
