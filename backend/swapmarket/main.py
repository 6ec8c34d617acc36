"""SwapMarket API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map SwapMarketError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Database and notification emitter initialized on startup, emitter drained on shutdown

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Emitter consumer runs in the same event loop as request handlers: one
      background task per process, no external broker
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from swapmarket.api.error_handlers import register_error_handlers
from swapmarket.api.routes import health, messages, reviews, swaps
from swapmarket.config import get_settings
from swapmarket.infrastructure.database import init_db
from swapmarket.infrastructure.notification_emitter import init_emitter
from swapmarket.infrastructure.observability import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    manager = init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    emitter = init_emitter(
        manager.session,
        max_retries=settings.notification_max_retries,
        base_delay_ms=settings.notification_base_delay_ms,
        max_delay_ms=settings.notification_max_delay_ms,
        queue_size=settings.notification_queue_size,
    )
    emitter.start()
    logger.info("SwapMarket API started")
    yield
    logger.info("SwapMarket API shutting down")
    await emitter.stop()
    await manager.dispose()


app = FastAPI(
    title="SwapMarket API", version="1.0.0", lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(swaps.router)
app.include_router(reviews.router)
app.include_router(messages.router)

register_error_handlers(app)
