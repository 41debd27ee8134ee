"""BookSwap API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map BookSwapError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Database initialized on startup via lifespan context manager

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Error handlers live in api/error_handlers.py; main only wires them
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.error_handlers import register_error_handlers
from app.api.routes import (
    health, notifications, swap_actions, swap_requests, user_stats,
)
from app.config import get_settings
from app.infrastructure.database import init_db
from app.infrastructure.observability import setup_logging

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
    logger.info("BookSwap API started")
    yield
    logger.info("BookSwap API shutting down")
    await manager.dispose()


app = FastAPI(
    title="BookSwap API", version="1.0.0", lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routes — explicit registration
app.include_router(health.router)
app.include_router(swap_requests.router)
app.include_router(swap_actions.router)
app.include_router(user_stats.router)
app.include_router(notifications.router)

register_error_handlers(app)
