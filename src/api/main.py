"""
FastAPI application factory and configuration.

This module creates the FastAPI application instance,
wires the registrar to its adapters, and manages lifespan events.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from psycopg_pool import ConnectionPool

from src.adapters.events.console import LoggingEventSink
from src.adapters.events.postgres import PostgresEventJournal, run_migrations
from src.adapters.ledger.clock import BlockClock
from src.adapters.ledger.memory import InMemoryLedger
from src.api.dependencies import build_registrar_service
from src.api.v1 import router as v1_router
from src.config.settings import get_settings
from src.domain.ports import EventSink

logger = logging.getLogger(__name__)

# OpenAPI tags for documentation grouping
tags_metadata = [
    {
        "name": "v1",
        "description": "Name Registrar API v1 - Register, renew and transfer names",
    },
]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    FastAPI lifespan context manager.

    Manages application startup and shutdown:
    - Creates the event sink (and the database pool when journaling to Postgres)
    - Runs migrations on startup
    - Builds the registrar service on the in-memory ledger and block clock
    - Closes the connection pool on shutdown
    """
    settings = get_settings()

    logger.info("Starting application...")

    pool: ConnectionPool | None = None
    event_sink: EventSink
    if settings.event_sink == "postgres":
        logger.info("Connecting to database...")
        pool = ConnectionPool(
            conninfo=settings.database_url,
            min_size=settings.pool_min_size,
            max_size=settings.pool_max_size,
        )
        logger.info("Running database migrations...")
        run_migrations(pool)
        event_sink = PostgresEventJournal(pool)
    else:
        event_sink = LoggingEventSink()

    ledger = InMemoryLedger(starting_balance=settings.starting_balance)
    app.state.pool = pool
    app.state.ledger = ledger
    app.state.clock = BlockClock(settings.genesis_timestamp, settings.block_time_seconds)
    app.state.registrar = build_registrar_service(settings, ledger, event_sink)

    logger.info("Application startup complete (tld=%s, admin=%s)", settings.tld, settings.admin_account)

    yield

    # Shutdown
    logger.info("Shutting down application...")
    if pool is not None:
        pool.close()
        logger.info("Database connection pool closed")


app = FastAPI(
    title="registrar",
    description="Name Registrar API - Human-readable names with expiry, grace periods and premium pricing",
    version="0.1.0",
    openapi_tags=tags_metadata,
    lifespan=lifespan,
)

# Include v1 API routes
app.include_router(v1_router, prefix="/v1")


@app.get("/health")
async def health_check(request: Request) -> dict[str, str]:
    """
    Health check endpoint with database validation.

    Returns 200 OK if the application (and the event journal database,
    when configured) is healthy. Raises exception if the database
    connection fails.
    """
    pool = request.app.state.pool
    if pool is not None:
        with pool.connection() as conn:
            conn.execute("SELECT 1")

    return {"status": "healthy"}
