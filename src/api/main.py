"""
Account recovery API application.

Builds the FastAPI app: the v1 recovery router, OpenAPI tag metadata, and
a lifespan that owns the PostgreSQL pool backing the recovery data store.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from psycopg_pool import ConnectionPool

from src.adapters.repository.postgres import run_migrations
from src.api.v1 import router as v1_router
from src.config.settings import get_settings

logger = logging.getLogger(__name__)

tags_metadata = [
    {
        "name": "v1",
        "description": "Account Recovery API v1 - Resolve users by claims and issue recovery codes",
    },
]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Open the recovery store's connection pool for the app's lifetime.

    The recovery_data schema is migrated before the first request, and the
    pool is exposed as ``app.state.pool`` for ``get_recovery_store``.
    """
    settings = get_settings()

    logger.info(
        "Opening recovery store pool (min=%d, max=%d)", settings.pool_min_size, settings.pool_max_size
    )
    pool = ConnectionPool(
        conninfo=settings.database_url,
        min_size=settings.pool_min_size,
        max_size=settings.pool_max_size,
    )

    run_migrations(pool)
    app.state.pool = pool
    logger.info("Account recovery API ready, code TTL %ds", settings.recovery_code_ttl_seconds)

    yield

    pool.close()
    logger.info("Recovery store pool closed")


app = FastAPI(
    title="account-recovery",
    description="Account Recovery API - Resolve a user from claims, select recovery channels "
    "and issue single-use recovery codes",
    version="0.1.0",
    openapi_tags=tags_metadata,
    lifespan=lifespan,
)

app.include_router(v1_router, prefix="/v1")


@app.get("/health")
async def health_check(request: Request) -> dict[str, str]:
    """Report healthy once the recovery store database answers a query."""
    pool = request.app.state.pool
    with pool.connection() as conn:
        conn.execute("SELECT 1")

    return {"status": "healthy"}
