"""FastAPI application factory with CORS, error mapping, and lifespan management."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from stockboard.api.errors import register_exception_handlers
from stockboard.config import DEFAULT_CORS_ORIGINS, load_config
from stockboard.registry.db import Database
from stockboard.registry.queries import Registry
from stockboard.service import StockDataService

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Connect the database pool and build the service; close the pool on shutdown."""
    config = load_config()

    db = Database(
        config.db_dsn,
        min_size=config.db_pool_min,
        max_size=config.db_pool_max,
        timeout=config.db_pool_timeout,
    )
    service = StockDataService.from_config(Registry(db), config)
    db.connect()

    app.state.db = db
    app.state.service = service
    logger.info("API started, history files from %s", config.data_dir)
    try:
        yield
    finally:
        db.close()
        app.state.service = None
        app.state.db = None
    logger.info("API shutdown complete")


def create_app(
    service: StockDataService | None = None,
    *,
    use_lifespan: bool = True,
    cors_origins: Sequence[str] | None = None,
) -> FastAPI:
    """Build and return the FastAPI application.

    Args:
        service: Pre-built service to serve from. Tests pass one in together
            with ``use_lifespan=False``.
        use_lifespan: If False, skip the production lifespan that loads
            config and connects the database.
        cors_origins: Allowed frontend origins. Defaults to CORS_ORIGINS from
            the environment.
    """
    app = FastAPI(
        title="Stockboard API",
        version="0.1.0",
        lifespan=lifespan if use_lifespan else None,
    )
    app.state.service = service
    app.state.db = None

    if cors_origins is None:
        cors_origins = load_config().cors_origins if use_lifespan else DEFAULT_CORS_ORIGINS

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(cors_origins),
        allow_credentials=True,
        allow_methods=["GET", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    register_exception_handlers(app)

    from stockboard.api.routes import predictions, stocks, system

    app.include_router(stocks.router, tags=["stocks"])
    app.include_router(predictions.router, tags=["predictions"])
    app.include_router(system.router, tags=["system"])

    return app
