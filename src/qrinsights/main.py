# File: src/qrinsights/main.py
"""FastAPI application factory."""

import os
from contextlib import asynccontextmanager
from datetime import datetime
from typing import AsyncIterator, Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from qrinsights.core.cache import ResultCache
from qrinsights.core.logging import configure_logging, get_logger

configure_logging(os.getenv("LOG_LEVEL", "INFO"))
logger = get_logger(__name__)


async def _check_database() -> None:
    """Log whether the store is reachable; the API still starts when it is not."""
    from qrinsights.core.db import DATABASE_URL, engine

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as exc:
        logger.error("db.unreachable", dialect=engine.dialect.name, error=str(exc))
        return
    logger.info(
        "db.connected",
        dialect=engine.dialect.name,
        database=DATABASE_URL.rsplit("/", 1)[-1],
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Lifespan context manager for startup and shutdown events."""
    start_time = datetime.now()
    logger.info("app.startup", message="QR Insights starting up", timestamp=start_time.isoformat())

    from qrinsights.api.health import set_app_start_time
    from qrinsights.core.sentry import init_sentry

    set_app_start_time(start_time)
    init_sentry()
    await _check_database()

    yield

    from qrinsights.core.db import engine

    await engine.dispose()
    logger.info("app.shutdown", message="QR Insights shutting down gracefully")


def _setup_middleware(app: FastAPI, cors_origins: list[str]) -> None:
    """Configure all middleware in correct order."""
    from qrinsights.middleware.errors import UnhandledErrorMiddleware

    # Last added runs first: RequestIDMiddleware wraps everything
    app.add_middleware(UnhandledErrorMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_methods=["GET"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )

    from qrinsights.middleware.logging import RequestIDMiddleware

    app.add_middleware(RequestIDMiddleware)


def _register_routers(app: FastAPI) -> None:
    """Register all API routers."""
    from qrinsights.api.analytics import router as analytics_router
    from qrinsights.api.health import router as health_router
    from qrinsights.api.index import router as index_router

    app.include_router(index_router)
    app.include_router(health_router)
    app.include_router(analytics_router)


def create_app(result_cache: Optional[ResultCache] = None) -> FastAPI:
    """Application factory; each app owns one result cache."""
    app = FastAPI(
        title="QR Insights API",
        description="Cached analytics over QR code generation batches",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.result_cache = result_cache if result_cache is not None else ResultCache()

    from qrinsights.core.exception_handlers import register_exception_handlers

    register_exception_handlers(app)

    cors_origins = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
    _setup_middleware(app, cors_origins)
    _register_routers(app)

    logger.info(
        "app.configured",
        cache_ttl_seconds=app.state.result_cache.ttl_seconds,
        cache_max_entries=app.state.result_cache.max_entries,
    )

    return app


def run() -> None:
    """Development server entrypoint."""
    uvicorn.run(
        "qrinsights.main:create_app",
        factory=True,
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "5000")),
        reload=os.getenv("ENVIRONMENT", "development") == "development",
    )
