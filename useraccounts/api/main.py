"""
FastAPI application factory and configuration.

This module creates the FastAPI application instance,
configures logging, middleware, exception handlers, and lifespan events.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from psycopg_pool import ConnectionPool

from useraccounts.adapters.repository.postgres import run_migrations
from useraccounts.api.errors import register_exception_handlers
from useraccounts.api.routers import countries_router, users_router
from useraccounts.config.settings import get_settings

logger = logging.getLogger(__name__)

# OpenAPI tags for documentation grouping
tags_metadata = [
    {"name": "Users", "description": "Operations related to users"},
    {"name": "Countries", "description": "Country postal code reference data"},
]


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    FastAPI lifespan context manager.

    Manages application startup and shutdown:
    - Creates database connection pool on startup
    - Runs migrations on startup
    - Closes connection pool on shutdown
    """
    settings = get_settings()

    logger.info("Starting application...")
    logger.info("Connecting to database...")

    pool = ConnectionPool(
        conninfo=settings.database_url,
        min_size=settings.pool_min_size,
        max_size=settings.pool_max_size,
        open=True,
    )

    logger.info("Running database migrations...")
    run_migrations(pool)

    # Store pool in app state for dependency injection
    app.state.pool = pool

    logger.info("Application startup complete")

    yield

    logger.info("Shutting down application...")
    pool.close()
    logger.info("Database connection pool closed")


def create_app() -> FastAPI:
    """Build the application with routers, CORS and error handlers installed."""
    settings = get_settings()
    configure_logging(settings.log_level)

    application = FastAPI(
        title="useraccounts",
        description="User accounts API - registration, JWT sessions, addresses and country postal codes",
        version="0.1.0",
        openapi_tags=tags_metadata,
        lifespan=lifespan,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(application)
    application.include_router(users_router)
    application.include_router(countries_router)

    @application.get("/health", tags=["Health"])
    async def health_check(request: Request) -> dict[str, str]:
        """
        Health check endpoint with database validation.

        Returns 200 OK if application and database are healthy.
        Raises exception if database connection fails.
        """
        pool = request.app.state.pool
        with pool.connection() as conn:
            conn.execute("SELECT 1")

        return {"status": "healthy"}

    return application


app = create_app()
