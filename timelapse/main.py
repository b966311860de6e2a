"""FastAPI application factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from timelapse.config import Settings, get_settings
from timelapse.domain.protocols import TimelapseRepository
from timelapse.infrastructure.auth import VerifierRegistry, build_verifier_registry
from timelapse.infrastructure.database import close_db, init_db
from timelapse.infrastructure.middleware import (
    RequestContextMiddleware,
    error_handler_middleware,
)
from timelapse.infrastructure.repositories import InMemoryTimelapseRepository
from timelapse.infrastructure.telemetry import configure_logging, get_logger
from timelapse.presentation.http import api_router

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    settings: Settings = app.state.settings
    uses_database = app.state.repository is None

    # Startup
    logger.info(
        "Starting timelapse server",
        extra={
            "version": settings.version,
            "environment": settings.environment,
        },
    )
    settings.log_config_summary()

    if uses_database:
        await init_db(settings)
        logger.info("Database connection initialized")

    if app.state.verifier_registry is None:
        app.state.verifier_registry = await build_verifier_registry(settings)
    if len(app.state.verifier_registry) == 0:
        logger.error("No authentication provider available; every request will be rejected")

    yield

    # Shutdown
    logger.info("Shutting down timelapse server")
    if uses_database:
        await close_db()
        logger.info("Database connection closed")


def create_app(
    settings: Settings | None = None,
    verifier_registry: VerifierRegistry | None = None,
    repository: TimelapseRepository | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Optional settings override for testing
        verifier_registry: Pre-built verifiers; discovered at startup when omitted
        repository: Fixed repository instance; defaults to the configured backend

    Returns:
        Configured FastAPI application
    """
    if settings is None:
        settings = get_settings()

    configure_logging(
        level=settings.log_level,
        format_type=settings.log_format,
        service_name=settings.service_name,
    )

    app = FastAPI(
        title="timelapse API",
        description="Time tracking for projects, work sessions and days off",
        version=settings.version,
        lifespan=lifespan,
        docs_url="/docs" if not settings.is_production else None,
        redoc_url="/redoc" if not settings.is_production else None,
    )

    if repository is None and settings.repository_backend == "memory":
        repository = InMemoryTimelapseRepository()

    app.state.settings = settings
    app.state.verifier_registry = verifier_registry
    app.state.repository = repository

    # Add middleware (order matters - last added is first executed)
    if settings.cors_allow_origins_list:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_allow_origins_list,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )
    app.add_middleware(
        RequestContextMiddleware,
        timeout_seconds=settings.request_timeout_seconds,
    )

    # Register error handlers
    error_handler_middleware(app)

    # Include API routes
    app.include_router(api_router)

    return app


def run() -> None:
    """Serve the default app with uvicorn (``timelapse-server``)."""
    settings = get_settings()
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)


# Default app instance for uvicorn
app = create_app()
