"""Health check endpoints."""

from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter, Request, Response, status
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from timelapse.config import Settings
from timelapse.infrastructure.database import get_session_factory
from timelapse.infrastructure.telemetry import get_logger

logger = get_logger(__name__)
router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    timestamp: str
    version: str
    environment: str
    checks: dict[str, Any]


class ReadinessResponse(BaseModel):
    """Readiness check response."""

    ready: bool
    checks: dict[str, bool]


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    """Basic health check endpoint.

    Returns service status without checking dependencies.
    Use /ready for full readiness check.
    """
    settings: Settings = request.app.state.settings

    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(UTC).isoformat(),
        version=settings.version,
        environment=settings.environment,
        checks={},
    )


@router.get("/ready", response_model=ReadinessResponse)
async def readiness_check(request: Request, response: Response) -> ReadinessResponse:
    """Readiness check endpoint.

    Verifies the store answers and at least one identity provider is enabled.
    """
    registry = request.app.state.verifier_registry
    checks: dict[str, bool] = {
        "authentication": registry is not None and len(registry) > 0,
    }

    if request.app.state.repository is not None:
        checks["repository"] = True
    else:
        try:
            async with get_session_factory()() as session:
                await session.execute(text("SELECT 1"))
            checks["repository"] = True
        except (SQLAlchemyError, OSError, TimeoutError) as exc:
            logger.warning("Database readiness check failed", extra={"error": str(exc)})
            checks["repository"] = False

    ready = all(checks.values())
    if not ready:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return ReadinessResponse(ready=ready, checks=checks)
