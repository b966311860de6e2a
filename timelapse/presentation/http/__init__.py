"""HTTP presentation layer - REST API routes."""

from fastapi import APIRouter

from timelapse.presentation.http.entries import router as entries_router
from timelapse.presentation.http.health import router as health_router
from timelapse.presentation.http.projects import router as projects_router
from timelapse.presentation.http.users import router as users_router

# Main API router
api_router = APIRouter()

# Include sub-routers
api_router.include_router(health_router, tags=["Health"])
api_router.include_router(users_router, tags=["Users"])
api_router.include_router(projects_router, tags=["Projects"])
api_router.include_router(entries_router, tags=["Entries"])

__all__ = ["api_router"]
