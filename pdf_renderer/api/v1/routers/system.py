"""
System Router - Health and status endpoints.
"""

from fastapi import APIRouter

from ....config import settings
from ....models import HealthResponse
from ....services.browser_manager import browser_manager

router = APIRouter(tags=["system"])


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """
    Check service health.

    Reports the browser lifecycle state without touching the browser itself,
    so it answers even while the browser is starting or busy.
    """
    return HealthResponse(
        status="ok",
        service=settings.service_name,
        engine=browser_manager.state,
        active_contexts=browser_manager.active_contexts,
    )


@router.get("/")
async def root() -> dict:
    """Root endpoint."""
    return {
        "service": settings.api_title,
        "version": settings.api_version,
        "status": "running",
    }
