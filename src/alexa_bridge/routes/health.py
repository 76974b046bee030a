"""Health check endpoint."""

from fastapi import APIRouter, Depends

from ..config import Settings, get_settings

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(settings: Settings = Depends(get_settings)) -> dict[str, str]:
    """Return service health status."""
    return {
        "status": "healthy",
        "service": settings.service_name,
        "environment": settings.environment,
    }
