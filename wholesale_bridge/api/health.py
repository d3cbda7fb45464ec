"""Health check endpoints."""

from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter

from wholesale_bridge.core.config import settings

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check() -> dict[str, Any]:
    """
    Health check endpoint.

    Reports service name, version and the configured storage backend.
    """
    return {
        "success": True,
        "message": f"{settings.project_name} is running",
        "timestamp": datetime.now(UTC).isoformat(),
        "version": settings.version,
        "environment": settings.environment,
        "storage": settings.storage_backend,
    }


@router.get("/health/live")
async def liveness_check() -> dict[str, str]:
    """
    Liveness probe for container orchestration.

    Simple check that the service is running.
    """
    return {"status": "alive"}
