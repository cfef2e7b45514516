"""
Health check API routes.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Response, status

from dating_service.di import Container
from dating_service.presentation.api.dependencies import get_container

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
async def health_check(
    response: Response,
    container: Container = Depends(get_container),
):
    """
    Health check endpoint.

    Returns 503 when the database is unreachable or shutdown has begun,
    so load balancers stop routing new requests here.

    Returns:
        Health status dict with component checks
    """
    db_healthy = await container.database.health_check()
    shutdown_info = container.shutdown_manager.get_shutdown_info()

    if shutdown_info["is_shutting_down"]:
        overall_status = "shutting_down"
    elif db_healthy:
        overall_status = "healthy"
    else:
        overall_status = "degraded"

    if overall_status != "healthy":
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return {
        "status": overall_status,
        "service": container.settings.APP_NAME,
        "version": container.settings.APP_VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "components": {
            "database": {
                "status": "healthy" if db_healthy else "unhealthy",
            },
            "lifecycle": shutdown_info,
        },
    }
