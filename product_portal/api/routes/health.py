from fastapi import APIRouter, Depends, status
from pydantic import BaseModel

from product_portal import __version__
from product_portal.core.config import Settings, get_settings
from product_portal.core.logging import get_logger

# Initialize router and logger
health_router = APIRouter()
logger = get_logger(__name__)


class HealthStatus(BaseModel):
    """Basic health status response model."""
    status: str
    version: str = __version__
    service: str
    gateway_configured: bool


@health_router.get(
    "",
    response_model=HealthStatus,
    status_code=status.HTTP_200_OK,
    summary="Basic health check",
    description="Returns basic health status of the service without calling the gateway."
)
async def get_health(settings: Settings = Depends(get_settings)) -> HealthStatus:
    """
    Basic health check endpoint.

    Returns:
        HealthStatus: Basic service health status
    """
    logger.debug("Health check requested")
    return HealthStatus(
        status="ok",
        service=settings.PROJECT_NAME,
        gateway_configured=bool(settings.apim.BASE_URL)
    )
