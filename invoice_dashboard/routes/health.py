"""
Health check route for the Invoice Dashboard backend.

PUBLIC endpoint (no authentication, no database round trip).
"""

from fastapi import APIRouter

from invoice_dashboard.schemas.health import HealthResponse
from invoice_dashboard.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["system"])


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check endpoint",
    status_code=200,
)
async def health_check() -> HealthResponse:
    """Return ``{"status": "ok"}`` while the process is serving requests."""
    logger.debug("Health check endpoint called")

    return HealthResponse()
