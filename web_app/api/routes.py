"""Operational API routes."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from shortlink.url_service import URLShortenerService
from .dependencies import get_url_service
from .schemas import HealthResponse

router = APIRouter()


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"model": HealthResponse, "description": "Store unavailable"}},
    summary="Health check",
    description="Check if the service and its store are healthy.",
)
async def health_check(service: URLShortenerService = Depends(get_url_service)):
    """Health check endpoint for load balancers and monitoring."""
    health = await service.health_check()

    response = HealthResponse(
        status="healthy" if health["overall"] else "unhealthy",
        database="healthy" if health["database"] else "unhealthy",
        timestamp=datetime.now(timezone.utc),
    )
    if not health["overall"]:
        return JSONResponse(status_code=503, content=response.model_dump(mode="json"))
    return response
