"""
Health check endpoint.
"""

from datetime import datetime, timezone

from fastapi import APIRouter

from render_service.schemas.render import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Liveness check. No side effects."""
    return HealthResponse(timestamp=datetime.now(timezone.utc))
