"""
Render service API routes package.
"""

from fastapi import APIRouter

from .health import router as health_router
from .render import router as render_router

# Main API router that includes all sub-routers
api_router = APIRouter()

api_router.include_router(health_router, tags=["health"])
api_router.include_router(render_router, tags=["render"])

__all__ = [
    "api_router",
    "health_router",
    "render_router",
]
