"""
Common dependencies for the render API endpoints.

The pipeline and settings are created once by the application factory and
stored on app.state; route handlers receive them through these dependencies
so tests can swap them with app.dependency_overrides.
"""

from fastapi import Request

from render_service.core.config import Settings
from render_service.services.pipeline import RenderPipeline


def get_pipeline(request: Request) -> RenderPipeline:
    """
    Render pipeline dependency.

    Usage:
        @router.post("/render")
        async def render(pipeline: RenderPipeline = Depends(get_pipeline)):
            ...
    """
    return request.app.state.pipeline


def get_app_settings(request: Request) -> Settings:
    """Settings the application was created with."""
    return request.app.state.settings


__all__ = [
    "get_pipeline",
    "get_app_settings",
]
