"""
Pydantic schemas for the Render API endpoints.

Wire names are camelCase (compositionId, durationInFrames, videoUrl, renderId);
Python attribute names stay snake_case.
"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# Composition ids the render engine accepts: latin letters, digits, CJK and "-"
COMPOSITION_ID_PATTERN = "^[a-zA-Z0-9一-鿿-]+$"

DEFAULT_COMPOSITION_ID = "DynamicComponent"

# Body keys accepted for the component source
COMPONENT_SOURCE_KEYS = ("code", "componentSource", "component_source")


class CamelModel(BaseModel):
    """Base model that reads and writes camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Request Schemas ---


class RenderRequest(CamelModel):
    """Request to render a component into a video."""

    component_source: Optional[str] = Field(
        None,
        validation_alias=AliasChoices(*COMPONENT_SOURCE_KEYS),
        description="Source of the component module (default export is rendered)",
    )
    composition_id: str = Field(
        DEFAULT_COMPOSITION_ID,
        min_length=1,
        max_length=100,
        pattern=COMPOSITION_ID_PATTERN,
        description="Name of the render target declared in the generated entry module",
    )
    duration_in_frames: int = Field(150, gt=0, description="Video length in frames")
    fps: int = Field(30, gt=0, description="Frames per second")
    width: int = Field(1920, gt=0, description="Output width in pixels")
    height: int = Field(1080, gt=0, description="Output height in pixels")


# --- Response Schemas ---


class RenderSuccessResponse(CamelModel):
    """Response when the video was rendered and published (200 OK)."""

    success: Literal[True] = True
    video_url: str = Field(..., description="Absolute URL of the rendered video")
    render_id: str = Field(..., description="Unique identifier of this render")


class RenderFailureResponse(CamelModel):
    """Response when any pipeline stage failed (500)."""

    success: Literal[False] = False
    error: str = Field(..., description="Human-readable failure message")
    render_id: Optional[str] = Field(None, description="Identifier of the failed render")


class ErrorResponse(BaseModel):
    """Response for rejected requests (400, 404, 413)."""

    error: str = Field(..., description="Error description")


class HealthResponse(BaseModel):
    """Liveness check payload."""

    status: Literal["ok"] = "ok"
    timestamp: datetime = Field(..., description="Server time (UTC)")


def missing_component_source(body) -> bool:
    """
    Return True if a decoded JSON object carries no component source.

    Blank strings count as missing. Bodies that are not JSON objects return
    False so they are reported as malformed rather than missing.
    """
    if not isinstance(body, dict):
        return False
    for key in COMPONENT_SOURCE_KEYS:
        value = body.get(key)
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        return False
    return True
