"""
Pydantic schemas for the component render API.
"""

from .render import (
    COMPONENT_SOURCE_KEYS,
    COMPOSITION_ID_PATTERN,
    DEFAULT_COMPOSITION_ID,
    ErrorResponse,
    HealthResponse,
    RenderFailureResponse,
    RenderRequest,
    RenderSuccessResponse,
    missing_component_source,
)

__all__ = [
    "COMPONENT_SOURCE_KEYS",
    "COMPOSITION_ID_PATTERN",
    "DEFAULT_COMPOSITION_ID",
    "ErrorResponse",
    "HealthResponse",
    "RenderFailureResponse",
    "RenderRequest",
    "RenderSuccessResponse",
    "missing_component_source",
]
