"""
Render API endpoints.

Provides the endpoint that renders submitted component source into a video
and the endpoint that serves finished renders.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import FileResponse, JSONResponse

from render_service.api.deps import get_app_settings, get_pipeline
from render_service.core.config import Settings
from render_service.core.errors import InvalidInput
from render_service.core.storage import get_artifact_path, validate_render_id
from render_service.schemas.render import (
    ErrorResponse,
    RenderFailureResponse,
    RenderRequest,
    RenderSuccessResponse,
)
from render_service.services.pipeline import RenderPipeline

router = APIRouter()


@router.post(
    "/render",
    response_model=RenderSuccessResponse,
    summary="Render a component",
    description="Bundle the submitted component, render it and return the video URL.",
    responses={
        400: {
            "model": ErrorResponse,
            "description": (
                "Missing code, or a malformed field: non-positive durationInFrames, "
                "fps, width or height, or a compositionId outside latin letters, "
                "digits, CJK characters and \"-\""
            ),
        },
        413: {"model": ErrorResponse, "description": "Request body too large"},
        500: {"model": RenderFailureResponse, "description": "A pipeline stage failed"},
    },
)
async def render_component(
    request: Request,
    payload: Optional[RenderRequest] = None,
    pipeline: RenderPipeline = Depends(get_pipeline),
):
    """
    Render a component to MP4.

    Steps:
    1. Reject requests without component source (400, nothing allocated)
    2. Run the render pipeline
    3. Return 200 with the video URL, or 500 with the failure message
    """
    payload = payload or RenderRequest()

    try:
        result = await pipeline.handle(payload, base_url=str(request.base_url))
    except InvalidInput as e:
        return JSONResponse(
            status_code=e.status_code,
            content=ErrorResponse(error=e.message).model_dump(),
        )

    if not result.success:
        failure = RenderFailureResponse(error=result.error, render_id=result.render_id)
        return JSONResponse(
            status_code=result.status_code,
            content=failure.model_dump(by_alias=True),
        )

    return RenderSuccessResponse(video_url=result.artifact_url, render_id=result.render_id)


@router.get(
    "/renders/{render_id}.mp4",
    response_class=FileResponse,
    summary="Download a render",
    responses={404: {"model": ErrorResponse, "description": "Render not found"}},
)
async def get_render(
    render_id: str,
    settings: Settings = Depends(get_app_settings),
) -> FileResponse:
    """Serve a published render read-only."""
    if not validate_render_id(render_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Render not found")

    file_path = get_artifact_path(settings.output_path, render_id)
    if not file_path.is_file():
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Render not found")

    return FileResponse(path=str(file_path), media_type="video/mp4")
