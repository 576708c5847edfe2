"""
Component Render Service

Main FastAPI application entry point.

Usage:
    render-service            (console script)
    uvicorn render_service.main:app --port 3000

Environment Variables:
    PORT: Listen port (default: 3000)
    RENDER_OUTPUT_DIR: Where finished renders are published (default: ./renders)
    WORKSPACE_DIR: Parent of per-request build workspaces (default: ./.render-workspaces)
    REMOTION_PROJECT_DIR: Directory with remotion installed in node_modules (default: .)
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from render_service.api import api_router
from render_service.core.body_limit import RequestBodyLimitMiddleware
from render_service.core.config import Settings, get_settings
from render_service.core.errors import InvalidInput
from render_service.core.storage import ensure_directories
from render_service.schemas.render import ErrorResponse, missing_component_source
from render_service.services.pipeline import RenderPipeline

logger = logging.getLogger("render_service")


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging once for the process."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def _format_validation_errors(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(p) for p in error.get("loc", ()) if p != "body")
        message = error.get("msg", "invalid value")
        parts.append(f"{location}: {message}" if location else message)
    return "; ".join(parts) or "malformed body"


def create_app(
    settings: Optional[Settings] = None,
    pipeline: Optional[RenderPipeline] = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Configuration (defaults to environment-derived settings)
        pipeline: Render pipeline (defaults to the Remotion CLI pipeline)

    Returns:
        FastAPI: Configured application
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level)
    pipeline = pipeline or RenderPipeline.from_settings(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        ensure_directories(settings.output_path, settings.workspace_root)
        logger.info(
            f"Render server ready: output={settings.output_path} "
            f"workspaces={settings.workspace_root}"
        )
        yield

    app = FastAPI(
        title=settings.app_name,
        description="Renders submitted Remotion components to MP4",
        version=settings.version,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.pipeline = pipeline

    # Request body size limit (declared Content-Length and streamed bytes)
    app.add_middleware(RequestBodyLimitMiddleware, max_size=settings.max_request_size)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        if missing_component_source(exc.body):
            return JSONResponse(
                status_code=400,
                content=ErrorResponse(error=InvalidInput.MISSING_CODE).model_dump(),
            )
        return JSONResponse(
            status_code=400,
            content={"error": f"Invalid request: {_format_validation_errors(exc)}"},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    app.include_router(api_router)

    return app


def run() -> None:
    """Console entry point: start uvicorn with the configured host/port."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


app = create_app()


if __name__ == "__main__":
    run()
