"""
Render Pipeline Orchestrator

Runs one render request end to end:

1. Validate the request (no side effects before this passes)
2. Allocate a render identity and an exclusive workspace
3. Materialize the workspace (component, entry module, manifest)
4. Bundle the entry module
5. Resolve the requested composition
6. Render into the workspace
7. Publish the render into the output directory
8. Remove the workspace, whatever happened in 3-7

Every stage failure is turned into a failed RenderResult here; nothing
raised by a stage escapes to the HTTP layer except InvalidInput.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import AsyncIterator, Optional

import aiofiles.os

from ..core.config import Settings
from ..core.errors import InvalidInput, RenderError, RenderPipelineError, WorkspaceError
from ..core.storage import get_workspace_path, new_render_id, remove_workspace
from ..schemas.render import RenderRequest
from .engine import Bundler, CompositionResolver, RenderExecutor
from .publisher import ArtifactPublisher, artifact_url
from .workspace import WorkspaceBuilder

logger = logging.getLogger(__name__)

BUNDLE_DIRNAME = "bundle"
RENDER_FILENAME = "out.mp4"


@dataclass
class RenderResult:
    """Outcome of one pipeline run."""

    success: bool
    render_id: str
    artifact_url: Optional[str] = None
    error: Optional[str] = None
    error_type: Optional[str] = None
    status_code: int = 200

    @classmethod
    def failed(cls, render_id: str, error: RenderPipelineError) -> "RenderResult":
        return cls(
            success=False,
            render_id=render_id,
            error=error.message,
            error_type=error.error_type,
            status_code=error.status_code,
        )


class RenderPipeline:
    """
    Orchestrates workspace, bundler, resolver, executor and publisher.

    All configuration (directories, codec, timeout) is injected at
    construction; instances hold no per-request state and are safe to share
    between concurrent requests.
    """

    def __init__(
        self,
        settings: Settings,
        bundler: Bundler,
        resolver: CompositionResolver,
        executor: RenderExecutor,
        builder: Optional[WorkspaceBuilder] = None,
        publisher: Optional[ArtifactPublisher] = None,
    ):
        self.workspace_root = settings.workspace_root
        self.output_dir = settings.output_path
        self.codec = settings.render_codec
        self.timeout_seconds = settings.render_timeout_seconds
        self.public_base_url = settings.public_base_url
        self.bundler = bundler
        self.resolver = resolver
        self.executor = executor
        self.builder = builder or WorkspaceBuilder(settings.manifest_dependencies)
        self.publisher = publisher or ArtifactPublisher(self.output_dir)

    @classmethod
    def from_settings(cls, settings: Settings) -> "RenderPipeline":
        """Build a pipeline backed by the Remotion CLI."""
        from .remotion_cli import (
            RemotionBundler,
            RemotionCompositionResolver,
            RemotionRenderExecutor,
        )

        return cls(
            settings,
            bundler=RemotionBundler(settings),
            resolver=RemotionCompositionResolver(settings),
            executor=RemotionRenderExecutor(settings),
        )

    @staticmethod
    def validate(request: RenderRequest) -> None:
        """
        Reject requests that cannot be rendered.

        Raises:
            InvalidInput: If the component source is missing or empty
        """
        if not request.component_source or not request.component_source.strip():
            raise InvalidInput(InvalidInput.MISSING_CODE)

    async def handle(self, request: RenderRequest, base_url: str) -> RenderResult:
        """
        Render a request and publish the result.

        Args:
            request: Parsed render request
            base_url: Origin of the inbound request, used for the video URL
                unless PUBLIC_BASE_URL is configured

        Returns:
            RenderResult, successful or not

        Raises:
            InvalidInput: Before any resource is allocated
        """
        self.validate(request)

        render_id = new_render_id()
        logger.info(
            f"[{render_id}] Starting render... composition={request.composition_id} "
            f"frames={request.duration_in_frames} fps={request.fps} "
            f"size={request.width}x{request.height}"
        )

        try:
            async with self.workspace(render_id) as workspace_dir:
                await asyncio.wait_for(
                    self._run_stages(render_id, workspace_dir, request),
                    timeout=self.timeout_seconds,
                )
        except asyncio.TimeoutError:
            error = RenderError(f"Render timed out after {self.timeout_seconds} seconds")
            logger.error(f"[{render_id}] Failed: {error.message}")
            return RenderResult.failed(render_id, error)
        except RenderPipelineError as e:
            logger.error(f"[{render_id}] Failed ({e.error_type}): {e.message}")
            return RenderResult.failed(render_id, e)
        except asyncio.CancelledError:
            logger.warning(f"[{render_id}] Cancelled")
            raise
        except Exception as e:
            logger.error(f"[{render_id}] Failed: {e}", exc_info=True)
            return RenderResult.failed(render_id, RenderError(str(e) or "Render failed"))

        logger.info(f"[{render_id}] Complete!")
        return RenderResult(
            success=True,
            render_id=render_id,
            artifact_url=artifact_url(self.public_base_url or base_url, render_id),
        )

    async def _run_stages(self, render_id: str, workspace_dir: Path, request: RenderRequest) -> Path:
        entry_point = await self.builder.materialize(workspace_dir, request)

        logger.info(f"[{render_id}] Bundling...")
        serve_url = await self.bundler.bundle(entry_point, workspace_dir / BUNDLE_DIRNAME)

        logger.info(f"[{render_id}] Selecting composition...")
        composition = await self.resolver.resolve(serve_url, request.composition_id)

        logger.info(
            f"[{render_id}] Rendering... {composition.width}x{composition.height} "
            f"@ {composition.fps}fps, {composition.duration_in_frames} frames"
        )
        rendered_file = workspace_dir / RENDER_FILENAME
        await self.executor.render(composition, serve_url, rendered_file, self.codec)

        return await self.publisher.publish(rendered_file, render_id)

    @asynccontextmanager
    async def workspace(self, render_id: str) -> AsyncIterator[Path]:
        """
        Create an exclusive workspace and remove it on every exit path.

        Raises:
            WorkspaceError: If the directory cannot be created (including
                when it already exists)
        """
        path = get_workspace_path(self.workspace_root, render_id)
        try:
            await aiofiles.os.makedirs(self.workspace_root, exist_ok=True)
            await aiofiles.os.mkdir(path)
        except OSError as e:
            raise WorkspaceError(f"Failed to create workspace: {e}")

        try:
            yield path
        finally:
            await self._cleanup(render_id, path)

    @staticmethod
    async def _cleanup(render_id: str, path: Path) -> None:
        # Shielded so a cancelled request still finishes removing its workspace
        try:
            await asyncio.shield(asyncio.to_thread(remove_workspace, path))
        except OSError as e:
            logger.error(f"[{render_id}] Failed to remove workspace {path}: {e}")
