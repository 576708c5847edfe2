"""
Artifact Publisher

Moves a finished render from its workspace into the output directory and
builds the public URL it is served under (GET /renders/{render_id}.mp4).

The final {render_id}.mp4 name only ever refers to a complete file: the
render is first moved to a hidden partial name inside the output directory
and then renamed into place.
"""

import asyncio
import logging
import os
import shutil
from pathlib import Path

from ..core.errors import RenderError
from ..core.storage import ARTIFACT_SUFFIX, get_artifact_path

logger = logging.getLogger(__name__)

RENDERS_ROUTE = "/renders"


def artifact_url(base_url: str, render_id: str) -> str:
    """
    Build the absolute URL of a published render.

    Example:
        >>> artifact_url("http://localhost:3000/", "550e8400-e29b-41d4-a716-446655440000")
        'http://localhost:3000/renders/550e8400-e29b-41d4-a716-446655440000.mp4'
    """
    return f"{base_url.rstrip('/')}{RENDERS_ROUTE}/{render_id}{ARTIFACT_SUFFIX}"


class ArtifactPublisher:
    """Publishes rendered files into the output directory."""

    def __init__(self, output_dir: Path):
        self.output_dir = output_dir

    def path_for(self, render_id: str) -> Path:
        return get_artifact_path(self.output_dir, render_id)

    async def publish(self, rendered_file: Path, render_id: str) -> Path:
        """
        Move rendered_file to {output_dir}/{render_id}.mp4.

        Raises:
            RenderError: If the file cannot be moved into place
        """
        final_path = self.path_for(render_id)
        try:
            await asyncio.to_thread(self._move_into_place, rendered_file, final_path)
        except OSError as e:
            raise RenderError(f"Failed to publish render: {e}")

        logger.info(f"Published {final_path.name} ({final_path.stat().st_size} bytes)")
        return final_path

    @staticmethod
    def _move_into_place(source: Path, final_path: Path) -> None:
        partial_path = final_path.with_name(f".{final_path.name}.partial")
        try:
            # Same filesystem: rename. Otherwise copy into the output dir first.
            shutil.move(str(source), str(partial_path))
            os.replace(partial_path, final_path)
        except OSError:
            partial_path.unlink(missing_ok=True)
            raise
