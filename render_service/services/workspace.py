"""
Workspace Builder

Materializes a self-contained Remotion project for one render request:

    render-{id}/
        Component.tsx   caller source, verbatim
        index.tsx       generated entry module declaring one <Composition>
        package.json    generated manifest pinning the toolchain

The caller's source is opaque payload here; it only becomes executable once
the bundler compiles it.
"""

import json
import logging
from pathlib import Path
from string import Template
from typing import Dict, List

import aiofiles
import aiofiles.os

from ..core.errors import WorkspaceError
from ..schemas.render import RenderRequest

logger = logging.getLogger(__name__)

COMPONENT_FILENAME = "Component.tsx"
ENTRY_FILENAME = "index.tsx"
MANIFEST_FILENAME = "package.json"

# Every substitution is a JSON literal or a validated integer, never raw text.
ENTRY_TEMPLATE = Template(
    """\
import { registerRoot, Composition } from "remotion";
import React from "react";
import DynamicComponent from "./Component";

const Root: React.FC = () => (
  <Composition
    id={$composition_id}
    component={DynamicComponent}
    durationInFrames={$duration_in_frames}
    fps={$fps}
    width={$width}
    height={$height}
  />
);

registerRoot(Root);
"""
)


def _int_literal(name: str, value: int) -> str:
    # bool is an int subclass; reject it along with non-positive values
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise WorkspaceError(f"{name} must be a positive integer, got {value!r}")
    return str(value)


def render_entry_module(request: RenderRequest) -> str:
    """
    Build the entry module source for a request.

    The composition id is emitted as a JSON string literal, which is also a
    valid JavaScript string literal, so the declared id always equals
    request.composition_id byte for byte.
    """
    return ENTRY_TEMPLATE.substitute(
        composition_id=json.dumps(request.composition_id),
        duration_in_frames=_int_literal("durationInFrames", request.duration_in_frames),
        fps=_int_literal("fps", request.fps),
        width=_int_literal("width", request.width),
        height=_int_literal("height", request.height),
    )


def render_manifest(package_name: str, dependencies: Dict[str, str]) -> str:
    """Build package.json for a workspace."""
    manifest = {
        "name": package_name,
        "version": "1.0.0",
        "private": True,
        "dependencies": dict(dependencies),
    }
    return json.dumps(manifest, indent=2) + "\n"


class WorkspaceBuilder:
    """Writes the component, entry module and manifest into a workspace."""

    def __init__(self, dependencies: Dict[str, str]):
        self.dependencies = dict(dependencies)

    async def materialize(self, workspace_dir: Path, request: RenderRequest) -> Path:
        """
        Populate workspace_dir with every file the bundler needs.

        Either all files exist afterwards or none of them do.

        Args:
            workspace_dir: Existing, empty workspace directory
            request: Validated render request

        Returns:
            Path of the generated entry module

        Raises:
            WorkspaceError: If any file cannot be written
        """
        if not request.component_source:
            raise WorkspaceError("Component source is empty")

        files = {
            COMPONENT_FILENAME: request.component_source,
            ENTRY_FILENAME: render_entry_module(request),
            MANIFEST_FILENAME: render_manifest(workspace_dir.name, self.dependencies),
        }

        written: List[Path] = []
        try:
            for filename, content in files.items():
                path = workspace_dir / filename
                await self._write_atomic(path, content)
                written.append(path)
        except OSError as e:
            await self._discard(written)
            raise WorkspaceError(f"Failed to write workspace file: {e}")

        logger.debug(f"Materialized {len(written)} files in {workspace_dir}")
        return workspace_dir / ENTRY_FILENAME

    @staticmethod
    async def _write_atomic(path: Path, content: str) -> None:
        tmp_path = path.with_name(f".{path.name}.tmp")
        try:
            async with aiofiles.open(tmp_path, "w", encoding="utf-8", newline="") as f:
                await f.write(content)
            await aiofiles.os.replace(tmp_path, path)
        except OSError:
            await WorkspaceBuilder._discard([tmp_path])
            raise

    @staticmethod
    async def _discard(paths: List[Path]) -> None:
        for path in paths:
            try:
                await aiofiles.os.remove(path)
            except FileNotFoundError:
                pass
            except OSError as e:
                logger.warning(f"Could not remove partial workspace file {path}: {e}")
