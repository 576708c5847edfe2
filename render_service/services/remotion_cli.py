"""
Remotion CLI Adapters
=====================
Bundler, composition resolver and render executor backed by the Remotion
command line (`npx remotion bundle|compositions|render`).

Commands run with cwd=REMOTION_PROJECT_DIR so that `remotion`, `react` and
`react-dom` resolve from the node_modules installed there.
"""

import logging
import re
from pathlib import Path
from typing import Dict, List

from ..core.config import Settings
from ..core.errors import CompilationError, RenderError, ResolutionError
from ..core.process import ProcessFailed, ProcessTimeout, run_process
from .engine import Bundler, CompositionResolver, RenderExecutor, ResolvedComposition

logger = logging.getLogger(__name__)

# Terminal colour codes the CLI emits even when piped
ANSI_ESCAPE = re.compile(r"\x1b\[[0-9;]*[A-Za-z]")

# One row of `remotion compositions`:
#   DynamicComponent    30      1920x1080      150 (5.00 sec)
COMPOSITION_ROW = re.compile(
    r"^\s*(?P<id>[a-zA-Z0-9一-鿿-]+)\s+"
    r"(?P<fps>\d+(?:\.\d+)?)\s+"
    r"(?P<width>\d+)x(?P<height>\d+)\s+"
    r"(?P<frames>\d+)\b"
)


def parse_compositions(output: str) -> Dict[str, ResolvedComposition]:
    """
    Parse the table printed by `remotion compositions`.

    Lines that do not look like a composition row (headers, blank lines,
    log noise) are ignored.

    Args:
        output: stdout of the compositions command

    Returns:
        Mapping of composition id to its resolved parameters
    """
    compositions: Dict[str, ResolvedComposition] = {}

    for line in ANSI_ESCAPE.sub("", output).splitlines():
        match = COMPOSITION_ROW.match(line)
        if not match:
            continue
        fps = float(match.group("fps"))
        compositions[match.group("id")] = ResolvedComposition(
            id=match.group("id"),
            width=int(match.group("width")),
            height=int(match.group("height")),
            fps=int(fps) if fps.is_integer() else fps,
            duration_in_frames=int(match.group("frames")),
        )

    return compositions


class RemotionCli:
    """Shared command construction for the Remotion CLI adapters."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self.project_dir = Path(settings.remotion_project_dir).resolve()

    def command(self, *args: str) -> List[str]:
        return [self.settings.npx_binary, "remotion", *args]


class RemotionBundler(RemotionCli, Bundler):
    """Bundles a workspace with `remotion bundle`."""

    async def bundle(self, entry_point: Path, out_dir: Path) -> str:
        cmd = self.command("bundle", str(entry_point), "--out-dir", str(out_dir))
        try:
            await run_process(
                cmd,
                cwd=self.project_dir,
                timeout_seconds=self.settings.bundle_timeout_seconds,
            )
        except ProcessTimeout as e:
            raise CompilationError(f"Bundling timed out: {e}")
        except ProcessFailed as e:
            raise CompilationError(f"Bundling failed: {e.output or e}")

        if not (out_dir / "index.html").exists():
            raise CompilationError(f"Bundler produced no index.html in {out_dir}")

        return str(out_dir)


class RemotionCompositionResolver(RemotionCli, CompositionResolver):
    """Resolves composition parameters with `remotion compositions`."""

    async def resolve(self, serve_url: str, composition_id: str) -> ResolvedComposition:
        cmd = self.command("compositions", serve_url)
        try:
            result = await run_process(
                cmd,
                cwd=self.project_dir,
                timeout_seconds=self.settings.resolve_timeout_seconds,
            )
        except ProcessTimeout as e:
            raise ResolutionError(f"Selecting composition timed out: {e}")
        except ProcessFailed as e:
            raise ResolutionError(f"Selecting composition failed: {e.output or e}")

        compositions = parse_compositions(result.stdout)
        composition = compositions.get(composition_id)
        if composition is None:
            available = ", ".join(sorted(compositions)) or "none"
            raise ResolutionError(
                f"Could not find composition with ID {composition_id}. "
                f"Available compositions: {available}"
            )

        return composition


class RemotionRenderExecutor(RemotionCli, RenderExecutor):
    """Renders a composition with `remotion render`."""

    async def render(
        self,
        composition: ResolvedComposition,
        serve_url: str,
        output_path: Path,
        codec: str,
    ) -> None:
        cmd = self.command(
            "render",
            serve_url,
            composition.id,
            str(output_path),
            "--codec",
            codec,
            "--width",
            str(composition.width),
            "--height",
            str(composition.height),
            "--fps",
            str(composition.fps),
            "--frames",
            f"0-{composition.duration_in_frames - 1}",
        )
        if self.settings.chromium_multiprocess_on_linux:
            cmd.append("--enable-multiprocess-on-linux")

        try:
            await run_process(
                cmd,
                cwd=self.project_dir,
                timeout_seconds=self.settings.render_stage_timeout_seconds,
            )
        except ProcessTimeout as e:
            raise RenderError(f"Rendering timed out: {e}")
        except ProcessFailed as e:
            raise RenderError(f"Rendering failed: {e.output or e}")

        # Verify output file exists and is not empty
        if not output_path.exists():
            raise RenderError("Output file was not created")
        if output_path.stat().st_size == 0:
            raise RenderError("Output file is empty")
