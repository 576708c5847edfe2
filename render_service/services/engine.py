"""
Render Engine Contracts
=======================
Abstract base classes for the three external collaborators the pipeline
drives: the bundler, the composition resolver and the render executor.

Each adapter awaits a single result or raises the matching pipeline error.
None of them retry.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class ResolvedComposition:
    """Render-target parameters resolved from a bundle."""

    id: str
    width: int
    height: int
    fps: float
    duration_in_frames: int


class Bundler(ABC):
    """Compiles a workspace entry point into a servable bundle."""

    @abstractmethod
    async def bundle(self, entry_point: Path, out_dir: Path) -> str:
        """
        Bundle the entry module.

        Args:
            entry_point: Generated entry module inside the workspace
            out_dir: Directory the bundle is written to

        Returns:
            Bundle location token (serve URL or directory path)

        Raises:
            CompilationError: If compilation fails
        """
        pass


class CompositionResolver(ABC):
    """Looks up a named composition inside a bundle."""

    @abstractmethod
    async def resolve(self, serve_url: str, composition_id: str) -> ResolvedComposition:
        """
        Resolve composition parameters.

        Raises:
            ResolutionError: If the id is not declared in the bundle
        """
        pass


class RenderExecutor(ABC):
    """Renders a resolved composition to a video file."""

    @abstractmethod
    async def render(
        self,
        composition: ResolvedComposition,
        serve_url: str,
        output_path: Path,
        codec: str,
    ) -> None:
        """
        Render the composition to output_path.

        Raises:
            RenderError: If the engine fails or produces no output
        """
        pass
