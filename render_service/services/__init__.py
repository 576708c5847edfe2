"""
Render pipeline services.

- workspace: per-request Remotion project generation
- engine: bundler / composition resolver / render executor contracts
- remotion_cli: Remotion CLI implementations of those contracts
- publisher: artifact publication and URLs
- pipeline: the orchestrator tying them together
"""

from .engine import Bundler, CompositionResolver, RenderExecutor, ResolvedComposition
from .pipeline import RenderPipeline, RenderResult
from .publisher import ArtifactPublisher, artifact_url
from .workspace import WorkspaceBuilder, render_entry_module, render_manifest

__all__ = [
    "Bundler",
    "CompositionResolver",
    "RenderExecutor",
    "ResolvedComposition",
    "RenderPipeline",
    "RenderResult",
    "ArtifactPublisher",
    "artifact_url",
    "WorkspaceBuilder",
    "render_entry_module",
    "render_manifest",
]
