"""
Shared test fixtures for the component render service tests.

Provides:
- Isolated settings (output and workspace dirs under tmp_path)
- Fake bundler / resolver / executor standing in for the Remotion CLI
- A RenderPipeline wired to the fakes
- An async HTTP client for the FastAPI application
"""

import asyncio
import os
import re
import tempfile
from pathlib import Path
from typing import AsyncGenerator, List, Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Set test environment variables before importing app modules
_test_root = tempfile.mkdtemp(prefix="render_service_test_")
os.environ["RENDER_OUTPUT_DIR"] = os.path.join(_test_root, "renders")
os.environ["WORKSPACE_DIR"] = os.path.join(_test_root, "workspaces")

from render_service.core.config import Settings
from render_service.core.errors import CompilationError, ResolutionError
from render_service.main import create_app
from render_service.services.engine import (
    Bundler,
    CompositionResolver,
    RenderExecutor,
    ResolvedComposition,
)
from render_service.services.pipeline import RenderPipeline
from render_service.services.workspace import COMPONENT_FILENAME

# Smallest thing that looks like an MP4 (ftyp box)
FAKE_MP4_BYTES = b"\x00\x00\x00\x18ftypmp42\x00\x00\x00\x00mp42isom"

VALID_COMPONENT = """\
import { AbsoluteFill, useCurrentFrame } from "remotion";

export default function Hello() {
  const frame = useCurrentFrame();
  return <AbsoluteFill style={{ backgroundColor: "white" }}>Frame {frame}</AbsoluteFill>;
}
"""

BROKEN_COMPONENT = "export default function Broken( { SYNTAX ERROR"

ENTRY_PATTERN = re.compile(
    r'id=\{"(?P<id>[^"]+)"\}.*?durationInFrames=\{(?P<frames>\d+)\}.*?'
    r"fps=\{(?P<fps>\d+)\}.*?width=\{(?P<width>\d+)\}.*?height=\{(?P<height>\d+)\}",
    re.DOTALL,
)


# =============================================================================
# Fake Engine Adapters
# =============================================================================


class FakeBundler(Bundler):
    """Copies the entry module into a fake bundle; fails on broken source."""

    def __init__(self):
        self.calls: List[Path] = []
        self.error: Optional[Exception] = None
        self.delay: float = 0.0
        self.started = asyncio.Event()

    async def bundle(self, entry_point: Path, out_dir: Path) -> str:
        self.calls.append(entry_point.parent)
        self.started.set()
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise self.error

        source = (entry_point.parent / COMPONENT_FILENAME).read_text(encoding="utf-8")
        if "SYNTAX ERROR" in source:
            raise CompilationError("Bundling failed: Unexpected token (1:34)")

        out_dir.mkdir()
        (out_dir / "index.html").write_text("<html></html>")
        (out_dir / "entry.tsx").write_text(entry_point.read_text(encoding="utf-8"))
        return str(out_dir)


class FakeResolver(CompositionResolver):
    """Reads the composition declared in the bundled entry module."""

    def __init__(self):
        self.calls: List[str] = []
        self.error: Optional[Exception] = None

    async def resolve(self, serve_url: str, composition_id: str) -> ResolvedComposition:
        self.calls.append(composition_id)
        if self.error:
            raise self.error

        entry = (Path(serve_url) / "entry.tsx").read_text(encoding="utf-8")
        match = ENTRY_PATTERN.search(entry)
        if not match or match.group("id") != composition_id:
            raise ResolutionError(f"Could not find composition with ID {composition_id}")

        return ResolvedComposition(
            id=match.group("id"),
            width=int(match.group("width")),
            height=int(match.group("height")),
            fps=int(match.group("fps")),
            duration_in_frames=int(match.group("frames")),
        )


class FakeExecutor(RenderExecutor):
    """Writes a tiny MP4-ish file to the output path."""

    def __init__(self):
        self.calls: List[ResolvedComposition] = []
        self.error: Optional[Exception] = None
        self.delay: float = 0.0
        self.started = asyncio.Event()

    async def render(
        self,
        composition: ResolvedComposition,
        serve_url: str,
        output_path: Path,
        codec: str,
    ) -> None:
        self.calls.append(composition)
        self.started.set()
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise self.error
        output_path.write_bytes(FAKE_MP4_BYTES)


# =============================================================================
# Settings & Pipeline Fixtures
# =============================================================================


@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    path = tmp_path / "renders"
    path.mkdir()
    return path


@pytest.fixture
def workspace_root(tmp_path: Path) -> Path:
    return tmp_path / "workspaces"


@pytest.fixture
def test_settings(output_dir: Path, workspace_root: Path) -> Settings:
    """Settings pointing at per-test directories."""
    return Settings(
        render_output_dir=str(output_dir),
        workspace_dir=str(workspace_root),
        render_timeout_seconds=30,
    )


@pytest.fixture
def fake_bundler() -> FakeBundler:
    return FakeBundler()


@pytest.fixture
def fake_resolver() -> FakeResolver:
    return FakeResolver()


@pytest.fixture
def fake_executor() -> FakeExecutor:
    return FakeExecutor()


@pytest.fixture
def pipeline(
    test_settings: Settings,
    fake_bundler: FakeBundler,
    fake_resolver: FakeResolver,
    fake_executor: FakeExecutor,
) -> RenderPipeline:
    """RenderPipeline wired to the fake engine adapters."""
    return RenderPipeline(
        test_settings,
        bundler=fake_bundler,
        resolver=fake_resolver,
        executor=fake_executor,
    )


def workspace_entries(workspace_root: Path) -> List[Path]:
    """Everything left under the workspace root (empty list if it never existed)."""
    if not workspace_root.exists():
        return []
    return list(workspace_root.iterdir())


# =============================================================================
# Test Client Fixtures
# =============================================================================


@pytest_asyncio.fixture(scope="function")
async def async_client(
    test_settings: Settings,
    pipeline: RenderPipeline,
) -> AsyncGenerator[AsyncClient, None]:
    """
    Provide an async HTTP client for testing the FastAPI application.

    The application is built with the test settings and the fake pipeline.
    """
    app = create_app(settings=test_settings, pipeline=pipeline)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
