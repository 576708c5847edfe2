"""
Unit tests for the artifact publisher.
"""

from pathlib import Path
from unittest.mock import patch

import pytest

from render_service.core.errors import RenderError
from render_service.services.publisher import ArtifactPublisher, artifact_url

RENDER_ID = "550e8400-e29b-41d4-a716-446655440000"


class TestArtifactUrl:
    """Tests for artifact_url."""

    def test_builds_absolute_url(self):
        assert (
            artifact_url("http://localhost:3000/", RENDER_ID)
            == f"http://localhost:3000/renders/{RENDER_ID}.mp4"
        )

    def test_without_trailing_slash(self):
        assert (
            artifact_url("https://cdn.example.com", RENDER_ID)
            == f"https://cdn.example.com/renders/{RENDER_ID}.mp4"
        )


class TestPublish:
    """Tests for ArtifactPublisher.publish."""

    @pytest.mark.asyncio
    async def test_moves_render_into_output_dir(self, tmp_path: Path):
        output_dir = tmp_path / "renders"
        output_dir.mkdir()
        rendered = tmp_path / "out.mp4"
        rendered.write_bytes(b"video-bytes")

        final_path = await ArtifactPublisher(output_dir).publish(rendered, RENDER_ID)

        assert final_path == (output_dir / f"{RENDER_ID}.mp4").resolve()
        assert final_path.read_bytes() == b"video-bytes"
        assert not rendered.exists()
        assert [p.name for p in output_dir.iterdir()] == [f"{RENDER_ID}.mp4"]

    @pytest.mark.asyncio
    async def test_missing_render_is_render_error(self, tmp_path: Path):
        output_dir = tmp_path / "renders"
        output_dir.mkdir()

        with pytest.raises(RenderError, match="Failed to publish"):
            await ArtifactPublisher(output_dir).publish(tmp_path / "nope.mp4", RENDER_ID)

        assert list(output_dir.iterdir()) == []

    @pytest.mark.asyncio
    async def test_failed_rename_leaves_no_partial(self, tmp_path: Path):
        output_dir = tmp_path / "renders"
        output_dir.mkdir()
        rendered = tmp_path / "out.mp4"
        rendered.write_bytes(b"video-bytes")

        with patch(
            "render_service.services.publisher.os.replace", side_effect=OSError("EXDEV")
        ):
            with pytest.raises(RenderError):
                await ArtifactPublisher(output_dir).publish(rendered, RENDER_ID)

        assert list(output_dir.iterdir()) == []
