"""
Render Storage & Identity

Provides render identity and filesystem path handling with:
- Collision-resistant render identities (UUID4)
- Identity validation for anything that arrives over the wire
- Path traversal prevention for workspace and artifact paths
- Idempotent workspace removal
"""

import logging
import os
import shutil
from pathlib import Path
from uuid import UUID, uuid4

logger = logging.getLogger(__name__)

WORKSPACE_PREFIX = "render-"
ARTIFACT_SUFFIX = ".mp4"


def new_render_id() -> str:
    """
    Generate a fresh render identity.

    Returns:
        str: Canonical UUID4 string (128 random bits)

    Example:
        >>> new_render_id()
        '550e8400-e29b-41d4-a716-446655440000'
    """
    return str(uuid4())


def validate_render_id(render_id: str) -> bool:
    """
    Validate that a render ID is a canonical UUID string.

    Args:
        render_id: Render ID string to validate

    Returns:
        bool: True if valid, False otherwise

    Example:
        >>> validate_render_id("550e8400-e29b-41d4-a716-446655440000")
        True
        >>> validate_render_id("../malicious")
        False
    """
    try:
        return str(UUID(render_id)) == render_id
    except (ValueError, TypeError, AttributeError):
        return False


def _ensure_within(root: Path, path: Path) -> Path:
    """Resolve path and verify it stays below root."""
    resolved_path = path.resolve()
    resolved_root = root.resolve()

    if not str(resolved_path).startswith(str(resolved_root) + os.sep):
        raise ValueError("Path traversal detected: path escapes storage root")

    return resolved_path


def get_workspace_path(workspace_root: Path, render_id: str) -> Path:
    """
    Get the workspace directory for a render.

    The path is structured as:
        {workspace_root}/render-{render_id}

    Raises:
        ValueError: If render_id is invalid or path traversal is detected
    """
    if not validate_render_id(render_id):
        raise ValueError("Invalid render ID: must be a valid UUID")

    return _ensure_within(workspace_root, workspace_root / f"{WORKSPACE_PREFIX}{render_id}")


def get_artifact_path(output_dir: Path, render_id: str) -> Path:
    """
    Get the published artifact path for a render.

    The path is structured as:
        {output_dir}/{render_id}.mp4

    Raises:
        ValueError: If render_id is invalid or path traversal is detected
    """
    if not validate_render_id(render_id):
        raise ValueError("Invalid render ID: must be a valid UUID")

    return _ensure_within(output_dir, output_dir / f"{render_id}{ARTIFACT_SUFFIX}")


def ensure_directories(*paths: Path) -> None:
    """Create each directory (and parents) if it does not exist yet."""
    for path in paths:
        path.mkdir(parents=True, exist_ok=True)


def remove_workspace(path: Path) -> bool:
    """
    Recursively delete a workspace directory.

    A missing directory is not an error.

    Args:
        path: Workspace directory

    Returns:
        bool: True if something was removed, False if it was already gone

    Raises:
        OSError: If the directory exists but could not be removed
    """
    if not path.exists():
        return False

    shutil.rmtree(path)
    logger.debug(f"Removed workspace {path}")
    return True
