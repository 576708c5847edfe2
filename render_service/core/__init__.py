# Core modules for the component render service
from .body_limit import RequestBodyLimitMiddleware
from .config import Settings, get_settings
from .errors import (
    CompilationError,
    InvalidInput,
    RenderError,
    RenderPipelineError,
    ResolutionError,
    WorkspaceError,
)
from .process import ProcessFailed, ProcessResult, ProcessTimeout, run_process
from .storage import (
    ensure_directories,
    get_artifact_path,
    get_workspace_path,
    new_render_id,
    remove_workspace,
    validate_render_id,
)

__all__ = [
    # Middleware
    "RequestBodyLimitMiddleware",
    # Config
    "Settings",
    "get_settings",
    # Errors
    "RenderPipelineError",
    "InvalidInput",
    "WorkspaceError",
    "CompilationError",
    "ResolutionError",
    "RenderError",
    # Process
    "run_process",
    "ProcessResult",
    "ProcessFailed",
    "ProcessTimeout",
    # Storage
    "new_render_id",
    "validate_render_id",
    "get_workspace_path",
    "get_artifact_path",
    "ensure_directories",
    "remove_workspace",
]
