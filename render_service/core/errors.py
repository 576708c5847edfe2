"""
Render pipeline error taxonomy.

Every stage of the pipeline raises one of these; the orchestrator catches
them at its boundary and turns them into a failed RenderResult.
"""


class RenderPipelineError(Exception):
    """Base class for all pipeline failures."""

    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    @property
    def error_type(self) -> str:
        return type(self).__name__


class InvalidInput(RenderPipelineError):
    """Caller payload failed required-field validation."""

    status_code = 400

    MISSING_CODE = "Missing code"


class WorkspaceError(RenderPipelineError):
    """The temporary workspace could not be created, populated or removed."""

    pass


class CompilationError(RenderPipelineError):
    """The bundler rejected the workspace (e.g. malformed component source)."""

    pass


class ResolutionError(RenderPipelineError):
    """The requested composition id is not declared in the bundle."""

    pass


class RenderError(RenderPipelineError):
    """The rendering engine failed, crashed or timed out."""

    pass
