"""
Application Configuration

Settings class using pydantic-settings for environment variable loading.
Defines directories, toolchain locations, timeouts and request limits.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables.
    For example, render_output_dir can be set via RENDER_OUTPUT_DIR env var.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="Component Render Service", description="Application name")
    version: str = Field(default="0.1.0", description="API version")
    host: str = Field(default="0.0.0.0", description="Listen address")
    port: int = Field(default=3000, description="Listen port")
    log_level: str = Field(default="INFO", description="Root log level")

    # Storage
    render_output_dir: str = Field(
        default="./renders",
        description="Directory where finished renders are published",
    )
    workspace_dir: str = Field(
        default="./.render-workspaces",
        description="Parent directory for per-request build workspaces",
    )
    public_base_url: Optional[str] = Field(
        default=None,
        description="Origin used in returned video URLs (defaults to the request origin)",
    )

    # Remotion toolchain
    remotion_project_dir: str = Field(
        default=".",
        description="Directory holding node_modules with remotion installed (subprocess cwd)",
    )
    npx_binary: str = Field(default="npx", description="npx executable")
    render_codec: str = Field(default="h264", description="Codec passed to the renderer")
    chromium_multiprocess_on_linux: bool = Field(
        default=True,
        description="Pass --enable-multiprocess-on-linux to the renderer",
    )
    remotion_version: str = Field(default="^4.0.0", description="remotion pin in generated manifests")
    react_version: str = Field(default="^18.2.0", description="react pin in generated manifests")
    react_dom_version: str = Field(default="^18.2.0", description="react-dom pin in generated manifests")

    # Timeouts (seconds)
    bundle_timeout_seconds: int = Field(default=300, gt=0)
    resolve_timeout_seconds: int = Field(default=120, gt=0)
    render_stage_timeout_seconds: int = Field(default=1800, gt=0)
    render_timeout_seconds: int = Field(
        default=2400,
        gt=0,
        description="Upper bound for a whole render request, all stages included",
    )

    # Resource Limits
    max_request_size: int = Field(
        default=10 * 1024 * 1024,  # 10MB
        description="Maximum request body size in bytes (default: 10MB)",
    )

    @property
    def output_path(self) -> Path:
        return Path(self.render_output_dir).resolve()

    @property
    def workspace_root(self) -> Path:
        return Path(self.workspace_dir).resolve()

    @property
    def manifest_dependencies(self) -> dict[str, str]:
        """Dependency pins written into every generated package.json."""
        return {
            "remotion": self.remotion_version,
            "react": self.react_version,
            "react-dom": self.react_dom_version,
        }


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings instance.

    Uses lru_cache to ensure settings are only loaded once per process.

    Returns:
        Settings: Application settings instance

    Example:
        >>> settings = get_settings()
        >>> print(settings.max_request_size)
        10485760
    """
    return Settings()
