"""Configuration for bros-runner.

This module provides:
- RetryConfig: Retry policy for image pulls (exponential backoff with jitter)
- RunnerSettings: Runner settings, loadable from BROS_RUNNER_* environment variables
"""

from __future__ import annotations

import shlex
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_IMAGE = "ros:humble"
DEFAULT_PROJECTS_ROOT = Path("~/BROS/Projects")
DEFAULT_MOUNT_POINT = "/workspace"
DEFAULT_SMOKE_COMMAND = "ros2 --help"
DEFAULT_BOOTSTRAP_SCRIPT = "/ros_entrypoint.sh"


class RetryConfig(BaseModel):
    """Retry policy for image pulls.

    Attributes:
        max_attempts: Maximum attempts (1-10, default 3).
        initial_wait_seconds: Initial backoff wait (default 1.0).
        max_wait_seconds: Backoff cap (default 30.0).
        jitter_seconds: Random jitter range (default 1.0).

    Example:
        >>> RetryConfig(max_attempts=5).max_attempts
        5
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    max_attempts: int = Field(default=3, ge=1, le=10, description="Maximum attempts")
    initial_wait_seconds: float = Field(
        default=1.0,
        ge=0.0,
        le=30.0,
        description="Initial backoff wait time in seconds",
    )
    max_wait_seconds: float = Field(
        default=30.0,
        ge=0.0,
        le=300.0,
        description="Maximum backoff wait time in seconds",
    )
    jitter_seconds: float = Field(
        default=1.0,
        ge=0.0,
        le=10.0,
        description="Random jitter range in seconds",
    )

    @field_validator("max_wait_seconds")
    @classmethod
    def max_wait_must_exceed_initial(cls, v: float, info: object) -> float:
        """Validate that max_wait_seconds >= initial_wait_seconds."""
        data = getattr(info, "data", {})
        initial = data.get("initial_wait_seconds", 1.0)
        if v < initial:
            msg = f"max_wait_seconds ({v}) must be >= initial_wait_seconds ({initial})"
            raise ValueError(msg)
        return v


class RunnerSettings(BaseSettings):
    """Workspace runner settings.

    Loaded from environment variables with the BROS_RUNNER_ prefix.

    Example:
        >>> # From environment (BROS_RUNNER_IMAGE=ros:jazzy)
        >>> settings = RunnerSettings()
        >>>
        >>> # Explicit
        >>> settings = RunnerSettings(image="ros:jazzy", projects_root="/tmp/bros")
    """

    model_config = SettingsConfigDict(
        env_prefix="BROS_RUNNER_",
        env_file=".env",
        extra="ignore",
    )

    image: str = Field(default=DEFAULT_IMAGE, min_length=1, description="Container image")
    projects_root: Path = Field(
        default=DEFAULT_PROJECTS_ROOT,
        description="Directory holding one folder per project",
    )
    mount_point: str = Field(
        default=DEFAULT_MOUNT_POINT,
        description="In-container path the workspace is mounted at",
    )
    smoke_command: str = Field(
        default=DEFAULT_SMOKE_COMMAND,
        description="Command run at the end of up() to check the environment",
    )
    bootstrap_script: str = Field(
        default=DEFAULT_BOOTSTRAP_SCRIPT,
        description="Script sourced (best effort) before every exec",
    )
    compose_command: str = Field(
        default="docker compose",
        description="Compose CLI invocation",
    )
    compose_timeout_seconds: float = Field(
        default=600.0,
        gt=0,
        description="Timeout for compose up/down",
    )
    pull_retry: RetryConfig = Field(
        default_factory=RetryConfig,
        description="Retry policy for image pulls",
    )

    @field_validator("projects_root")
    @classmethod
    def expand_projects_root(cls, v: Path) -> Path:
        """Expand ``~`` in the projects root."""
        return v.expanduser()

    @field_validator("mount_point")
    @classmethod
    def mount_point_must_be_absolute(cls, v: str) -> str:
        """Validate that the mount point is an absolute container path."""
        if not v.startswith("/"):
            msg = f"mount_point must be an absolute path, got: {v}"
            raise ValueError(msg)
        return v.rstrip("/") or "/"

    @property
    def compose_argv(self) -> list[str]:
        """Compose CLI invocation split into argv form."""
        return shlex.split(self.compose_command)
