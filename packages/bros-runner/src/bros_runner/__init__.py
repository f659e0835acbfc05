"""bros-runner: container-backed execution environment for generated workspaces.

This package provides:
- WorkspaceRunner: up / exec / down / status for one project
- RunnerProject: deterministic names and paths from a project name
- RunnerSettings: BROS_RUNNER_* settings
- StreamDemuxer: Docker multiplexed exec stream parser
"""

from __future__ import annotations

__version__ = "0.1.0"

from bros_runner.compose import ComposeCLI, render_compose, write_compose_file
from bros_runner.config import RetryConfig, RunnerSettings
from bros_runner.demux import StreamDemuxer, demux_stream
from bros_runner.docker_ops import DockerOps
from bros_runner.errors import (
    ComposeError,
    DockerUnavailableError,
    ExecTransportError,
    ImagePullError,
    RunnerError,
    RunnerStateError,
    SmokeTestError,
)
from bros_runner.models import ExecResult, RunnerState, RunnerStatus
from bros_runner.naming import RunnerProject, project_dir_name, project_id
from bros_runner.observability import configure_logging, span
from bros_runner.runner import WorkspaceRunner, project_lock, wrap_command

__all__ = [
    "__version__",
    # Runner
    "WorkspaceRunner",
    "project_lock",
    "wrap_command",
    # Project naming
    "RunnerProject",
    "project_id",
    "project_dir_name",
    # Configuration
    "RunnerSettings",
    "RetryConfig",
    # Compose / Docker
    "ComposeCLI",
    "DockerOps",
    "render_compose",
    "write_compose_file",
    # Streams
    "StreamDemuxer",
    "demux_stream",
    # Models
    "ExecResult",
    "RunnerState",
    "RunnerStatus",
    # Observability
    "configure_logging",
    "span",
    # Errors
    "RunnerError",
    "RunnerStateError",
    "DockerUnavailableError",
    "ImagePullError",
    "ComposeError",
    "SmokeTestError",
    "ExecTransportError",
]
