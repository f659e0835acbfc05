"""Result models for bros-runner."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class RunnerState(str, Enum):
    """Observed state of a project's container.

    DOWN: no container. STOPPED: container exists but is not running.
    UP: container running; exec() is allowed.
    """

    DOWN = "down"
    STOPPED = "stopped"
    UP = "up"


class ExecResult(BaseModel):
    """Outcome of one exec() call.

    Attributes:
        code: Exit code of the command.
        stdout: Captured standard output.
        stderr: Captured standard error.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    code: int = Field(..., description="Exit code")
    stdout: str = Field(default="", description="Standard output")
    stderr: str = Field(default="", description="Standard error")

    @property
    def ok(self) -> bool:
        return self.code == 0


class RunnerStatus(BaseModel):
    """Snapshot returned by WorkspaceRunner.status()."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    state: RunnerState
    container_name: str
    container_status: str | None = Field(default=None, description="Raw Docker status")
    compose_file_exists: bool = False
