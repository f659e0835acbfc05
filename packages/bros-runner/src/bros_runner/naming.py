"""Deterministic project naming.

Container, compose project and on-disk locations are pure functions of the
user-supplied project name, so re-running up() for the same name always
targets the same container and compose file, across process restarts.
"""

from __future__ import annotations

import re
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from bros_runner.config import RunnerSettings

DEFAULT_PROJECT_TOKEN = "default"
CONTAINER_PREFIX = "bros_"
COMPOSE_FILE_NAME = "docker-compose.yml"
WORKSPACE_DIR_NAME = "workspace"

_NON_ALNUM = re.compile(r"[^a-z0-9]")
_NON_DIR_CHARS = re.compile(r"[^a-z0-9\-_]")
_UNDERSCORE_RUNS = re.compile(r"_+")


def project_id(name: str) -> str:
    """Lowercase and strip everything but ``[a-z0-9]``.

    Example:
        >>> project_id("Hello ROS!")
        'helloros'
        >>> project_id("???")
        'default'
    """
    return _NON_ALNUM.sub("", name.lower()) or DEFAULT_PROJECT_TOKEN


def project_dir_name(name: str) -> str:
    """Directory-safe project name: keeps ``[a-z0-9-_]``, others become ``_``.

    Example:
        >>> project_dir_name("  My Robot  ")
        'my_robot'
    """
    cleaned = _NON_DIR_CHARS.sub("_", name.strip().lower())
    cleaned = _UNDERSCORE_RUNS.sub("_", cleaned).strip("_")
    return cleaned or DEFAULT_PROJECT_TOKEN


class RunnerProject(BaseModel):
    """Identity and on-disk locations of one runner project.

    Attributes:
        project_name: User-facing project name.
        project_id: Compose project name (``project_id(project_name)``).
        workspace_host_path: Host directory mounted into the container.
        image: Container image.
        container_name: ``bros_<project_id>``.
        compose_file_path: Compose file, beside the workspace directory.

    Example:
        >>> project = RunnerProject.from_workspace("demo", "/tmp/demo/workspace")
        >>> project.container_name, project.compose_file_path
        ('bros_demo', PosixPath('/tmp/demo/docker-compose.yml'))
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    project_name: str = Field(..., description="User-facing project name")
    project_id: str = Field(..., description="Compose project name")
    workspace_host_path: Path = Field(..., description="Host workspace directory")
    image: str = Field(..., min_length=1, description="Container image")
    container_name: str = Field(..., description="Container name")
    compose_file_path: Path = Field(..., description="Compose file path")

    @classmethod
    def from_workspace(
        cls,
        project_name: str,
        workspace_host_path: Path | str,
        *,
        image: str | None = None,
        settings: RunnerSettings | None = None,
    ) -> RunnerProject:
        """Build a project around an existing workspace directory."""
        settings = settings or RunnerSettings()
        workspace = Path(workspace_host_path).expanduser().resolve()
        pid = project_id(project_name)
        return cls(
            project_name=project_name,
            project_id=pid,
            workspace_host_path=workspace,
            image=image or settings.image,
            container_name=f"{CONTAINER_PREFIX}{pid}",
            compose_file_path=workspace.parent / COMPOSE_FILE_NAME,
        )

    @classmethod
    def default(
        cls,
        project_name: str = DEFAULT_PROJECT_TOKEN,
        *,
        image: str | None = None,
        settings: RunnerSettings | None = None,
    ) -> RunnerProject:
        """Place the project at ``<projects_root>/<dir name>/workspace``."""
        settings = settings or RunnerSettings()
        dir_name = project_dir_name(project_name)
        workspace = settings.projects_root / dir_name / WORKSPACE_DIR_NAME
        return cls.from_workspace(dir_name, workspace, image=image, settings=settings)
