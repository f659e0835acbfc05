"""Compose descriptor and compose CLI wrapper.

The descriptor declares exactly one service:

    services:
      bros_<id>:
        image: <image>
        container_name: bros_<id>
        command: [bash, -lc, sleep infinity]
        working_dir: <mount point>
        tty: true
        volumes:
        - <host workspace>:<mount point>
"""

from __future__ import annotations

import subprocess
from collections.abc import Sequence
from pathlib import Path
from typing import Any

import structlog
import yaml

from bros_runner.config import DEFAULT_MOUNT_POINT
from bros_runner.errors import ComposeError, DockerUnavailableError
from bros_runner.naming import RunnerProject

logger = structlog.get_logger(__name__)

KEEPALIVE_COMMAND = ["bash", "-lc", "sleep infinity"]


def compose_document(project: RunnerProject, mount_point: str = DEFAULT_MOUNT_POINT) -> dict[str, Any]:
    """Build the compose document for a project."""
    volume = f"{project.workspace_host_path.as_posix()}:{mount_point}"
    return {
        "services": {
            project.container_name: {
                "image": project.image,
                "container_name": project.container_name,
                "command": list(KEEPALIVE_COMMAND),
                "working_dir": mount_point,
                "tty": True,
                "volumes": [volume],
            }
        }
    }


def render_compose(project: RunnerProject, mount_point: str = DEFAULT_MOUNT_POINT) -> str:
    """Render the compose file text (stable key order)."""
    return yaml.safe_dump(
        compose_document(project, mount_point),
        sort_keys=False,
        default_flow_style=False,
    )


def write_compose_file(
    project: RunnerProject,
    mount_point: str = DEFAULT_MOUNT_POINT,
) -> tuple[Path, bool]:
    """Write the compose file unless an identical one is already there.

    Args:
        project: Runner project.
        mount_point: In-container workspace path.

    Returns:
        Tuple of (compose file path, whether the file was written).
    """
    path = project.compose_file_path
    content = render_compose(project, mount_point)

    if path.exists() and path.read_text(encoding="utf-8") == content:
        logger.debug("compose_file_unchanged", path=str(path))
        return path, False

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    logger.info("compose_file_written", path=str(path), container=project.container_name)
    return path, True


class ComposeCLI:
    """Runs ``docker compose -f <file> -p <project> <action>``.

    Args:
        command: Compose CLI invocation (default ``docker compose``).
        timeout: Seconds before a compose call is abandoned.
    """

    def __init__(
        self,
        command: Sequence[str] = ("docker", "compose"),
        *,
        timeout: float | None = 600.0,
    ) -> None:
        self.command = list(command)
        self.timeout = timeout

    def up(self, compose_file: Path, project: str) -> subprocess.CompletedProcess[str]:
        return self._run(compose_file, project, ["up", "-d"])

    def down(self, compose_file: Path, project: str) -> subprocess.CompletedProcess[str]:
        return self._run(compose_file, project, ["down"])

    def _run(
        self,
        compose_file: Path,
        project: str,
        action: list[str],
    ) -> subprocess.CompletedProcess[str]:
        cmd = [*self.command, "-f", str(compose_file), "-p", project, *action]
        logger.debug("compose_command", cmd=cmd)
        try:
            return subprocess.run(
                cmd,
                check=True,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except FileNotFoundError as e:
            raise DockerUnavailableError(
                f"Compose CLI not found: {self.command[0]}",
                cause=str(e),
            ) from e
        except subprocess.CalledProcessError as e:
            raise ComposeError(
                action[0],
                project,
                returncode=e.returncode,
                stdout=e.stdout or "",
                stderr=e.stderr or "",
            ) from e
        except subprocess.TimeoutExpired as e:
            raise ComposeError(
                action[0],
                project,
                returncode=-1,
                stderr=f"timed out after {self.timeout}s",
            ) from e
