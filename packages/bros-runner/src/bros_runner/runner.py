"""Container-backed workspace runner.

Per project the runner moves between two states::

    Down --up()--> Up --down()--> Down

exec() is only valid while Up. State is never cached in memory: it is read
back from Docker (container status) and the filesystem (compose file), which
are found by deterministic name, so a new process picks up where an old one
left off.

up/exec/down on the same project are serialised by a re-entrant lock keyed
by container name. The lock is per process; two processes driving the same
project are not coordinated.
"""

from __future__ import annotations

import shlex
import threading
from collections.abc import Callable

import docker
import structlog
from opentelemetry.trace import SpanKind

from bros_runner.compose import ComposeCLI, write_compose_file
from bros_runner.config import RunnerSettings
from bros_runner.docker_ops import DockerOps
from bros_runner.errors import ComposeError, DockerUnavailableError, SmokeTestError
from bros_runner.models import ExecResult, RunnerState, RunnerStatus
from bros_runner.naming import RunnerProject
from bros_runner.observability import span

logger = structlog.get_logger(__name__)

LogFn = Callable[[str], None]

_project_locks: dict[str, threading.RLock] = {}
_project_locks_guard = threading.Lock()


def project_lock(container_name: str) -> threading.RLock:
    """Return the process-wide lock for one project (created on first use)."""
    with _project_locks_guard:
        lock = _project_locks.get(container_name)
        if lock is None:
            lock = threading.RLock()
            _project_locks[container_name] = lock
        return lock


def _scoped(log: LogFn | None, scope: str) -> LogFn | None:
    if log is None:
        return None
    return lambda message: log(f"[{scope}] {message}")


def wrap_command(command: str, bootstrap_script: str) -> list[str]:
    """Wrap a command in a login shell that sources the bootstrap script if present.

    Example:
        >>> wrap_command("ros2 --help", "/ros_entrypoint.sh")
        ['bash', '-lc', '. /ros_entrypoint.sh 2>/dev/null || true; ros2 --help']
    """
    return ["bash", "-lc", f". {shlex.quote(bootstrap_script)} 2>/dev/null || true; {command}"]


class WorkspaceRunner:
    """Bring a project's container up, run commands in it, tear it down.

    Args:
        project: Project identity and locations.
        client: Docker client; one is created from the environment if omitted.
        docker_ops: Docker operations (overrides ``client``).
        compose: Compose CLI wrapper.
        settings: Runner settings.

    Example:
        >>> runner = WorkspaceRunner.default("hello_ros")
        >>> runner.up(log=print)
        >>> result = runner.exec("colcon build --merge-install")
        >>> runner.down()
    """

    def __init__(
        self,
        project: RunnerProject,
        *,
        client: docker.DockerClient | None = None,
        docker_ops: DockerOps | None = None,
        compose: ComposeCLI | None = None,
        settings: RunnerSettings | None = None,
    ) -> None:
        self.project = project
        self.settings = settings or RunnerSettings()
        self.docker = docker_ops or DockerOps(client, pull_retry=self.settings.pull_retry)
        self.compose = compose or ComposeCLI(
            self.settings.compose_argv,
            timeout=self.settings.compose_timeout_seconds,
        )
        self._lock = project_lock(project.container_name)
        self._log = logger.bind(container=project.container_name, project=project.project_id)

    @classmethod
    def default(
        cls,
        project_name: str = "default",
        *,
        image: str | None = None,
        settings: RunnerSettings | None = None,
        client: docker.DockerClient | None = None,
    ) -> WorkspaceRunner:
        """Runner for ``<projects_root>/<project>/workspace``."""
        settings = settings or RunnerSettings()
        project = RunnerProject.default(project_name, image=image, settings=settings)
        return cls(project, client=client, settings=settings)

    def _span_attributes(self) -> dict[str, str]:
        return {
            "runner.container": self.project.container_name,
            "runner.project": self.project.project_id,
            "runner.image": self.project.image,
        }

    def up(self, log: LogFn | None = None) -> ExecResult:
        """Bring the project Up and check it with the smoke command.

        Idempotent: an unchanged compose file is not rewritten and compose
        leaves a running container alone.

        Args:
            log: Optional progress sink.

        Returns:
            Result of the smoke command.

        Raises:
            ImagePullError: If the image is absent and cannot be pulled.
            ComposeError: If ``compose up`` fails.
            SmokeTestError: If the smoke command exits non-zero. The project
                is torn down first so it stays Down.
        """
        container = self.project.container_name
        compose_log = _scoped(log, f"{container}:compose")
        image_log = _scoped(log, f"{container}:image")
        smoke_log = _scoped(log, f"{container}:smoke")

        with self._lock, span("runner.up", kind=SpanKind.CLIENT, attributes=self._span_attributes()):
            self.project.workspace_host_path.mkdir(parents=True, exist_ok=True)
            compose_file, changed = write_compose_file(self.project, self.settings.mount_point)
            if compose_log:
                compose_log(
                    f"Compose file {'written' if changed else 'unchanged'}: {compose_file}"
                )

            self.docker.ensure_image(self.project.image, image_log)

            if compose_log:
                compose_log(f"Starting Docker Compose project {self.project.project_id}...")
            self.compose.up(compose_file, self.project.project_id)
            if compose_log:
                compose_log(f"Docker Compose project {self.project.project_id} is running.")

            command = self.settings.smoke_command
            if smoke_log:
                smoke_log(f"Running {command} smoke test...")
            smoke = self.exec(command, smoke_log)
            if smoke.code != 0:
                self._teardown_after_failed_smoke(compose_log)
                raise SmokeTestError(
                    command,
                    code=smoke.code,
                    stdout=smoke.stdout,
                    stderr=smoke.stderr,
                )

            self._log.info("runner_up", compose_file_changed=changed)
            return smoke

    def _teardown_after_failed_smoke(self, compose_log: LogFn | None) -> None:
        try:
            self.compose.down(self.project.compose_file_path, self.project.project_id)
        except (ComposeError, DockerUnavailableError) as e:
            self._log.warning("smoke_teardown_failed", error=str(e))
            return
        if compose_log:
            compose_log(f"Docker Compose project {self.project.project_id} stopped.")

    def exec(self, command: str, log: LogFn | None = None) -> ExecResult:
        """Run a shell command in the project's container.

        The command runs under ``bash -lc`` after a best-effort source of the
        bootstrap script. Output chunks are forwarded to ``log`` as they
        arrive.

        Args:
            command: Shell command string.
            log: Optional live output sink.

        Returns:
            ExecResult with exit code, stdout and stderr.

        Raises:
            RunnerStateError: If the container is missing or not running.
            ExecTransportError: If the output stream breaks.
        """
        container = self.project.container_name
        exec_log = _scoped(log, f"{container}:exec")

        with self._lock:
            self.docker.require_running(container)
            if exec_log:
                exec_log(f"Running command: {command}")

            def forward(_stream: str, text: str) -> None:
                if exec_log:
                    exec_log(text)

            result = self.docker.exec(
                container,
                wrap_command(command, self.settings.bootstrap_script),
                forward if exec_log else None,
            )
            if exec_log:
                exec_log(f"Command exited with code {result.code}.")
            self._log.debug("runner_exec", command=command, code=result.code)
            return result

    def down(self, log: LogFn | None = None) -> bool:
        """Tear the project down.

        A project that was never brought up (no compose file) is a no-op.

        Returns:
            True if a compose teardown ran, False for the no-op case.

        Raises:
            ComposeError: If ``compose down`` fails.
        """
        compose_log = _scoped(log, f"{self.project.container_name}:compose")

        with self._lock:
            compose_file = self.project.compose_file_path
            if not compose_file.exists():
                self._log.debug("runner_down_skipped", reason="no_compose_file")
                return False

            with span("runner.down", kind=SpanKind.CLIENT, attributes=self._span_attributes()):
                if compose_log:
                    compose_log(f"Stopping Docker Compose project {self.project.project_id}...")
                self.compose.down(compose_file, self.project.project_id)
                if compose_log:
                    compose_log(f"Docker Compose project {self.project.project_id} stopped.")
            return True

    def status(self) -> RunnerStatus:
        """Read the project's state back from Docker and the filesystem."""
        container_status = self.docker.container_status(self.project.container_name)
        if container_status is None:
            state = RunnerState.DOWN
        elif container_status == "running":
            state = RunnerState.UP
        else:
            state = RunnerState.STOPPED
        return RunnerStatus(
            state=state,
            container_name=self.project.container_name,
            container_status=container_status,
            compose_file_exists=self.project.compose_file_path.exists(),
        )
