"""Docker Engine operations used by the workspace runner.

DockerOps wraps one explicit ``docker.DockerClient``. Nothing here holds a
process-global client; each runner owns (or is handed) its own.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Sequence
from typing import Any

import docker
import structlog
from docker.errors import APIError, DockerException, ImageNotFound, NotFound
from docker.utils.socket import read as socket_read
from tenacity import (
    RetryCallState,
    RetryError,
    Retrying,
    retry_if_exception,
    retry_if_result,
    stop_after_attempt,
    stop_after_delay,
    wait_exponential_jitter,
    wait_fixed,
)

from bros_runner.config import RetryConfig
from bros_runner.demux import ChunkSink, demux_stream
from bros_runner.errors import (
    DockerUnavailableError,
    ExecTransportError,
    ImagePullError,
    RunnerStateError,
)
from bros_runner.models import ExecResult
from bros_runner.observability import log_retry_attempt

logger = structlog.get_logger(__name__)

READ_SIZE = 4096
EXEC_SETTLE_SECONDS = 5.0

PULL_RETRY_EXCEPTIONS: tuple[type[Exception], ...] = (
    APIError,
    ConnectionError,
    TimeoutError,
)


def _read_chunks(sock: Any) -> Iterator[bytes]:
    while True:
        chunk = socket_read(sock, READ_SIZE)
        if not chunk:
            return
        yield chunk


def _is_transient(exc: BaseException) -> bool:
    # A missing image or repository will not appear on retry.
    return isinstance(exc, PULL_RETRY_EXCEPTIONS) and not isinstance(exc, NotFound)


class DockerOps:
    """Image, container and exec operations on one Docker client.

    Args:
        client: Docker client to use. Created with ``docker.from_env()`` on
            first use when omitted.
        pull_retry: Retry policy for image pulls.
    """

    def __init__(
        self,
        client: docker.DockerClient | None = None,
        *,
        pull_retry: RetryConfig | None = None,
    ) -> None:
        self._client = client
        self.pull_retry = pull_retry or RetryConfig()

    @property
    def client(self) -> docker.DockerClient:
        if self._client is None:
            try:
                self._client = docker.from_env()
            except DockerException as e:
                raise DockerUnavailableError(
                    "Failed to connect to Docker",
                    cause=str(e),
                ) from e
        return self._client

    def image_exists(self, image: str) -> bool:
        try:
            self.client.images.get(image)
        except ImageNotFound:
            return False
        return True

    def ensure_image(self, image: str, log: Callable[[str], None] | None = None) -> bool:
        """Make sure ``image`` is present locally, pulling it if needed.

        Args:
            image: Image reference (e.g., "ros:humble").
            log: Optional progress sink.

        Returns:
            True if the image was pulled, False if it was already present.

        Raises:
            ImagePullError: If the pull keeps failing after retries.
        """
        if self.image_exists(image):
            if log:
                log(f"Docker image {image} already present.")
            return False

        if log:
            log(f"Pulling Docker image {image}...")

        config = self.pull_retry

        def before_sleep(state: RetryCallState) -> None:
            exc = state.outcome.exception() if state.outcome else None
            log_retry_attempt(
                operation="image_pull",
                attempt=state.attempt_number,
                max_attempts=config.max_attempts,
                error=str(exc),
            )

        try:
            for attempt in Retrying(
                retry=retry_if_exception(_is_transient),
                stop=stop_after_attempt(config.max_attempts),
                wait=wait_exponential_jitter(
                    initial=config.initial_wait_seconds,
                    max=config.max_wait_seconds,
                    jitter=config.jitter_seconds,
                ),
                before_sleep=before_sleep,
                reraise=False,
            ):
                with attempt:
                    self.client.images.pull(image)
        except RetryError as e:
            cause = e.last_attempt.exception()
            raise ImagePullError(image, cause=str(cause)) from cause
        except NotFound as e:
            raise ImagePullError(image, cause=str(e)) from e

        logger.info("image_pulled", image=image)
        if log:
            log(f"Docker image {image} ready.")
        return True

    def container_status(self, container_name: str) -> str | None:
        """Return Docker's status string for a container, or None if absent."""
        try:
            details = self.client.api.inspect_container(container_name)
        except NotFound:
            return None
        return details.get("State", {}).get("Status")

    def require_running(self, container_name: str) -> None:
        """Raise RunnerStateError unless the container is running."""
        status = self.container_status(container_name)
        if status != "running":
            raise RunnerStateError(container_name, status)

    def exec(
        self,
        container_name: str,
        argv: Sequence[str],
        sink: ChunkSink | None = None,
    ) -> ExecResult:
        """Run a one-shot exec and demultiplex its output.

        Args:
            container_name: Target container (must be running).
            argv: Command vector.
            sink: Optional ``sink(stream, text)`` fed as output arrives.

        Returns:
            ExecResult with the exit code and both streams.

        Raises:
            RunnerStateError: If the container vanished or stopped.
            ExecTransportError: If the output stream breaks or is malformed.
        """
        api = self.client.api
        try:
            exec_id = api.exec_create(
                container_name,
                list(argv),
                stdout=True,
                stderr=True,
                stdin=False,
                tty=False,
            )["Id"]
            sock = api.exec_start(exec_id, socket=True)
        except NotFound as e:
            raise RunnerStateError(container_name) from e
        except APIError as e:
            if e.status_code == 409:
                raise RunnerStateError(container_name, "not running") from e
            raise

        try:
            stdout, stderr = demux_stream(_read_chunks(sock), sink)
        except OSError as e:
            raise ExecTransportError(
                "Exec stream failed",
                details={"container": container_name, "cause": str(e)},
            ) from e
        finally:
            sock.close()

        return ExecResult(code=self._exit_code(exec_id), stdout=stdout, stderr=stderr)

    def _exit_code(self, exec_id: str) -> int:
        # The stream can close a moment before the exec is marked finished.
        def last_result(state: RetryCallState) -> Any:
            return state.outcome.result() if state.outcome else {}

        details = Retrying(
            retry=retry_if_result(lambda d: bool(d.get("Running"))),
            stop=stop_after_delay(EXEC_SETTLE_SECONDS),
            wait=wait_fixed(0.05),
            retry_error_callback=last_result,
        )(self.client.api.exec_inspect, exec_id)

        code = details.get("ExitCode")
        if code is None:
            logger.warning("exec_exit_code_unknown", exec_id=exec_id)
            return -1
        return int(code)
