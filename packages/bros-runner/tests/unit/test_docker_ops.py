"""Unit tests for DockerOps with a mocked Docker client."""

from __future__ import annotations

import struct
from unittest.mock import MagicMock, patch

import pytest
from docker.errors import APIError, DockerException, ImageNotFound, NotFound

from bros_runner.config import RetryConfig
from bros_runner.docker_ops import DockerOps
from bros_runner.errors import (
    DockerUnavailableError,
    ExecTransportError,
    ImagePullError,
    RunnerStateError,
)


def frame(stream_id: int, payload: bytes) -> bytes:
    return struct.pack(">BxxxL", stream_id, len(payload)) + payload


@pytest.fixture
def client() -> MagicMock:
    return MagicMock()


@pytest.fixture
def ops(client: MagicMock, no_wait_retry: RetryConfig) -> DockerOps:
    return DockerOps(client, pull_retry=no_wait_retry)


class TestClient:
    """Tests for client creation."""

    def test_lazy_from_env(self) -> None:
        """The client is created from the environment on first use."""
        with patch("bros_runner.docker_ops.docker.from_env") as from_env:
            ops = DockerOps()
            from_env.assert_not_called()
            assert ops.client is from_env.return_value
            assert ops.client is from_env.return_value
        from_env.assert_called_once()

    def test_unavailable(self) -> None:
        """A failing daemon connection is DockerUnavailableError."""
        with patch(
            "bros_runner.docker_ops.docker.from_env",
            side_effect=DockerException("socket missing"),
        ):
            with pytest.raises(DockerUnavailableError) as exc_info:
                _ = DockerOps().client
        assert exc_info.value.cause == "socket missing"


class TestEnsureImage:
    """Tests for ensure_image."""

    def test_present(self, ops: DockerOps, client: MagicMock) -> None:
        """A local image is not pulled."""
        log = MagicMock()
        assert ops.ensure_image("ros:humble", log) is False
        client.images.pull.assert_not_called()
        log.assert_called_once_with("Docker image ros:humble already present.")

    def test_pulled(self, ops: DockerOps, client: MagicMock) -> None:
        """A missing image is pulled."""
        client.images.get.side_effect = ImageNotFound("missing")
        assert ops.ensure_image("ros:humble") is True
        client.images.pull.assert_called_once_with("ros:humble")

    def test_transient_failure_retried(self, ops: DockerOps, client: MagicMock) -> None:
        """Transient pull errors are retried."""
        client.images.get.side_effect = ImageNotFound("missing")
        client.images.pull.side_effect = [APIError("server error"), MagicMock()]

        assert ops.ensure_image("ros:humble") is True
        assert client.images.pull.call_count == 2

    def test_retries_exhausted(self, ops: DockerOps, client: MagicMock) -> None:
        """Persistent failures become ImagePullError after max_attempts."""
        client.images.get.side_effect = ImageNotFound("missing")
        client.images.pull.side_effect = ConnectionError("reset")

        with pytest.raises(ImagePullError) as exc_info:
            ops.ensure_image("ros:humble")

        assert client.images.pull.call_count == 3
        assert exc_info.value.image == "ros:humble"
        assert exc_info.value.cause == "reset"

    def test_not_found_not_retried(self, ops: DockerOps, client: MagicMock) -> None:
        """A repository that does not exist fails immediately."""
        client.images.get.side_effect = ImageNotFound("missing")
        client.images.pull.side_effect = NotFound("repository does not exist")

        with pytest.raises(ImagePullError):
            ops.ensure_image("nope:latest")
        assert client.images.pull.call_count == 1


class TestContainerStatus:
    """Tests for container_status and require_running."""

    def test_running(self, ops: DockerOps, client: MagicMock) -> None:
        """The Docker status string is returned."""
        client.api.inspect_container.return_value = {"State": {"Status": "running"}}
        assert ops.container_status("bros_demo") == "running"
        ops.require_running("bros_demo")

    def test_absent(self, ops: DockerOps, client: MagicMock) -> None:
        """A missing container has no status."""
        client.api.inspect_container.side_effect = NotFound("gone")
        assert ops.container_status("bros_demo") is None
        with pytest.raises(RunnerStateError, match="not found"):
            ops.require_running("bros_demo")

    def test_stopped(self, ops: DockerOps, client: MagicMock) -> None:
        """A stopped container fails require_running with its status."""
        client.api.inspect_container.return_value = {"State": {"Status": "exited"}}
        with pytest.raises(RunnerStateError) as exc_info:
            ops.require_running("bros_demo")
        assert exc_info.value.state == "exited"


class TestExec:
    """Tests for exec."""

    def _prepare(self, client: MagicMock, *, exit_code: int = 0) -> MagicMock:
        client.api.exec_create.return_value = {"Id": "exec-1"}
        sock = MagicMock()
        client.api.exec_start.return_value = sock
        client.api.exec_inspect.return_value = {"Running": False, "ExitCode": exit_code}
        return sock

    def test_collects_output(self, ops: DockerOps, client: MagicMock) -> None:
        """stdout, stderr and the exit code are returned; the sink sees chunks."""
        sock = self._prepare(client, exit_code=3)
        chunks = [frame(1, b"out\n") + frame(2, b"err")[:5], frame(2, b"err")[5:], b""]
        sink = MagicMock()

        with patch("bros_runner.docker_ops.socket_read", side_effect=chunks):
            result = ops.exec("bros_demo", ["bash", "-lc", "true"], sink)

        assert result.code == 3
        assert result.stdout == "out\n"
        assert result.stderr == "err"
        assert [c.args for c in sink.call_args_list] == [("stdout", "out\n"), ("stderr", "err")]
        client.api.exec_create.assert_called_once_with(
            "bros_demo",
            ["bash", "-lc", "true"],
            stdout=True,
            stderr=True,
            stdin=False,
            tty=False,
        )
        client.api.exec_start.assert_called_once_with("exec-1", socket=True)
        sock.close.assert_called_once()

    def test_waits_for_exit(self, ops: DockerOps, client: MagicMock) -> None:
        """A still-running exec is polled until it finishes."""
        self._prepare(client)
        client.api.exec_inspect.side_effect = [
            {"Running": True, "ExitCode": None},
            {"Running": False, "ExitCode": 0},
        ]
        with patch("bros_runner.docker_ops.socket_read", side_effect=[b""]):
            assert ops.exec("bros_demo", ["true"]).code == 0
        assert client.api.exec_inspect.call_count == 2

    def test_container_missing(self, ops: DockerOps, client: MagicMock) -> None:
        """A vanished container is a state error."""
        client.api.exec_create.side_effect = NotFound("gone")
        with pytest.raises(RunnerStateError):
            ops.exec("bros_demo", ["true"])

    def test_container_not_running(self, ops: DockerOps, client: MagicMock) -> None:
        """A 409 from the daemon is a state error."""
        response = MagicMock(status_code=409)
        client.api.exec_create.side_effect = APIError("conflict", response=response)
        with pytest.raises(RunnerStateError, match="not running"):
            ops.exec("bros_demo", ["true"])

    def test_other_api_errors_propagate(self, ops: DockerOps, client: MagicMock) -> None:
        """Other API errors are not translated."""
        response = MagicMock(status_code=500)
        client.api.exec_create.side_effect = APIError("boom", response=response)
        with pytest.raises(APIError):
            ops.exec("bros_demo", ["true"])

    def test_socket_failure(self, ops: DockerOps, client: MagicMock) -> None:
        """A broken socket is a transport error and the socket is closed."""
        sock = self._prepare(client)
        with patch("bros_runner.docker_ops.socket_read", side_effect=OSError("reset")):
            with pytest.raises(ExecTransportError):
                ops.exec("bros_demo", ["true"])
        sock.close.assert_called_once()

    def test_truncated_stream(self, ops: DockerOps, client: MagicMock) -> None:
        """A stream ending mid-frame is a transport error."""
        self._prepare(client)
        with patch("bros_runner.docker_ops.socket_read", side_effect=[frame(1, b"abc")[:-1], b""]):
            with pytest.raises(ExecTransportError):
                ops.exec("bros_demo", ["true"])
