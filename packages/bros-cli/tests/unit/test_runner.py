"""Tests for bros runner commands with a mocked WorkspaceRunner."""

from __future__ import annotations

import json
from collections.abc import Generator
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner

from bros_cli.commands.runner import runner
from bros_runner import (
    ComposeError,
    ExecResult,
    RunnerState,
    RunnerStateError,
    RunnerStatus,
    SmokeTestError,
)


@pytest.fixture
def workspace_runner() -> Generator[MagicMock, None, None]:
    mock = MagicMock()
    mock.project.project_id = "demo"
    with patch("bros_cli.commands.runner._build_runner", return_value=mock) as build:
        mock.build = build
        yield mock


class TestRunnerUp:
    """Tests for runner up."""

    def test_up(self, cli_runner: CliRunner, workspace_runner: MagicMock) -> None:
        """up reports success."""
        workspace_runner.up.return_value = ExecResult(code=0)
        result = cli_runner.invoke(runner, ["up", "demo", "--image", "ros:jazzy"])

        assert result.exit_code == 0, result.output
        assert "demo is up" in result.output
        workspace_runner.build.assert_called_once_with("demo", None, "ros:jazzy")

    def test_up_smoke_failure(self, cli_runner: CliRunner, workspace_runner: MagicMock) -> None:
        """A failed smoke test is a user error."""
        workspace_runner.up.side_effect = SmokeTestError("ros2 --help", code=127, stderr="not found")
        result = cli_runner.invoke(runner, ["up", "demo"])
        assert result.exit_code == 1
        assert "Smoke test" in result.output

    def test_up_compose_failure(self, cli_runner: CliRunner, workspace_runner: MagicMock) -> None:
        """Compose failures are system errors."""
        workspace_runner.up.side_effect = ComposeError("up", "demo", returncode=1)
        result = cli_runner.invoke(runner, ["up", "demo"])
        assert result.exit_code == 2


class TestRunnerExec:
    """Tests for runner exec."""

    def test_exec_exit_code(self, cli_runner: CliRunner, workspace_runner: MagicMock) -> None:
        """The command's exit code becomes the CLI exit code."""
        workspace_runner.exec.return_value = ExecResult(code=3, stderr="boom")
        result = cli_runner.invoke(runner, ["exec", "demo", "false"])
        assert result.exit_code == 3
        assert workspace_runner.exec.call_args.args[0] == "false"

    def test_exec_success(self, cli_runner: CliRunner, workspace_runner: MagicMock) -> None:
        """A successful command exits 0."""
        workspace_runner.exec.return_value = ExecResult(code=0)
        result = cli_runner.invoke(runner, ["exec", "demo", "ls -la"])
        assert result.exit_code == 0

    def test_exec_not_up(self, cli_runner: CliRunner, workspace_runner: MagicMock) -> None:
        """exec before up is a user error."""
        workspace_runner.exec.side_effect = RunnerStateError("bros_demo")
        result = cli_runner.invoke(runner, ["exec", "demo", "ls"])
        assert result.exit_code == 1
        assert "Did you call up" in result.output


class TestRunnerDown:
    """Tests for runner down."""

    def test_down(self, cli_runner: CliRunner, workspace_runner: MagicMock) -> None:
        """down reports the project stopped."""
        workspace_runner.down.return_value = True
        result = cli_runner.invoke(runner, ["down", "demo"])
        assert result.exit_code == 0
        assert "demo is down" in result.output

    def test_down_noop(self, cli_runner: CliRunner, workspace_runner: MagicMock) -> None:
        """down on a project never brought up succeeds."""
        workspace_runner.down.return_value = False
        result = cli_runner.invoke(runner, ["down", "demo"])
        assert result.exit_code == 0
        assert "was not up" in result.output


class TestRunnerStatus:
    """Tests for runner status."""

    def test_status_json(self, cli_runner: CliRunner, workspace_runner: MagicMock) -> None:
        """--json prints the status document."""
        workspace_runner.status.return_value = RunnerStatus(
            state=RunnerState.UP,
            container_name="bros_demo",
            container_status="running",
            compose_file_exists=True,
        )
        result = cli_runner.invoke(runner, ["status", "demo", "--json"])
        assert result.exit_code == 0
        assert json.loads(result.output)["state"] == "up"

    def test_status_text(self, cli_runner: CliRunner, workspace_runner: MagicMock) -> None:
        """Plain output shows the state."""
        workspace_runner.status.return_value = RunnerStatus(state=RunnerState.DOWN, container_name="bros_demo")
        result = cli_runner.invoke(runner, ["status", "demo"])
        assert result.exit_code == 0
        assert "State: down" in result.output
        assert "Compose file: absent" in result.output


class TestBuildRunner:
    """Tests for runner construction from CLI arguments."""

    def test_custom_workspace(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """--workspace places the project around that directory."""
        from bros_cli.commands.runner import _build_runner

        monkeypatch.setenv("BROS_RUNNER_PROJECTS_ROOT", str(tmp_path))
        built = _build_runner("Demo", str(tmp_path / "ws"), "ros:jazzy")
        assert built.project.container_name == "bros_demo"
        assert built.project.image == "ros:jazzy"
        assert built.project.workspace_host_path.name == "ws"

    def test_default_workspace(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Without --workspace the project lives under the projects root."""
        from bros_cli.commands.runner import _build_runner

        monkeypatch.setenv("BROS_RUNNER_PROJECTS_ROOT", str(tmp_path))
        built = _build_runner("demo", None)
        assert built.project.workspace_host_path.parent.name == "demo"
