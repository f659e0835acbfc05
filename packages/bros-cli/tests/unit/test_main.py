"""Tests for the bros CLI entry point."""

from __future__ import annotations

from click.testing import CliRunner

from bros_cli import __version__
from bros_cli.main import LAZY_COMMANDS, cli


class TestMain:
    """Tests for the top-level group."""

    def test_help_lists_commands(self, cli_runner: CliRunner) -> None:
        """--help lists every lazily registered command."""
        result = cli_runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        for name in LAZY_COMMANDS:
            assert name in result.output

    def test_version(self, cli_runner: CliRunner) -> None:
        """--version prints the package version."""
        result = cli_runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_unknown_command(self, cli_runner: CliRunner) -> None:
        """Unknown commands are usage errors."""
        result = cli_runner.invoke(cli, ["frobnicate"])
        assert result.exit_code == 2

    def test_lazy_commands_resolve(self, cli_runner: CliRunner) -> None:
        """Every lazy command path imports to a click command."""
        group = cli
        with cli_runner.isolated_filesystem():
            for name in LAZY_COMMANDS:
                result = cli_runner.invoke(group, [name, "--help"])
                assert result.exit_code == 0, result.output

    def test_global_options(self, cli_runner: CliRunner) -> None:
        """--no-color and --log-level are accepted before a command."""
        result = cli_runner.invoke(cli, ["--no-color", "--log-level", "ERROR", "schema", "--help"])
        assert result.exit_code == 0
