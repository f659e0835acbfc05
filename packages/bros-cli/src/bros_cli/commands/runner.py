"""bros runner commands - container environment for generated workspaces.

Project state lives in Docker and on disk, so each invocation rebuilds the
runner from the project name and picks up where the last one left off.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from bros_cli.errors import EXIT_SYSTEM_ERROR, EXIT_USER_ERROR, CLIError
from bros_cli.output import info, print_json, success

if TYPE_CHECKING:
    from bros_runner import WorkspaceRunner


_workspace_option = click.option(
    "--workspace",
    "workspace",
    type=click.Path(file_okay=False),
    default=None,
    help="Workspace directory [default: <projects_root>/<name>/workspace]",
)


def _build_runner(name: str, workspace: str | None, image: str | None = None) -> WorkspaceRunner:
    from bros_runner import RunnerProject, RunnerSettings, WorkspaceRunner

    settings = RunnerSettings()
    if workspace:
        project = RunnerProject.from_workspace(name, workspace, image=image, settings=settings)
    else:
        project = RunnerProject.default(name, image=image, settings=settings)
    return WorkspaceRunner(project, settings=settings)


def _as_cli_error(err: Exception) -> CLIError:
    from bros_runner import RunnerStateError, SmokeTestError

    if isinstance(err, (RunnerStateError, SmokeTestError)):
        return CLIError(str(err), exit_code=EXIT_USER_ERROR)
    return CLIError(str(err), exit_code=EXIT_SYSTEM_ERROR)


@click.group()
def runner() -> None:
    """Bring a project's container up, run commands in it, tear it down."""
    pass


@runner.command()
@click.argument("name")
@click.option("--image", type=str, default=None, help="Container image [default: ros:humble]")
@_workspace_option
def up(name: str, image: str | None, workspace: str | None) -> None:
    """Start the container for project NAME and run the smoke test.

    Examples:

        bros runner up demo

        bros runner up demo --image ros:jazzy --workspace ./ws
    """
    from bros_runner import RunnerError

    workspace_runner = _build_runner(name, workspace, image)
    try:
        workspace_runner.up(log=info)
    except RunnerError as e:
        raise _as_cli_error(e) from None
    success(f"Project {workspace_runner.project.project_id} is up")


@runner.command("exec")
@click.argument("name")
@click.argument("command")
@_workspace_option
def exec_cmd(name: str, command: str, workspace: str | None) -> None:
    """Run COMMAND in project NAME's container.

    Output is streamed as it arrives; the exit code is the command's.

    Examples:

        bros runner exec demo "colcon build --merge-install"
    """
    from bros_runner import RunnerError

    workspace_runner = _build_runner(name, workspace)
    try:
        result = workspace_runner.exec(command, log=info)
    except RunnerError as e:
        raise _as_cli_error(e) from None
    if result.code != 0:
        raise SystemExit(result.code)


@runner.command()
@click.argument("name")
@_workspace_option
def down(name: str, workspace: str | None) -> None:
    """Stop and remove project NAME's container.

    A project that was never brought up is left alone.
    """
    from bros_runner import RunnerError

    workspace_runner = _build_runner(name, workspace)
    try:
        stopped = workspace_runner.down(log=info)
    except RunnerError as e:
        raise _as_cli_error(e) from None
    if stopped:
        success(f"Project {workspace_runner.project.project_id} is down")
    else:
        info(f"Project {workspace_runner.project.project_id} was not up")


@runner.command()
@click.argument("name")
@_workspace_option
@click.option("--json", "as_json", is_flag=True, default=False, help="Print status as JSON.")
def status(name: str, workspace: str | None, as_json: bool) -> None:
    """Show the state of project NAME."""
    from bros_runner import RunnerError

    workspace_runner = _build_runner(name, workspace)
    try:
        current = workspace_runner.status()
    except RunnerError as e:
        raise _as_cli_error(e) from None

    if as_json:
        print_json(current.model_dump(mode="json"))
        return
    info(f"Container: {current.container_name}")
    info(f"State: {current.state.value}")
    if current.container_status:
        info(f"Docker status: {current.container_status}")
    info(f"Compose file: {'present' if current.compose_file_exists else 'absent'}")
