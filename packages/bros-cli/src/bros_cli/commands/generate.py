"""bros generate command - IR to ROS 2 workspace."""

from __future__ import annotations

from pathlib import Path

import click

from bros_cli.errors import EXIT_SYSTEM_ERROR, CLIError, handle_permission_error
from bros_cli.loading import load_ir
from bros_cli.output import error, info, print_issues, success, warning


@click.command()
@click.option(
    "-f",
    "--file",
    "file_path",
    type=click.Path(exists=False),
    default="./ir.json",
    help="IR or block graph (JSON or YAML) [default: ./ir.json]",
)
@click.option(
    "-w",
    "--workspace",
    "workspace_dir",
    type=click.Path(file_okay=False),
    required=True,
    help="Workspace directory; packages go under <workspace>/src.",
)
@click.option(
    "--templates",
    "template_root",
    type=click.Path(exists=True, file_okay=False),
    default=None,
    help="Override the bundled template directory.",
)
@click.option(
    "--no-check",
    is_flag=True,
    default=False,
    help="Skip validation before generating.",
)
@click.option(
    "--preview",
    is_flag=True,
    default=False,
    help="Print the generated launch file.",
)
def generate(
    file_path: str,
    workspace_dir: str,
    template_root: str | None,
    no_check: bool,
    preview: bool,
) -> None:
    """Generate a ROS 2 workspace from an IR.

    The IR is checked and validated first; any schema violation or
    validation error blocks generation and nothing is written.

    Examples:

        bros generate -f ir.json -w ~/BROS/Projects/demo/workspace

        bros generate -f graph.json -w ./ws --preview
    """
    from bros_codegen import GenerationBlockedError, TemplateRenderError, WorkspaceGenerator

    ir, compile_issues = load_ir(file_path)
    for issue in compile_issues:
        warning(issue)

    generator = WorkspaceGenerator(
        template_root=Path(template_root) if template_root else None,
    )
    try:
        result = generator.generate(ir, Path(workspace_dir), check=not no_check)
    except GenerationBlockedError as e:
        print_issues(e.issues, [])
        for violation in e.violations:
            error(violation)
        raise CLIError(e.user_message) from None
    except TemplateRenderError as e:
        raise CLIError(e.user_message, exit_code=EXIT_SYSTEM_ERROR) from None
    except PermissionError:
        handle_permission_error(workspace_dir, "write")

    success(f"Generated {len(result.files)} file(s) in {result.workspace_dir}")
    info(f"Launch file: {result.launch_file}")
    if preview:
        info(result.launch_preview)
