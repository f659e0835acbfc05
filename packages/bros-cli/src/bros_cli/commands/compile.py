"""bros compile command - block graph to canonical IR."""

from __future__ import annotations

from pathlib import Path

import click

from bros_cli.errors import EXIT_USER_ERROR, handle_permission_error
from bros_cli.loading import load_ir
from bros_cli.output import success, warning


@click.command("compile")
@click.option(
    "-f",
    "--file",
    "file_path",
    type=click.Path(exists=False),
    default="./graph.json",
    help="Block graph (JSON or YAML) [default: ./graph.json]",
)
@click.option(
    "-o",
    "--output",
    "output_path",
    type=click.Path(),
    default="./ir.json",
    help="Where to write the IR [default: ./ir.json]",
)
def compile_cmd(file_path: str, output_path: str) -> None:
    """Compile a block graph into canonical IR.

    The IR is written even when issues are found; the exit code is 1 in
    that case so scripts can tell the result is partial.

    Examples:

        bros compile -f graph.json

        bros compile -f graph.yaml -o build/ir.json
    """
    ir, issues = load_ir(file_path)

    output = Path(output_path)
    try:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(ir.to_json() + "\n", encoding="utf-8")
    except PermissionError:
        handle_permission_error(output_path, "write")

    for issue in issues:
        warning(issue)

    success(f"IR written to {output}")
    if issues:
        raise SystemExit(EXIT_USER_ERROR)
