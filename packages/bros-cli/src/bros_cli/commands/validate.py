"""bros validate command - two-tier IR validation."""

from __future__ import annotations

import click

from bros_cli.errors import EXIT_USER_ERROR
from bros_cli.loading import load_ir
from bros_cli.output import print_issues, print_json, success, warning


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
    "--json",
    "as_json",
    is_flag=True,
    default=False,
    help="Print the validation result as JSON.",
)
def validate(file_path: str, as_json: bool) -> None:
    """Validate an IR.

    Errors (duplicate nodes, missing or conflicting topic types) block code
    generation and make the command exit with 1. Warnings (topics with only
    publishers or only subscribers) are reported but do not fail.

    A block graph is compiled first; its compile issues are shown as
    warnings.

    Examples:

        bros validate -f ir.json

        bros validate -f graph.json --json
    """
    from bros_core.validation import validate_ir

    ir, compile_issues = load_ir(file_path)
    result = validate_ir(ir)

    if as_json:
        print_json(result.model_dump(mode="json"))
    else:
        for issue in compile_issues:
            warning(issue)
        print_issues(result.errors, result.warnings)
        if result.ok:
            success(f"IR valid ({len(result.warnings)} warning(s))")

    if not result.ok:
        raise SystemExit(EXIT_USER_ERROR)
