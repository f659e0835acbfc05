"""bros schema command - JSON Schema export."""

from __future__ import annotations

from pathlib import Path

import click

from bros_cli.errors import handle_permission_error
from bros_cli.output import success


@click.group()
def schema() -> None:
    """JSON Schema utilities."""
    pass


@schema.command("export")
@click.option(
    "--output-dir",
    "output_dir",
    type=click.Path(file_okay=False),
    default="./schemas",
    help="Output directory [default: ./schemas]",
)
def export_cmd(output_dir: str) -> None:
    """Export JSON Schemas for the block graph, IR and validation result.

    Examples:

        bros schema export

        bros schema export --output-dir docs/schemas
    """
    from bros_core.export import SCHEMA_EXPORTERS

    output = Path(output_dir)
    for name, exporter in SCHEMA_EXPORTERS.items():
        target = output / f"{name}.schema.json"
        try:
            exporter(target)
        except PermissionError:
            handle_permission_error(str(target), "write")
        success(f"Exported {target}")
