"""CLI entry point for bros-runtime.

Subcommands are registered in LAZY_COMMANDS and imported only when invoked,
so ``bros --help`` does not pay for Docker or Jinja2 imports.
"""

from __future__ import annotations

import importlib
from typing import Any

import click
import rich_click as rclick

from bros_cli import __version__
from bros_cli.output import set_no_color

rclick.rich_click.TEXT_MARKUP = "markdown"
rclick.rich_click.SHOW_ARGUMENTS = True
rclick.rich_click.GROUP_ARGUMENTS_OPTIONS = True


class LazyGroup(rclick.RichGroup):
    """Click group that imports subcommands on first use.

    Attributes:
        lazy_subcommands: Command name -> ``"module.attribute"`` path.
    """

    def __init__(
        self,
        *args: Any,
        lazy_subcommands: dict[str, str] | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(*args, **kwargs)
        self.lazy_subcommands: dict[str, str] = lazy_subcommands or {}

    def list_commands(self, ctx: click.Context) -> list[str]:
        commands = set(super().list_commands(ctx))
        commands.update(self.lazy_subcommands)
        return sorted(commands)

    def get_command(self, ctx: click.Context, cmd_name: str) -> click.Command | None:
        cmd = super().get_command(ctx, cmd_name)
        if cmd is not None:
            return cmd

        module_path = self.lazy_subcommands.get(cmd_name)
        if module_path is None:
            return None

        module_name, attr_name = module_path.rsplit(".", 1)
        return getattr(importlib.import_module(module_name), attr_name)  # type: ignore[no-any-return]


LAZY_COMMANDS = {
    "compile": "bros_cli.commands.compile.compile_cmd",
    "validate": "bros_cli.commands.validate.validate",
    "generate": "bros_cli.commands.generate.generate",
    "runner": "bros_cli.commands.runner.runner",
    "schema": "bros_cli.commands.schema.schema",
}


def _configure_logging(ctx: click.Context, param: click.Parameter, value: str) -> str:
    from bros_core.observability import configure_logging

    configure_logging(log_level=value, json_format=False)
    return value


@click.command(cls=LazyGroup, lazy_subcommands=LAZY_COMMANDS)
@click.version_option(version=__version__, prog_name="bros")
@click.option(
    "--no-color",
    is_flag=True,
    default=False,
    help="Disable colored output.",
    is_eager=True,
    expose_value=False,
    callback=lambda ctx, param, value: set_no_color(value) if value else None,
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    help="Structured log level (logs go to stderr).",
    expose_value=False,
    callback=_configure_logging,
)
def cli() -> None:
    """BROS - block graphs to runnable ROS 2 workspaces.

    **Pipeline:**

    - `bros compile` - Block graph -> IR
    - `bros validate` - Check IR for errors and warnings
    - `bros generate` - IR (or graph) -> ROS 2 workspace
    - `bros runner up|exec|down|status` - Container environment
    - `bros schema export` - JSON Schema for graph / IR / validation files
    """
    pass


if __name__ == "__main__":
    cli()
