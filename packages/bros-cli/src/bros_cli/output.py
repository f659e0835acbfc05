"""Rich console output for the bros CLI.

Human-readable messages go through a module-level Rich console. NO_COLOR in
the environment and the global ``--no-color`` flag both disable styling.
"""

from __future__ import annotations

import json
import os
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from rich.console import Console
from rich.markup import escape

if TYPE_CHECKING:
    from bros_core.schemas import Issue

_env_no_color = os.environ.get("NO_COLOR") is not None


def create_console(no_color: bool = False) -> Console:
    """Create a Console honouring ``no_color`` and the NO_COLOR variable."""
    disabled = no_color or _env_no_color
    return Console(
        force_terminal=False if disabled else None,
        no_color=disabled,
        highlight=False,
    )


console = create_console()


def success(message: str, **kwargs: Any) -> None:
    """Print a success message.

    Example:
        >>> success("IR written to ir.json")
        ✓ IR written to ir.json
    """
    console.print(f"[green]✓[/green] {escape(message)}", **kwargs)


def error(message: str, **kwargs: Any) -> None:
    """Print an error message."""
    console.print(f"[red]✗[/red] {escape(message)}", **kwargs)


def warning(message: str, **kwargs: Any) -> None:
    """Print a warning message."""
    console.print(f"[yellow]⚠[/yellow] {escape(message)}", **kwargs)


def info(message: str, **kwargs: Any) -> None:
    """Print a plain message. Markup in ``message`` is not interpreted."""
    console.print(escape(message), **kwargs)


def print_json(data: Any, **kwargs: Any) -> None:
    """Print JSON-compatible data with syntax highlighting."""
    console.print_json(json.dumps(data), **kwargs)


def print_issues(errors: Iterable[Issue], warnings: Iterable[Issue]) -> None:
    """Print validation issues, errors first."""
    for issue in errors:
        error(str(issue))
    for issue in warnings:
        warning(str(issue))


def set_no_color(no_color: bool) -> None:
    """Replace the module console with one that has colors enabled/disabled."""
    global console
    console = create_console(no_color=no_color)
