"""CLI error handling for the bros CLI.

Library exceptions are translated into CLIError with an exit code:

- 0: success
- 1: user error (bad input, validation errors, runner state)
- 2: system error (file permissions, Docker unavailable, template failures)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, NoReturn

import click
from pydantic import ValidationError as PydanticValidationError

from bros_cli.output import error

if TYPE_CHECKING:
    from pydantic_core import ErrorDetails


EXIT_SUCCESS = 0
EXIT_USER_ERROR = 1
EXIT_SYSTEM_ERROR = 2


class CLIError(click.ClickException):
    """Click exception carrying a bros exit code.

    Attributes:
        message: User-facing error message.
        exit_code: Process exit code.
    """

    def __init__(self, message: str, exit_code: int = EXIT_USER_ERROR) -> None:
        super().__init__(message)
        self.exit_code = exit_code

    def show(self, file: object = None) -> None:
        error(self.format_message())


def format_pydantic_error(err: PydanticValidationError) -> str:
    """Format a pydantic ValidationError as one line per failing field.

    Example:
        >>> format_pydantic_error(err)
        "Validation failed:\\n  - packages.0.nodes.0.id: Field required"
    """
    details: list[ErrorDetails] = err.errors()
    lines = ["Validation failed:"]
    for detail in details:
        loc = ".".join(str(part) for part in detail["loc"])
        lines.append(f"  - {loc}: {detail['msg']}")
    return "\n".join(lines)


def handle_file_not_found(file_path: str) -> NoReturn:
    """Raise a CLIError for a missing input file."""
    raise CLIError(
        f"File not found: {file_path}\n\n"
        "Pass a block graph or IR document with --file.",
        exit_code=EXIT_USER_ERROR,
    )


def handle_permission_error(path: str, operation: str = "access") -> NoReturn:
    """Raise a CLIError for a filesystem permission failure."""
    raise CLIError(
        f"Permission denied: Cannot {operation} {path}",
        exit_code=EXIT_SYSTEM_ERROR,
    )
