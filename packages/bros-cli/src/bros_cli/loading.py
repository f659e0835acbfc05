"""Input loading shared by the compile, validate and generate commands."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from bros_cli.errors import CLIError, format_pydantic_error, handle_file_not_found

if TYPE_CHECKING:
    from bros_core.schemas import IR


def load_ir(file_path: str) -> tuple[IR, list[str]]:
    """Load an IR from a block graph or an IR document.

    A document with a top-level ``blocks`` key is compiled; anything else is
    parsed as IR directly.

    Returns:
        The IR and the compile issues (always empty for IR input).

    Raises:
        CLIError: If the file is missing, unreadable or not a valid IR.
    """
    from pydantic import ValidationError as PydanticValidationError

    from bros_core.compiler import build_ir, load_document
    from bros_core.errors import ConfigurationError
    from bros_core.schemas import IR

    path = Path(file_path)
    try:
        document = load_document(path)
    except FileNotFoundError:
        handle_file_not_found(file_path)
    except ConfigurationError as e:
        raise CLIError(e.user_message) from None

    if "blocks" in document:
        result = build_ir(document)
        return result.ir, result.issues

    try:
        return IR.model_validate(document), []
    except PydanticValidationError as e:
        raise CLIError(f"Invalid IR in {file_path}:\n{format_pydantic_error(e)}") from None
