"""Custom exception hierarchy for bros-core.

- BrosError: Base exception for all bros-related errors
- CompilationError: Raised when a block graph or IR cannot be processed at all
- ConfigurationError: Raised when an input document cannot be loaded

Problems local to one block or node are never raised; they are returned as
issue strings or validation issues. These exceptions cover the cases where
there is nothing sensible to return.

User-facing messages are safe to display. Technical details are logged
internally via structlog.
"""

from __future__ import annotations

import structlog

logger = structlog.get_logger(__name__)


class BrosError(Exception):
    """Base exception for bros-runtime.

    Args:
        user_message: Safe message to display to the user.
        internal_details: Optional technical details, logged but never shown.

    Example:
        >>> raise BrosError(
        ...     "Graph could not be compiled",
        ...     internal_details="blocks[3] is not a mapping",
        ... )
    """

    def __init__(
        self,
        user_message: str,
        *,
        internal_details: str | None = None,
    ) -> None:
        super().__init__(user_message)
        self.user_message = user_message

        if internal_details:
            logger.error(
                "bros_error",
                error_type=self.__class__.__name__,
                user_message=user_message,
                internal_details=internal_details,
            )


class CompilationError(BrosError):
    """Raised when compilation cannot produce any result.

    Example:
        >>> raise CompilationError(
        ...     "Input is not a block graph",
        ...     internal_details="top-level value is a list",
        ... )
    """

    pass


class ConfigurationError(BrosError):
    """Raised when an input document cannot be parsed or has the wrong shape.

    Attributes:
        file_path: Path to the document (if known).
        field_path: Dot-separated path to the invalid field (if known).
        line_number: Line number of a parse error (if available).

    Example:
        >>> raise ConfigurationError(
        ...     "Document could not be parsed",
        ...     file_path="graph.yaml",
        ...     line_number=12,
        ... )
        # User sees: "Document could not be parsed (in graph.yaml, line 12)"
    """

    def __init__(
        self,
        user_message: str,
        *,
        file_path: str | None = None,
        field_path: str | None = None,
        line_number: int | None = None,
        internal_details: str | None = None,
    ) -> None:
        context_parts: list[str] = []
        if file_path:
            context_parts.append(f"in {file_path}")
        if line_number:
            context_parts.append(f"line {line_number}")
        if field_path:
            context_parts.append(f"field '{field_path}'")

        full_message = user_message
        if context_parts:
            full_message = f"{user_message} ({', '.join(context_parts)})"

        super().__init__(full_message, internal_details=internal_details)

        self.file_path = file_path
        self.field_path = field_path
        self.line_number = line_number
