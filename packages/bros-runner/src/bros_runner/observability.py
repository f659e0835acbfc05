"""Structured logging and OpenTelemetry spans for bros-runner.

This module provides:
- configure_logging: structlog setup (re-exported from bros_core)
- span: OpenTelemetry span that also logs started/completed/failed
- log_retry_attempt: retry logging used by image pulls
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

import structlog
from opentelemetry import trace
from opentelemetry.trace import SpanKind, Status, StatusCode

from bros_core.observability import configure_logging

if TYPE_CHECKING:
    from opentelemetry.trace import Span, Tracer
    from structlog.stdlib import BoundLogger

TRACER_NAME = "bros.runner"

__all__ = ["configure_logging", "get_logger", "get_tracer", "log_retry_attempt", "span"]


def get_logger() -> BoundLogger:
    """Return the runner logger."""
    return structlog.get_logger(TRACER_NAME)


def get_tracer() -> Tracer:
    """Return the OpenTelemetry tracer for bros-runner.

    Without an SDK configured this is a no-op tracer.
    """
    return trace.get_tracer(TRACER_NAME)


@contextmanager
def span(
    name: str,
    *,
    kind: SpanKind = SpanKind.INTERNAL,
    attributes: dict[str, Any] | None = None,
) -> Iterator[Span]:
    """Run a block inside an OpenTelemetry span with structured logging.

    Args:
        name: Span name (e.g., "runner.up").
        kind: Span kind.
        attributes: Span attributes, also used as log context.

    Example:
        >>> with span("runner.up", attributes={"runner.container": "bros_demo"}):
        ...     compose.up(path, "demo")
    """
    logger = get_logger()
    attrs = attributes or {}
    log_context = {key.replace(".", "_"): value for key, value in attrs.items()}

    with get_tracer().start_as_current_span(name, kind=kind, attributes=attrs) as s:
        logger.debug(f"{name}_started", **log_context)
        try:
            yield s
        except Exception as exc:
            s.set_status(Status(StatusCode.ERROR, str(exc)))
            s.record_exception(exc)
            logger.error(f"{name}_failed", error=str(exc), **log_context)
            raise
        s.set_status(Status(StatusCode.OK))
        logger.info(f"{name}_completed", **log_context)


def log_retry_attempt(
    operation: str,
    attempt: int,
    max_attempts: int,
    error: str,
) -> None:
    """Log a retry attempt."""
    get_logger().warning(
        "operation_retry",
        operation=operation,
        attempt=attempt,
        max_attempts=max_attempts,
        error=error,
    )
