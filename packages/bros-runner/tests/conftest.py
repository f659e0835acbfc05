"""Shared pytest fixtures for bros-runner tests."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest
import structlog

from bros_runner.config import RetryConfig, RunnerSettings
from bros_runner.naming import RunnerProject


@pytest.fixture(autouse=True)
def configure_structlog_for_tests() -> None:
    """Route structlog to stdout without logger caching, for test isolation."""
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=False,
    )


@pytest.fixture
def no_wait_retry() -> RetryConfig:
    """Retry policy without backoff delays."""
    return RetryConfig(
        max_attempts=3,
        initial_wait_seconds=0.0,
        max_wait_seconds=0.0,
        jitter_seconds=0.0,
    )


@pytest.fixture
def settings(tmp_path: Path, no_wait_retry: RetryConfig) -> RunnerSettings:
    """Settings rooted in a temporary projects directory."""
    return RunnerSettings(projects_root=tmp_path / "Projects", pull_retry=no_wait_retry)


@pytest.fixture
def project(settings: RunnerSettings) -> RunnerProject:
    """The "demo" project under the temporary projects root."""
    return RunnerProject.default("demo", settings=settings)
