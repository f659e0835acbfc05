"""Shared pytest fixtures for bros-core tests."""

from __future__ import annotations

import sys
from typing import Any

import pytest
import structlog


@pytest.fixture(autouse=True)
def configure_structlog_for_tests() -> None:
    """Route structlog to stdout without logger caching, for test isolation."""
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=False,
    )


@pytest.fixture
def talker_listener_graph() -> dict[str, Any]:
    """Two nodes in one package sharing /chatter."""
    return {
        "blocks": [
            {"kind": "node", "id": "talker", "name": "talker", "pkg": "demo_pkg"},
            {"kind": "node", "id": "listener", "name": "listener", "pkg": "demo_pkg"},
            {
                "kind": "publish",
                "nodeId": "talker",
                "topic": "/chatter",
                "type": "std_msgs/msg/String",
            },
            {
                "kind": "subscribe",
                "nodeId": "listener",
                "topic": "/chatter",
                "type": "std_msgs/msg/String",
            },
        ]
    }
