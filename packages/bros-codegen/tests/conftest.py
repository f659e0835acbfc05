"""Shared pytest fixtures for bros-codegen tests."""

from __future__ import annotations

import sys
from collections.abc import Mapping
from typing import Any

import pytest
import structlog

from bros_core.schemas import IR


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


class StubRenderer:
    """Renderer recording every call; output names the template."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, dict[str, Any]]] = []

    def render(self, template: str, context: Mapping[str, Any]) -> str:
        self.calls.append((template, dict(context)))
        return f"# {template}\n"

    def contexts(self, template: str) -> list[dict[str, Any]]:
        return [context for name, context in self.calls if name == template]


@pytest.fixture
def stub_renderer() -> StubRenderer:
    """Fresh stub renderer."""
    return StubRenderer()


@pytest.fixture
def talker_listener_ir() -> IR:
    """Canonical IR for one package with a talker and a listener."""
    return IR.model_validate(
        {
            "packages": [
                {
                    "name": "demo_pkg",
                    "lang": "python",
                    "nodes": [
                        {
                            "id": "listener",
                            "name": "listener",
                            "package": "demo_pkg",
                            "executable": "listener",
                            "lang": "python",
                            "subs": [{"topic": "/chatter", "type": "std_msgs/msg/String"}],
                        },
                        {
                            "id": "talker",
                            "name": "talker",
                            "package": "demo_pkg",
                            "executable": "talker",
                            "lang": "python",
                            "pubs": [{"topic": "/chatter", "type": "std_msgs/msg/String"}],
                        },
                    ],
                }
            ]
        }
    )
