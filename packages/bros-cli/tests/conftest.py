"""Shared test fixtures for bros-cli tests.

Provides CliRunner fixtures and block graph / IR files for command tests.
"""

from __future__ import annotations

import json
import logging
import sys
from collections.abc import Generator
from pathlib import Path
from typing import Any

import pytest
import structlog
from click.testing import CliRunner


@pytest.fixture(autouse=True)
def configure_structlog_for_tests() -> Generator[None, None, None]:
    """Keep library logs on stderr, out of command output."""
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(logging.WARNING),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )
    yield
    logging.getLogger().handlers.clear()


@pytest.fixture
def cli_runner() -> CliRunner:
    """Create a Click test runner."""
    return CliRunner()


def _write(path: Path, data: dict[str, Any]) -> Path:
    path.write_text(json.dumps(data))
    return path


@pytest.fixture
def graph_file(tmp_path: Path) -> Path:
    """Talker/listener block graph."""
    return _write(
        tmp_path / "graph.json",
        {
            "blocks": [
                {"kind": "node", "id": "talker", "name": "talker", "pkg": "demo_pkg"},
                {"kind": "node", "id": "listener", "name": "listener", "pkg": "demo_pkg"},
                {"kind": "publish", "nodeId": "talker", "topic": "/chatter", "type": "std_msgs/msg/String"},
                {"kind": "subscribe", "nodeId": "listener", "topic": "/chatter", "type": "std_msgs/msg/String"},
            ]
        },
    )


@pytest.fixture
def broken_graph_file(tmp_path: Path) -> Path:
    """Block graph with an unknown block kind and a dangling reference."""
    return _write(
        tmp_path / "broken.json",
        {
            "blocks": [
                {"kind": "wire"},
                {"kind": "node", "id": "a", "name": "a"},
                {"kind": "publish", "nodeId": "ghost", "topic": "/x", "type": "std_msgs/msg/String"},
            ]
        },
    )


@pytest.fixture
def duplicate_ir_file(tmp_path: Path) -> Path:
    """IR with two nodes named "dup" in one package."""
    node = {"name": "dup", "package": "pkg", "executable": "dup", "lang": "python"}
    return _write(
        tmp_path / "dup_ir.json",
        {
            "packages": [
                {
                    "name": "pkg",
                    "lang": "python",
                    "nodes": [{**node, "id": "a"}, {**node, "id": "b"}],
                }
            ]
        },
    )


@pytest.fixture
def orphan_ir_file(tmp_path: Path) -> Path:
    """IR whose only topic has a publisher and no subscriber."""
    return _write(
        tmp_path / "orphan_ir.json",
        {
            "packages": [
                {
                    "name": "pkg",
                    "lang": "python",
                    "nodes": [
                        {
                            "id": "talker",
                            "name": "talker",
                            "package": "pkg",
                            "executable": "talker",
                            "lang": "python",
                            "pubs": [{"topic": "/chatter", "type": "std_msgs/msg/String"}],
                        }
                    ],
                }
            ]
        },
    )
