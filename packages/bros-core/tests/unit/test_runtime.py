"""Unit tests for the in-process message runtime."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import pytest
from structlog.testing import capture_logs

from bros_core.runtime import (
    DEFAULT_NODE_KINDS,
    ConsoleSubscriber,
    Message,
    MessageBus,
    NodeContext,
    Runtime,
    UnknownNodeKindError,
)


class Talker:
    """Minimal node publishing one message on start."""

    def __init__(self, ctx: NodeContext, config: Mapping[str, Any] | None = None) -> None:
        self.id = ctx.id
        self._ctx = ctx
        self.topic = (config or {}).get("topic", "/chatter")

    def start(self) -> None:
        self._ctx.publish(self.topic, "hello")

    def stop(self) -> None:
        pass


def node_logs(logs: list[dict[str, Any]], node_id: str) -> list[str]:
    return [entry["message"] for entry in logs if entry["event"] == "node_log" and entry["node_id"] == node_id]


class TestMessageBus:
    """Tests for MessageBus."""

    def test_emit_calls_subscribers_in_order(self) -> None:
        """Handlers for the topic run in subscription order."""
        bus = MessageBus()
        calls: list[str] = []
        bus.subscribe("/t", lambda m: calls.append(f"a:{m.data}"))
        bus.subscribe("/t", lambda m: calls.append(f"b:{m.data}"))
        bus.subscribe("/other", lambda m: calls.append("other"))

        delivered = bus.emit(Message(topic="/t", data=1, sender="s"))

        assert delivered == 2
        assert calls == ["a:1", "b:1"]

    def test_unsubscribe(self) -> None:
        """Unsubscribed handlers are no longer called."""
        bus = MessageBus()
        received: list[Message] = []
        bus.subscribe("/t", received.append)

        assert bus.unsubscribe("/t", received.append)
        assert not bus.unsubscribe("/t", received.append)
        assert bus.emit(Message(topic="/t", data=None, sender="s")) == 0
        assert bus.subscriber_count("/t") == 0

    def test_emit_without_subscribers(self) -> None:
        """Emitting to an unknown topic delivers nothing."""
        assert MessageBus().emit(Message(topic="/none", data=1, sender="s")) == 0


class TestRuntime:
    """Tests for Runtime node lifecycle."""

    def test_unknown_kind(self) -> None:
        """Creating an unregistered kind lists what is available."""
        runtime = Runtime(DEFAULT_NODE_KINDS)
        with pytest.raises(UnknownNodeKindError) as exc_info:
            runtime.create("teleop")
        assert exc_info.value.kind == "teleop"
        assert "console_sub" in str(exc_info.value)

    def test_default_ids(self) -> None:
        """Ids default to <kind>_<n> in creation order."""
        runtime = Runtime(DEFAULT_NODE_KINDS)
        runtime.create("console_sub")
        runtime.create("console_sub", node_id="custom")
        runtime.create("console_sub")
        assert runtime.list() == ["console_sub_1", "custom", "console_sub_2"]

    def test_register(self) -> None:
        """Kinds can be added after construction."""
        runtime = Runtime()
        assert runtime.kinds == []
        runtime.register("talker", Talker)
        assert runtime.kinds == ["talker"]
        assert isinstance(runtime.create("talker"), Talker)

    def test_registry_is_copied(self) -> None:
        """Registering on one runtime never affects the shared table."""
        runtime = Runtime(DEFAULT_NODE_KINDS)
        runtime.register("talker", Talker)
        assert "talker" not in DEFAULT_NODE_KINDS

    def test_runtimes_are_isolated(self) -> None:
        """Messages never cross runtimes."""
        first = Runtime({"console_sub": ConsoleSubscriber, "talker": Talker})
        second = Runtime({"talker": Talker})
        first.create("console_sub", {"topic": "/chatter"}, node_id="sub")
        second.create("talker", node_id="talker")

        with capture_logs() as logs:
            first.start("sub")
            second.start("talker")

        assert node_logs(logs, "sub") == ['subscribing to "/chatter"']

    def test_start_stop_unknown_ids_ignored(self) -> None:
        """start/stop of an unknown id is a no-op."""
        runtime = Runtime()
        runtime.start("missing")
        runtime.stop("missing")
        assert runtime.get("missing") is None


class TestConsoleSubscriber:
    """Tests for the built-in console subscriber."""

    def test_logs_received_messages(self) -> None:
        """Inbound messages are logged with sender and payload."""
        runtime = Runtime({**DEFAULT_NODE_KINDS, "talker": Talker})
        runtime.create("console_sub", {"topic": "/chatter"}, node_id="sub")
        runtime.create("talker", node_id="talker")

        with capture_logs() as logs:
            runtime.start_all()
            runtime.stop_all()

        assert node_logs(logs, "sub") == [
            'subscribing to "/chatter"',
            "received from talker: hello",
            'stopped subscribing to "/chatter"',
        ]

    def test_default_topic_and_json_payload(self) -> None:
        """The default topic is keys/arrows; non-string payloads are JSON."""
        runtime = Runtime(DEFAULT_NODE_KINDS)
        node = runtime.create("console_sub", node_id="sub")
        assert isinstance(node, ConsoleSubscriber)
        assert node.topic == "keys/arrows"

        node.start()
        with capture_logs() as logs:
            runtime.bus.emit(Message(topic="keys/arrows", data={"key": "up"}, sender="kb"))
        assert node_logs(logs, "sub") == ['received from kb: {"key": "up"}']

    def test_custom_format(self) -> None:
        """A format callable overrides payload rendering."""
        runtime = Runtime(DEFAULT_NODE_KINDS)
        node = runtime.create("console_sub", {"topic": "/t", "format": lambda d: f"<{d}>"}, node_id="sub")
        node.start()
        with capture_logs() as logs:
            runtime.bus.emit(Message(topic="/t", data=3, sender="x"))
        assert node_logs(logs, "sub") == ["received from x: <3>"]

    def test_start_stop_idempotent(self) -> None:
        """Repeated start/stop subscribe and unsubscribe only once."""
        runtime = Runtime(DEFAULT_NODE_KINDS)
        node = runtime.create("console_sub", {"topic": "/t"})
        assert isinstance(node, ConsoleSubscriber)

        node.start()
        node.start()
        assert node.running
        assert runtime.bus.subscriber_count("/t") == 1

        node.stop()
        node.stop()
        assert not node.running
        assert runtime.bus.subscriber_count("/t") == 0
