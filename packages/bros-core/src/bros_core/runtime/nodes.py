"""Built-in runtime nodes."""

from __future__ import annotations

import json
from collections.abc import Callable, Mapping
from typing import Any

from bros_core.runtime.bus import Message
from bros_core.runtime.runtime import NodeContext, NodeFactory

DEFAULT_CONSOLE_TOPIC = "keys/arrows"


def _default_format(payload: Any) -> str:
    if isinstance(payload, str):
        return payload
    return json.dumps(payload, default=str)


class ConsoleSubscriber:
    """Subscribe to one topic and log every inbound message.

    Config keys:
        topic: Topic to subscribe to (default ``keys/arrows``).
        format: Callable turning a payload into text (default: str as-is,
            anything else JSON-encoded).
    """

    def __init__(self, ctx: NodeContext, config: Mapping[str, Any] | None = None) -> None:
        config = config or {}
        self.id = ctx.id
        self._ctx = ctx
        self.topic: str = config.get("topic") or DEFAULT_CONSOLE_TOPIC
        self._format: Callable[[Any], str] = config.get("format") or _default_format
        self._handler: Callable[[Message], None] | None = None

    @property
    def running(self) -> bool:
        return self._handler is not None

    def start(self) -> None:
        if self._handler is not None:
            return

        self._ctx.log(f'subscribing to "{self.topic}"')

        def handler(message: Message) -> None:
            self._ctx.log(f"received from {message.sender}: {self._format(message.data)}")

        self._handler = handler
        self._ctx.bus.subscribe(self.topic, handler)

    def stop(self) -> None:
        if self._handler is None:
            return
        self._ctx.bus.unsubscribe(self.topic, self._handler)
        self._handler = None
        self._ctx.log(f'stopped subscribing to "{self.topic}"')


DEFAULT_NODE_KINDS: dict[str, NodeFactory] = {
    "console_sub": ConsoleSubscriber,
}
"""Built-in node kinds."""
