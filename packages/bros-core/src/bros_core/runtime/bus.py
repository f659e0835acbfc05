"""Topic-keyed in-process message bus."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Message:
    """A message published on the bus.

    Attributes:
        topic: Topic the message was published on.
        data: Arbitrary payload.
        sender: Id of the publishing node.
        ts: Publish time (seconds since the epoch).
    """

    topic: str
    data: Any
    sender: str
    ts: float = field(default_factory=time.time)


Handler = Callable[[Message], None]


class MessageBus:
    """Synchronous publish/subscribe bus owned by one Runtime.

    Handlers run in the publisher's thread in subscription order. A handler
    that raises propagates to the publisher.

    Example:
        >>> bus = MessageBus()
        >>> received = []
        >>> bus.subscribe("/chatter", received.append)
        >>> bus.emit(Message(topic="/chatter", data="hi", sender="talker"))
        1
    """

    def __init__(self) -> None:
        self._handlers: dict[str, list[Handler]] = {}
        self._lock = threading.Lock()

    def subscribe(self, topic: str, handler: Handler) -> None:
        with self._lock:
            self._handlers.setdefault(topic, []).append(handler)

    def unsubscribe(self, topic: str, handler: Handler) -> bool:
        """Remove one registration of ``handler``; returns False if absent."""
        with self._lock:
            handlers = self._handlers.get(topic, [])
            if handler not in handlers:
                return False
            handlers.remove(handler)
            if not handlers:
                del self._handlers[topic]
            return True

    def emit(self, message: Message) -> int:
        """Deliver a message; returns the number of handlers called."""
        with self._lock:
            handlers = list(self._handlers.get(message.topic, []))
        for handler in handlers:
            handler(message)
        return len(handlers)

    def subscriber_count(self, topic: str) -> int:
        with self._lock:
            return len(self._handlers.get(topic, []))
