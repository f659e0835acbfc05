"""In-process message runtime.

- MessageBus / Message: private publish/subscribe bus per runtime
- Runtime: node registry and lifecycle (create/start/stop)
- ConsoleSubscriber: built-in node that logs inbound messages
"""

from __future__ import annotations

from bros_core.runtime.bus import Handler, Message, MessageBus
from bros_core.runtime.nodes import DEFAULT_NODE_KINDS, ConsoleSubscriber
from bros_core.runtime.runtime import (
    NodeContext,
    NodeFactory,
    NodeInstance,
    Runtime,
    UnknownNodeKindError,
)

__all__: list[str] = [
    "ConsoleSubscriber",
    "DEFAULT_NODE_KINDS",
    "Handler",
    "Message",
    "MessageBus",
    "NodeContext",
    "NodeFactory",
    "NodeInstance",
    "Runtime",
    "UnknownNodeKindError",
]
