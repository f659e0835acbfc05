"""In-process node runtime.

A Runtime owns its own MessageBus and a registration table from node kind to
factory. Nothing here is process-global: two runtimes never see each other's
messages.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, Protocol

import structlog

from bros_core.errors import BrosError
from bros_core.runtime.bus import Message, MessageBus

logger = structlog.get_logger(__name__)


class UnknownNodeKindError(BrosError):
    """Raised when creating a node whose kind is not registered.

    Attributes:
        kind: The requested kind.
        available: Registered kinds.
    """

    def __init__(self, kind: str, available: list[str]) -> None:
        available_str = ", ".join(sorted(available)) if available else "none"
        super().__init__(f"Unknown node kind '{kind}'. Available: {available_str}")
        self.kind = kind
        self.available = available


class NodeInstance(Protocol):
    """A runnable node. start() and stop() must be safe to call twice."""

    id: str

    def start(self) -> None: ...

    def stop(self) -> None: ...


@dataclass(frozen=True)
class NodeContext:
    """Handles given to a node when it is created.

    Attributes:
        id: Node id.
        bus: Bus of the owning runtime.
        publish: ``publish(topic, data)`` stamped with this node as sender.
        log: ``log(message)`` bound to this node.
    """

    id: str
    bus: MessageBus
    publish: Callable[[str, Any], None]
    log: Callable[[str], None]


NodeFactory = Callable[[NodeContext, Mapping[str, Any] | None], NodeInstance]


class Runtime:
    """Create, start and stop nodes against a private bus.

    Args:
        registry: Initial ``{kind: factory}`` table. Copied, never shared.

    Example:
        >>> runtime = Runtime({"console_sub": ConsoleSubscriber})
        >>> node = runtime.create("console_sub", {"topic": "/chatter"})
        >>> runtime.list()
        ['console_sub_1']
    """

    def __init__(self, registry: Mapping[str, NodeFactory] | None = None) -> None:
        self.bus = MessageBus()
        self._registry: dict[str, NodeFactory] = dict(registry or {})
        self._nodes: dict[str, NodeInstance] = {}
        self._seq = 0

    @property
    def kinds(self) -> list[str]:
        return sorted(self._registry)

    def register(self, kind: str, factory: NodeFactory) -> None:
        self._registry[kind] = factory

    def create(
        self,
        kind: str,
        config: Mapping[str, Any] | None = None,
        node_id: str | None = None,
    ) -> NodeInstance:
        """Instantiate a node of a registered kind.

        Args:
            kind: Registered node kind.
            config: Optional node configuration.
            node_id: Optional id; defaults to ``<kind>_<n>``.

        Raises:
            UnknownNodeKindError: If ``kind`` is not registered.
        """
        factory = self._registry.get(kind)
        if factory is None:
            raise UnknownNodeKindError(kind, list(self._registry))

        if not node_id:
            self._seq += 1
            node_id = f"{kind}_{self._seq}"

        node_logger = logger.bind(node_id=node_id, kind=kind)

        def publish(topic: str, data: Any) -> None:
            delivered = self.bus.emit(Message(topic=topic, data=data, sender=node_id))
            node_logger.debug("message_published", topic=topic, delivered=delivered)

        def log(message: str) -> None:
            node_logger.info("node_log", message=message)

        context = NodeContext(id=node_id, bus=self.bus, publish=publish, log=log)
        instance = factory(context, config)
        self._nodes[node_id] = instance
        node_logger.info("node_created")
        return instance

    def get(self, node_id: str) -> NodeInstance | None:
        return self._nodes.get(node_id)

    def start(self, node_id: str) -> None:
        """Start one node; unknown ids are ignored."""
        node = self._nodes.get(node_id)
        if node is not None:
            node.start()

    def stop(self, node_id: str) -> None:
        """Stop one node; unknown ids are ignored."""
        node = self._nodes.get(node_id)
        if node is not None:
            node.stop()

    def start_all(self) -> None:
        for node in list(self._nodes.values()):
            node.start()

    def stop_all(self) -> None:
        for node in list(self._nodes.values()):
            node.stop()

    def list(self) -> list[str]:
        """Return node ids in creation order."""
        return list(self._nodes)
