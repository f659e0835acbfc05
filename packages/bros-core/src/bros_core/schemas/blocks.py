"""Block graph models.

A block graph is what the visual editor hands to the compiler. Blocks form a
closed sum type discriminated by ``kind``:

- NodeBlock: declares a node's identity
- PublishBlock: attaches a published topic to a node
- SubscribeBlock: attaches a subscribed topic to a node

BLOCK_TYPES is the registration table from ``kind`` to model class. The
compiler validates each raw block against it on its own, so one unknown or
malformed block never rejects the whole graph.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from bros_core.schemas.ir import Lang


class NodeBlock(BaseModel):
    """Node declaration block.

    Attributes:
        kind: Always "node".
        id: Stable node identifier.
        name: Display name of the node.
        lang: Target language (default python when compiled).
        namespace: Optional ROS namespace.
        pkg: Optional package name (defaults to name, then id).
        executable: Optional executable name (defaults to name, then id).
        params: Optional node parameters.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal["node"] = "node"
    id: str = Field(..., min_length=1, description="Stable node identifier")
    name: str = Field(default="", description="Node display name")
    lang: Lang | None = Field(default=None, description="Target language")
    namespace: str | None = Field(default=None, description="ROS namespace")
    pkg: str | None = Field(default=None, description="Package name")
    executable: str | None = Field(default=None, description="Executable name")
    params: dict[str, Any] | None = Field(default=None, description="Node parameters")


class _TopicBlock(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    node_id: str = Field(..., alias="nodeId", description="Referenced node id")
    topic: str = Field(..., description="Topic name")
    type: str = Field(default="", description="Message type")


class PublishBlock(_TopicBlock):
    """Publish block: the referenced node publishes ``topic`` of ``type``."""

    kind: Literal["publish"] = "publish"


class SubscribeBlock(_TopicBlock):
    """Subscribe block: the referenced node subscribes to ``topic`` of ``type``."""

    kind: Literal["subscribe"] = "subscribe"


Block = Annotated[
    Union[NodeBlock, PublishBlock, SubscribeBlock],
    Field(discriminator="kind"),
]

BLOCK_TYPES: dict[str, type[BaseModel]] = {
    "node": NodeBlock,
    "publish": PublishBlock,
    "subscribe": SubscribeBlock,
}
"""Registration table from block ``kind`` to its model."""


class BlockGraph(BaseModel):
    """Ordered set of blocks produced by the editor.

    Example:
        >>> graph = BlockGraph.model_validate({
        ...     "blocks": [
        ...         {"kind": "node", "id": "talker", "name": "talker"},
        ...         {"kind": "publish", "nodeId": "talker",
        ...          "topic": "/chatter", "type": "std_msgs/msg/String"},
        ...     ]
        ... })
        >>> len(graph.blocks)
        2
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    blocks: list[Block] = Field(default_factory=list, description="Graph blocks")

    def node_blocks(self) -> dict[str, NodeBlock]:
        """Return node blocks keyed by id (later declarations win)."""
        return {block.id: block for block in self.blocks if isinstance(block, NodeBlock)}
