"""Intermediate representation (IR) models.

The IR is the single source of truth between graph compilation and code
generation:

- IR: root container, ``{packages: [...]}``
- IRPackage: one ROS 2 package and its nodes
- IRNode: one node, keyed by its stable ``id``
- IRTopicRef: a ``(topic, type)`` pair used for publishers and subscribers

Fragments produced by the graph compiler use the same models; fields that a
fragment cannot know yet (``package``, ``executable``...) may be left empty
and are filled in by the merge engine.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

Lang = Literal["python", "cpp"]
"""Supported target languages."""

SUPPORTED_LANGS: tuple[str, ...] = ("python", "cpp")


class IRTopicRef(BaseModel):
    """A topic reference on a node.

    The pair itself is the uniqueness key: two refs with the same topic and
    type are the same ref.

    Attributes:
        topic: Topic name (e.g., "/chatter").
        type: Message type (e.g., "std_msgs/msg/String"). May be blank in
            hand-written IR; the validator reports it.

    Example:
        >>> ref = IRTopicRef(topic="/chatter", type="std_msgs/msg/String")
        >>> ref.key
        ('/chatter', 'std_msgs/msg/String')
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    topic: str = Field(..., description="Topic name")
    type: str | None = Field(default=None, description="Message type")

    @property
    def key(self) -> tuple[str, str]:
        """Dedupe key for this reference."""
        return (self.topic, self.type or "")


class IRNode(BaseModel):
    """A node in the IR.

    ``id`` is the merge key and stays stable across edits. ``name``,
    ``executable`` and ``namespace`` are display/derived fields that later
    fragments may overwrite.

    Attributes:
        id: Stable node identifier.
        name: Node name (sanitized in canonical IR).
        package: Owning package name.
        executable: Base executable name.
        lang: Target language. None only in fragments.
        namespace: Optional ROS namespace.
        params: Optional node parameters.
        pubs: Published topic refs (absent when empty).
        subs: Subscribed topic refs (absent when empty).
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str = Field(..., description="Stable node identifier")
    name: str = Field(default="", description="Node name")
    package: str = Field(default="", description="Owning package name")
    executable: str = Field(default="", description="Base executable name")
    lang: Lang | None = Field(default=None, description="Target language")
    namespace: str | None = Field(default=None, description="ROS namespace")
    params: dict[str, Any] | None = Field(default=None, description="Node parameters")
    pubs: list[IRTopicRef] | None = Field(default=None, description="Published topics")
    subs: list[IRTopicRef] | None = Field(default=None, description="Subscribed topics")


class IRPackage(BaseModel):
    """A package in the IR.

    Attributes:
        name: Package name (sanitized in canonical IR).
        lang: Package language.
        nodes: Nodes owned by this package.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(..., description="Package name")
    lang: Lang | None = Field(default=None, description="Package language")
    nodes: list[IRNode] = Field(default_factory=list, description="Package nodes")


class IR(BaseModel):
    """Root of the intermediate representation.

    ``IR()`` is the canonical empty IR.

    Example:
        >>> IR().to_dict()
        {'packages': []}
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    packages: list[IRPackage] = Field(default_factory=list, description="Packages")

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON-compatible form, omitting absent optional fields."""
        return self.model_dump(mode="json", exclude_none=True)

    def to_json(self, indent: int | None = 2) -> str:
        """Return the JSON text form, omitting absent optional fields."""
        return self.model_dump_json(indent=indent, exclude_none=True)

    def iter_nodes(self) -> list[tuple[IRPackage, IRNode]]:
        """Return every ``(package, node)`` pair in canonical order."""
        return [(pkg, node) for pkg in self.packages for node in pkg.nodes]
