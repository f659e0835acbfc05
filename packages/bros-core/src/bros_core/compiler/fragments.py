"""Graph compiler: turn block graph elements into minimal IR fragments.

Each block yields at most one fragment:
- node block -> package + node skeleton
- publish/subscribe block -> the referenced node's skeleton with one topic ref

Problems local to a block (unknown kind, malformed block, dangling node
reference) are collected as issue strings and the block is skipped.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import structlog
from pydantic import ValidationError as PydanticValidationError

from bros_core.errors import CompilationError
from bros_core.schemas.blocks import (
    BLOCK_TYPES,
    BlockGraph,
    NodeBlock,
    PublishBlock,
    SubscribeBlock,
)
from bros_core.schemas.ir import IR, IRNode, IRPackage, IRTopicRef

logger = structlog.get_logger(__name__)

DEFAULT_BLOCK_LANG = "python"


def parse_block_graph(data: BlockGraph | Mapping[str, Any]) -> tuple[BlockGraph, list[str]]:
    """Validate a raw block graph one block at a time.

    Args:
        data: Raw ``{"blocks": [...]}`` mapping, or an already-parsed graph.

    Returns:
        Tuple of (graph with the valid blocks, issue strings).

    Raises:
        CompilationError: If ``data`` is not a mapping at all.

    Example:
        >>> graph, issues = parse_block_graph({"blocks": [{"kind": "wire"}]})
        >>> issues
        ["unsupported block kind 'wire'"]
    """
    if isinstance(data, BlockGraph):
        return data, []
    if not isinstance(data, Mapping):
        raise CompilationError(
            "Input is not a block graph",
            internal_details=f"top-level value is a {type(data).__name__}",
        )

    raw_blocks = data.get("blocks") or []
    if not isinstance(raw_blocks, list):
        return BlockGraph(), ["graph 'blocks' must be a list"]

    blocks: list[Any] = []
    issues: list[str] = []
    for index, raw in enumerate(raw_blocks):
        kind = raw.get("kind") if isinstance(raw, Mapping) else None
        model = BLOCK_TYPES.get(kind) if isinstance(kind, str) else None
        if model is None:
            issues.append(f"unsupported block kind '{kind}'")
            continue
        try:
            blocks.append(model.model_validate(raw))
        except PydanticValidationError as err:
            first = err.errors()[0]
            path = ".".join(str(x) for x in first["loc"]) or "value"
            issues.append(f"invalid {kind} block at index {index}: {path}: {first['msg']}")

    return BlockGraph(blocks=blocks), issues


def _scaffold(
    node: NodeBlock,
    *,
    pubs: list[IRTopicRef] | None = None,
    subs: list[IRTopicRef] | None = None,
) -> IR:
    lang = node.lang or DEFAULT_BLOCK_LANG
    package = node.pkg or node.name or node.id
    executable = node.executable or node.name or node.id
    return IR(
        packages=[
            IRPackage(
                name=package,
                lang=lang,
                nodes=[
                    IRNode(
                        id=node.id,
                        name=node.name,
                        package=package,
                        executable=executable,
                        lang=lang,
                        namespace=node.namespace,
                        params=node.params,
                        pubs=pubs,
                        subs=subs,
                    )
                ],
            )
        ]
    )


def node_block_to_fragment(block: NodeBlock) -> IR:
    """Build the package + node skeleton fragment for a node block."""
    return _scaffold(block)


def publish_block_to_fragment(block: PublishBlock, node: NodeBlock) -> IR:
    """Build a fragment carrying one published topic of ``node``."""
    return _scaffold(node, pubs=[IRTopicRef(topic=block.topic, type=block.type)])


def subscribe_block_to_fragment(block: SubscribeBlock, node: NodeBlock) -> IR:
    """Build a fragment carrying one subscribed topic of ``node``."""
    return _scaffold(node, subs=[IRTopicRef(topic=block.topic, type=block.type)])


def graph_to_fragments(graph: BlockGraph) -> tuple[list[IR], list[str]]:
    """Compile every block of a graph into IR fragments.

    Node blocks are collected in a pre-pass so that publish/subscribe blocks
    may appear before the node they reference.

    Args:
        graph: Parsed block graph.

    Returns:
        Tuple of (fragments in block order, issue strings).
    """
    nodes = graph.node_blocks()
    fragments: list[IR] = []
    issues: list[str] = []

    for block in graph.blocks:
        if isinstance(block, NodeBlock):
            fragments.append(node_block_to_fragment(block))
            continue

        node = nodes.get(block.node_id)
        if node is None:
            issues.append(f"{block.kind} block references unknown node '{block.node_id}'")
            continue

        if isinstance(block, PublishBlock):
            fragments.append(publish_block_to_fragment(block, node))
        else:
            fragments.append(subscribe_block_to_fragment(block, node))

    logger.debug("fragments_built", fragments=len(fragments), issues=len(issues))
    return fragments, issues
