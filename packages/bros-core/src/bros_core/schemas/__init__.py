"""Pydantic schemas for bros-core.

- blocks: BlockGraph and its block kinds (editor input)
- ir: IR, IRPackage, IRNode, IRTopicRef (compiler output)
- issues: Issue and ValidationResult (validator output)
"""

from __future__ import annotations

from bros_core.schemas.blocks import (
    BLOCK_TYPES,
    Block,
    BlockGraph,
    NodeBlock,
    PublishBlock,
    SubscribeBlock,
)
from bros_core.schemas.ir import (
    IR,
    SUPPORTED_LANGS,
    IRNode,
    IRPackage,
    IRTopicRef,
    Lang,
)
from bros_core.schemas.issues import Issue, IssueCode, IssueLevel, ValidationResult

__all__ = [
    # Blocks
    "Block",
    "BlockGraph",
    "BLOCK_TYPES",
    "NodeBlock",
    "PublishBlock",
    "SubscribeBlock",
    # IR
    "IR",
    "IRNode",
    "IRPackage",
    "IRTopicRef",
    "Lang",
    "SUPPORTED_LANGS",
    # Issues
    "Issue",
    "IssueCode",
    "IssueLevel",
    "ValidationResult",
]
