"""Compiler module for bros-runtime.

- build_ir: block graph -> CompileResult (canonical IR + issues)
- parse_block_graph / graph_to_fragments: graph compiler
- merge_fragments / sanitize_name: merge engine
- check_ir_schema: strict structural contract applied after merge
- load_document: read a JSON/YAML graph or IR file
"""

from __future__ import annotations

from bros_core.compiler.compiler import CompileResult, build_ir, load_document
from bros_core.compiler.fragments import (
    graph_to_fragments,
    node_block_to_fragment,
    parse_block_graph,
    publish_block_to_fragment,
    subscribe_block_to_fragment,
)
from bros_core.compiler.merge import (
    DEFAULT_LANG,
    DEFAULT_NAMESPACE,
    DEFAULT_NODE_NAME,
    DEFAULT_PACKAGE_NAME,
    merge_fragments,
    sanitize_name,
    sanitize_namespace,
)
from bros_core.compiler.schema import check_ir_schema

__all__: list[str] = [
    # Pipeline
    "build_ir",
    "CompileResult",
    "load_document",
    # Graph compiler
    "parse_block_graph",
    "graph_to_fragments",
    "node_block_to_fragment",
    "publish_block_to_fragment",
    "subscribe_block_to_fragment",
    # Merge engine
    "merge_fragments",
    "sanitize_name",
    "sanitize_namespace",
    "DEFAULT_LANG",
    "DEFAULT_NAMESPACE",
    "DEFAULT_NODE_NAME",
    "DEFAULT_PACKAGE_NAME",
    # Schema checks
    "check_ir_schema",
]
