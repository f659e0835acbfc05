"""bros-core: block graph compilation, IR and validation for bros-runtime.

This package provides:
- BlockGraph / IR: pydantic models for editor input and compiler output
- build_ir: block graph -> canonical IR with issues
- validate_ir: two-tier (errors / warnings) IR validation
- Runtime: in-process message runtime
- JSON Schema export utilities
"""

from __future__ import annotations

__version__ = "0.1.0"

from bros_core.compiler import (
    CompileResult,
    build_ir,
    check_ir_schema,
    graph_to_fragments,
    load_document,
    merge_fragments,
    parse_block_graph,
    sanitize_name,
)
from bros_core.errors import BrosError, CompilationError, ConfigurationError
from bros_core.export import (
    export_block_graph_schema,
    export_ir_schema,
    export_validation_result_schema,
)
from bros_core.schemas import (
    IR,
    Block,
    BlockGraph,
    Issue,
    IssueCode,
    IRNode,
    IRPackage,
    IRTopicRef,
    NodeBlock,
    PublishBlock,
    SubscribeBlock,
    ValidationResult,
)
from bros_core.validation import format_location, normalize_namespace, validate_ir

__all__ = [
    "__version__",
    # Compiler
    "build_ir",
    "CompileResult",
    "check_ir_schema",
    "graph_to_fragments",
    "load_document",
    "merge_fragments",
    "parse_block_graph",
    "sanitize_name",
    # Validation
    "validate_ir",
    "format_location",
    "normalize_namespace",
    # Errors
    "BrosError",
    "CompilationError",
    "ConfigurationError",
    # Export
    "export_block_graph_schema",
    "export_ir_schema",
    "export_validation_result_schema",
    # Schemas
    "Block",
    "BlockGraph",
    "NodeBlock",
    "PublishBlock",
    "SubscribeBlock",
    "IR",
    "IRNode",
    "IRPackage",
    "IRTopicRef",
    "Issue",
    "IssueCode",
    "ValidationResult",
]
