"""Block graph -> canonical IR compilation.

build_ir() chains the graph compiler, the merge engine and the strict schema
checks. It never raises for problems local to a block or node: those come
back as issue strings next to a best-effort IR.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

import structlog
import yaml
from pydantic import BaseModel, ConfigDict, Field

from bros_core.compiler.fragments import graph_to_fragments, parse_block_graph
from bros_core.compiler.merge import merge_fragments
from bros_core.compiler.schema import check_ir_schema
from bros_core.errors import ConfigurationError
from bros_core.schemas.blocks import BlockGraph
from bros_core.schemas.ir import IR

logger = structlog.get_logger(__name__)


class CompileResult(BaseModel):
    """Output of build_ir().

    Attributes:
        ir: Canonical (possibly partial) IR.
        issues: Reference, block and schema issues, de-duplicated.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    ir: IR = Field(default_factory=IR)
    issues: list[str] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        """True when compilation produced no issues."""
        return not self.issues


def build_ir(graph: BlockGraph | Mapping[str, Any]) -> CompileResult:
    """Compile a block graph into canonical IR.

    Args:
        graph: Parsed graph or raw ``{"blocks": [...]}`` mapping.

    Returns:
        CompileResult with the merged IR and the collected issues.

    Raises:
        CompilationError: If ``graph`` is not a mapping.

    Example:
        >>> result = build_ir({"blocks": [
        ...     {"kind": "node", "id": "talker", "name": "talker", "pkg": "demo_pkg"},
        ...     {"kind": "publish", "nodeId": "talker",
        ...      "topic": "/chatter", "type": "std_msgs/msg/String"},
        ... ]})
        >>> [p.name for p in result.ir.packages]
        ['demo_pkg']
    """
    parsed, issues = parse_block_graph(graph)
    fragments, reference_issues = graph_to_fragments(parsed)
    issues.extend(reference_issues)

    ir = merge_fragments(fragments)
    issues.extend(_lang_conflicts(ir))
    issues.extend(check_ir_schema(ir))

    unique_issues = list(dict.fromkeys(issues))
    logger.info(
        "ir_compiled",
        blocks=len(parsed.blocks),
        packages=len(ir.packages),
        nodes=len(ir.iter_nodes()),
        issues=len(unique_issues),
    )
    return CompileResult(ir=ir, issues=unique_issues)


def _lang_conflicts(ir: IR) -> list[str]:
    issues: list[str] = []
    for pkg in ir.packages:
        langs = sorted({node.lang for node in pkg.nodes if node.lang})
        if len(langs) > 1:
            issues.append(
                f"package '{pkg.name}' mixes languages {', '.join(langs)}; using {pkg.lang}"
            )
    return issues


def load_document(path: Path | str) -> dict[str, Any]:
    """Load a JSON or YAML document (block graph or IR) from disk.

    Args:
        path: File to read. JSON is parsed as YAML.

    Returns:
        Top-level mapping.

    Raises:
        FileNotFoundError: If the file does not exist.
        ConfigurationError: If the content is not a mapping or cannot be parsed.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as err:
        line_number = None
        mark = getattr(err, "problem_mark", None)
        if mark is not None:
            line_number = mark.line + 1
        raise ConfigurationError(
            "Document could not be parsed",
            file_path=str(path),
            line_number=line_number,
            internal_details=str(err),
        ) from err

    if not isinstance(data, dict):
        raise ConfigurationError("Document must contain a mapping", file_path=str(path))
    return data
