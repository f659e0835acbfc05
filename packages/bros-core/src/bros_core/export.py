"""JSON Schema export for the block graph, IR and validation result formats.

The editor and other tools consume these documents, so the schemas are
exported as JSON Schema Draft 2020-12 straight from the pydantic models.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import BaseModel

from bros_core.schemas import IR, BlockGraph, ValidationResult

JSON_SCHEMA_DRAFT = "https://json-schema.org/draft/2020-12/schema"
SCHEMA_BASE_URL = "https://bros.dev/schemas"


def _export(
    model: type[BaseModel],
    schema_name: str,
    output_path: Path | str | None,
) -> dict[str, Any]:
    schema = model.model_json_schema(by_alias=True)
    schema["$schema"] = JSON_SCHEMA_DRAFT
    schema["$id"] = f"{SCHEMA_BASE_URL}/{schema_name}.schema.json"
    schema.setdefault("additionalProperties", False)

    if output_path is not None:
        path = Path(output_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(schema, indent=2))

    return schema


def export_block_graph_schema(output_path: Path | str | None = None) -> dict[str, Any]:
    """Export the BlockGraph JSON Schema (editor -> compiler input).

    Args:
        output_path: Optional file to write; parent directories are created.

    Returns:
        The schema dictionary.

    Example:
        >>> export_block_graph_schema()["$id"]
        'https://bros.dev/schemas/block-graph.schema.json'
    """
    return _export(BlockGraph, "block-graph", output_path)


def export_ir_schema(output_path: Path | str | None = None) -> dict[str, Any]:
    """Export the IR JSON Schema.

    Args:
        output_path: Optional file to write; parent directories are created.

    Returns:
        The schema dictionary.
    """
    return _export(IR, "ir", output_path)


def export_validation_result_schema(output_path: Path | str | None = None) -> dict[str, Any]:
    """Export the ValidationResult JSON Schema."""
    return _export(ValidationResult, "validation-result", output_path)


SCHEMA_EXPORTERS = {
    "block-graph": export_block_graph_schema,
    "ir": export_ir_schema,
    "validation-result": export_validation_result_schema,
}
"""Schema name -> exporter, used by ``bros schema export``."""
