"""Strict structural contract for canonical IR.

The IR models in ``bros_core.schemas.ir`` are lenient so that fragments and
hand-written IR can be loaded and reported on. The models here describe what
a canonical IR must look like before it is handed to code generation; the
compiler runs them after merging and turns failures into issue strings.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from bros_core.schemas.ir import IR, Lang

TOPIC_NAME_PATTERN = r"^/?[A-Za-z0-9_/]+$"
TOPIC_TYPE_PATTERN = r"^[A-Za-z][A-Za-z0-9_]*/[A-Za-z][A-Za-z0-9_]*/[A-Za-z][A-Za-z0-9_]*$"


class StrictTopicRef(BaseModel):
    model_config = ConfigDict(extra="forbid")

    topic: str = Field(..., pattern=TOPIC_NAME_PATTERN)
    type: str = Field(..., pattern=TOPIC_TYPE_PATTERN)


class StrictNode(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    package: str = Field(..., min_length=1)
    executable: str = Field(..., min_length=1)
    lang: Lang
    namespace: str | None = Field(default=None, min_length=1)
    params: dict[str, Any] | None = None
    pubs: list[StrictTopicRef] | None = None
    subs: list[StrictTopicRef] | None = None


class StrictPackage(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(..., min_length=1)
    lang: Lang
    nodes: list[StrictNode]


class StrictIR(BaseModel):
    model_config = ConfigDict(extra="forbid")

    packages: list[StrictPackage]


def check_ir_schema(ir: IR) -> list[str]:
    """Check an IR against the strict contract.

    Args:
        ir: IR to check (usually the merge output).

    Returns:
        One ``"schema violation at <path>: <message>"`` string per failure;
        empty when the IR conforms.

    Example:
        >>> check_ir_schema(IR())
        []
    """
    try:
        StrictIR.model_validate(ir.model_dump(mode="json", exclude_none=True))
    except PydanticValidationError as err:
        violations: list[str] = []
        for e in err.errors():
            path = ".".join(str(x) for x in e["loc"]) or "value"
            violations.append(f"schema violation at {path}: {e['msg']}")
        return violations
    return []
