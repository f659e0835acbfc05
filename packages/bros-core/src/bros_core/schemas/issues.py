"""Validation issue models.

Two tiers, never intermixed:
- errors block code generation
- warnings are advisory only
"""

from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

IssueLevel = Literal["error", "warning"]


class IssueCode(str, Enum):
    """Closed set of validator issue codes."""

    DUPLICATE_NODE = "duplicate-node"
    MISSING_TOPIC_TYPE = "missing-topic-type"
    TOPIC_TYPE_MISMATCH = "topic-type-mismatch"
    TOPIC_ORPHAN = "topic-orphan"


class Issue(BaseModel):
    """A single validation finding.

    Attributes:
        level: "error" or "warning".
        code: Issue code.
        message: Human-readable description.
        at: Optional ``package[/namespace]/node`` locator.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    level: IssueLevel
    code: IssueCode
    message: str
    at: str | None = None

    def __str__(self) -> str:
        location = f" [{self.at}]" if self.at else ""
        return f"{self.code.value}: {self.message}{location}"


class ValidationResult(BaseModel):
    """Result of validating an IR.

    Attributes:
        errors: Blocking issues.
        warnings: Advisory issues.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    errors: list[Issue] = Field(default_factory=list)
    warnings: list[Issue] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        """True when nothing blocks code generation."""
        return not self.errors
