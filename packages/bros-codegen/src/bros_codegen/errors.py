"""Exceptions raised by code generation."""

from __future__ import annotations

from bros_core.errors import BrosError
from bros_core.schemas import Issue


class CodegenError(BrosError):
    """Base exception for bros-codegen."""

    pass


class GenerationBlockedError(CodegenError):
    """Raised when the IR must not be generated.

    Attributes:
        issues: The blocking validation errors.
        violations: Strict IR contract violations, as
            ``"schema violation at <path>: <msg>"`` strings.

    Example:
        >>> raise GenerationBlockedError(result.errors)
        # User sees: "Code generation blocked by 1 validation error(s): duplicate-node: ..."
    """

    def __init__(self, issues: list[Issue], *, violations: list[str] | None = None) -> None:
        self.issues = issues
        self.violations = violations or []
        if self.violations:
            reasons = self.violations
            label = "schema violation(s)"
        else:
            reasons = [str(issue) for issue in issues]
            label = "validation error(s)"
        summary = "; ".join(reasons[:3])
        if len(reasons) > 3:
            summary += f"; ... ({len(reasons) - 3} more)"
        super().__init__(f"Code generation blocked by {len(reasons)} {label}: {summary}")


class TemplateRenderError(CodegenError):
    """Raised when a template cannot be found or fails to render.

    Attributes:
        template: Template path relative to the template root.
    """

    def __init__(self, template: str, *, internal_details: str | None = None) -> None:
        super().__init__(
            f"Failed to render template '{template}'",
            internal_details=internal_details,
        )
        self.template = template
