"""Template rendering port and its Jinja2 adapter.

The generator only ever calls ``render(template, context) -> str``; it never
looks at template syntax. Tests pass a stub renderer instead of Jinja2.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

import structlog
from jinja2 import FileSystemLoader, StrictUndefined, TemplateError
from jinja2.sandbox import SandboxedEnvironment

from bros_codegen.errors import TemplateRenderError

logger = structlog.get_logger(__name__)

DEFAULT_TEMPLATE_ROOT = Path(__file__).parent / "templates" / "ros2" / "python"
"""Bundled ROS 2 Python templates."""


@runtime_checkable
class TemplateRenderer(Protocol):
    """Renders one template with a JSON-compatible context."""

    def render(self, template: str, context: Mapping[str, Any]) -> str: ...


class Jinja2Renderer:
    """Render templates from a directory with a sandboxed Jinja2 environment.

    Undefined variables are errors, so a context/template mismatch fails
    loudly instead of producing half-empty files.

    Args:
        template_root: Directory holding the templates.

    Example:
        >>> renderer = Jinja2Renderer(DEFAULT_TEMPLATE_ROOT)
        >>> text = renderer.render("package.xml.j2", {"package_name": "demo_pkg"})
    """

    def __init__(self, template_root: Path | str = DEFAULT_TEMPLATE_ROOT) -> None:
        self.template_root = Path(template_root)
        self._env = SandboxedEnvironment(
            loader=FileSystemLoader(str(self.template_root)),
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
            undefined=StrictUndefined,
        )

    def render(self, template: str, context: Mapping[str, Any]) -> str:
        try:
            return self._env.get_template(template).render(**context)
        except TemplateError as e:
            raise TemplateRenderError(
                template,
                internal_details=f"{type(e).__name__}: {e} (root: {self.template_root})",
            ) from e
