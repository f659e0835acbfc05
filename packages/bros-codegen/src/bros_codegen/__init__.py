"""bros-codegen: ROS 2 workspace generation from canonical IR.

This package provides:
- WorkspaceGenerator: IR -> package tree + unified launch file
- TemplateRenderer: the ``render(template, context)`` port
- Jinja2Renderer: sandboxed Jinja2 adapter over the bundled templates
"""

from __future__ import annotations

__version__ = "0.1.0"

from bros_codegen.errors import CodegenError, GenerationBlockedError, TemplateRenderError
from bros_codegen.generator import (
    LAUNCH_FILE_NAME,
    LAUNCH_PACKAGE_NAME,
    GenerationResult,
    LaunchEntry,
    WorkspaceGenerator,
    message_import,
)
from bros_codegen.renderer import DEFAULT_TEMPLATE_ROOT, Jinja2Renderer, TemplateRenderer

__all__ = [
    "__version__",
    # Generator
    "WorkspaceGenerator",
    "GenerationResult",
    "LaunchEntry",
    "LAUNCH_FILE_NAME",
    "LAUNCH_PACKAGE_NAME",
    "message_import",
    # Rendering
    "TemplateRenderer",
    "Jinja2Renderer",
    "DEFAULT_TEMPLATE_ROOT",
    # Errors
    "CodegenError",
    "GenerationBlockedError",
    "TemplateRenderError",
]
