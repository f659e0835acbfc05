"""ROS 2 workspace generation from canonical IR.

Layout written under ``workspace_dir``::

    README.md
    src/<package>/package.xml
    src/<package>/setup.py
    src/<package>/setup.cfg
    src/<package>/CMakeLists.txt
    src/<package>/resource/<package>
    src/<package>/launch/
    src/<package>/<module>/__init__.py
    src/<package>/<module>/<executable>.py
    src/bros_launch/launch/main.launch.py

Executables per node depend on its pub/sub shape:

- pubs only: one publisher ``<exe>.py``
- subs only: one subscriber ``<exe>.py``
- both: ``<exe>_pub.py`` and ``<exe>_sub.py``, each with only its side's refs
- neither: one placeholder ``<exe>.py``
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import structlog
from pydantic import BaseModel, ConfigDict, Field

from bros_codegen.errors import GenerationBlockedError
from bros_codegen.renderer import DEFAULT_TEMPLATE_ROOT, Jinja2Renderer, TemplateRenderer
from bros_core.compiler.merge import DEFAULT_NODE_NAME, merge_fragments, sanitize_name
from bros_core.compiler.schema import check_ir_schema
from bros_core.schemas import IR, IRNode, IRPackage, IRTopicRef
from bros_core.validation import validate_ir

logger = structlog.get_logger(__name__)

LAUNCH_PACKAGE_NAME = "bros_launch"
LAUNCH_FILE_NAME = "main.launch.py"
DEFAULT_MESSAGE_TYPE = "std_msgs/msg/String"

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class LaunchEntry(BaseModel):
    """One generated executable, as listed in the unified launch file."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    package: str
    executable: str
    namespace: str | None = None


class GenerationResult(BaseModel):
    """Summary of a generate() call.

    Attributes:
        workspace_dir: Resolved workspace root.
        launch_file: Path of the unified launch file.
        launch_preview: Rendered launch file text.
        entries: Every generated executable, in generation order.
        files: Every file written, in write order.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    workspace_dir: Path
    launch_file: Path
    launch_preview: str
    entries: list[LaunchEntry] = Field(default_factory=list)
    files: list[Path] = Field(default_factory=list)


@dataclass(frozen=True)
class _Executable:
    name: str
    template: str
    context: dict[str, Any]


@dataclass
class _Run:
    """Mutable state of one generate() call."""

    workspace_dir: Path
    entries: list[LaunchEntry] = field(default_factory=list)
    files: list[Path] = field(default_factory=list)
    written: dict[Path, str] = field(default_factory=dict)

    @property
    def src_root(self) -> Path:
        return self.workspace_dir / "src"

    def write(self, path: Path, text: str) -> None:
        previous = self.written.get(path)
        if previous is not None and previous != text:
            logger.warning("generated_file_overwritten", path=str(path))
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        if previous is None:
            self.files.append(path)
        self.written[path] = text

    def record(self, entry: LaunchEntry) -> None:
        if entry not in self.entries:
            self.entries.append(entry)


def message_import(type_name: str | None) -> tuple[str, str]:
    """Split a ROS message type into ``(python_module, class_name)``.

    Example:
        >>> message_import("std_msgs/msg/String")
        ('std_msgs.msg', 'String')
        >>> message_import("geometry_msgs/Twist")
        ('geometry_msgs.msg', 'Twist')
    """
    parts = [part for part in (type_name or DEFAULT_MESSAGE_TYPE).split("/") if part]
    if not all(_IDENTIFIER.match(part) for part in parts):
        parts = []
    if len(parts) == 3:
        return f"{parts[0]}.{parts[1]}", parts[2]
    if len(parts) == 2:
        return f"{parts[0]}.msg", parts[1]
    logger.warning("message_type_unparseable", type=type_name, fallback=DEFAULT_MESSAGE_TYPE)
    return message_import(DEFAULT_MESSAGE_TYPE)


def _class_name(node_name: str) -> str:
    name = "".join(part[:1].upper() + part[1:] for part in node_name.split("_") if part)
    if not name or not name[0].isalpha():
        name = f"N{name}"
    return f"{name}Node"


def _topic_context(refs: list[IRTopicRef]) -> tuple[list[dict[str, str]], list[dict[str, Any]]]:
    """Build (imports, refs) template context for a list of topic refs.

    Message classes with the same name from different packages are aliased
    with their package prefix.
    """
    pairs = [message_import(ref.type) for ref in refs]
    modules_by_class: dict[str, set[str]] = {}
    for module, class_name in pairs:
        modules_by_class.setdefault(class_name, set()).add(module)

    imports: list[dict[str, str]] = []
    seen: set[tuple[str, str]] = set()
    contexts: list[dict[str, Any]] = []
    for ref, (module, class_name) in zip(refs, pairs, strict=True):
        alias = class_name
        if len(modules_by_class[class_name]) > 1:
            alias = f"{module.split('.')[0]}_{class_name}"
        if (module, class_name) not in seen:
            seen.add((module, class_name))
            imports.append({"module": module, "class_name": class_name, "alias": alias})
        contexts.append(
            {
                "topic": ref.topic,
                "type": ref.type or DEFAULT_MESSAGE_TYPE,
                "class_name": alias,
                "is_string": module == "std_msgs.msg" and class_name == "String",
            }
        )
    return imports, contexts


def _message_packages(package: IRPackage) -> list[str]:
    packages: set[str] = set()
    for node in package.nodes:
        for ref in (node.pubs or []) + (node.subs or []):
            packages.add(message_import(ref.type)[0].split(".")[0])
    return sorted(packages)


class WorkspaceGenerator:
    """Generate a ROS 2 (ament_python) workspace from canonical IR.

    Args:
        template_root: Template directory for the default Jinja2 renderer.
        renderer: Renderer to use instead of Jinja2 (e.g., a test stub).

    Example:
        >>> generator = WorkspaceGenerator()
        >>> result = generator.generate(ir, Path("~/BROS/Projects/demo/workspace"))
        >>> result.launch_file.name
        'main.launch.py'
    """

    def __init__(
        self,
        template_root: Path | str | None = None,
        renderer: TemplateRenderer | None = None,
    ) -> None:
        self.template_root = Path(template_root) if template_root else DEFAULT_TEMPLATE_ROOT
        self.renderer = renderer or Jinja2Renderer(self.template_root)

    def generate(
        self,
        ir: IR | Mapping[str, Any],
        workspace_dir: Path | str,
        *,
        check: bool = True,
    ) -> GenerationResult:
        """Write the workspace for ``ir`` under ``workspace_dir``.

        The IR is re-canonicalized first, so hand-written IR gets the same
        sanitized package, node and executable names as compiler output.

        Args:
            ir: IR (or its JSON form).
            workspace_dir: Host directory to write into (created if missing).
            check: Check the strict IR contract and validate first; refuse to
                generate on schema violations or validation errors.

        Returns:
            GenerationResult describing what was written.

        Raises:
            GenerationBlockedError: If ``check`` and the IR has schema
                violations or validation errors.
            TemplateRenderError: If a template fails to render.
        """
        ir = merge_fragments([ir])

        if check:
            violations = check_ir_schema(ir)
            if violations:
                raise GenerationBlockedError([], violations=violations)
            validation = validate_ir(ir)
            if validation.errors:
                raise GenerationBlockedError(validation.errors)
            for warning in validation.warnings:
                logger.warning("validation_warning", code=warning.code.value, at=warning.at)

        run = _Run(workspace_dir=Path(workspace_dir).expanduser().resolve())
        run.src_root.mkdir(parents=True, exist_ok=True)
        logger.info("generation_started", workspace_dir=str(run.workspace_dir))

        for package in ir.packages:
            self._write_package(run, package)

        run.write(
            run.workspace_dir / "README.md",
            self.renderer.render(
                "README.md.j2",
                {
                    "packages": ir.to_dict()["packages"],
                    "entries": [e.model_dump() for e in run.entries],
                    "launch_package": LAUNCH_PACKAGE_NAME,
                    "launch_file": LAUNCH_FILE_NAME,
                },
            ),
        )

        launch_preview = self.renderer.render(
            f"{LAUNCH_FILE_NAME}.j2",
            {"entries": [e.model_dump() for e in run.entries]},
        )
        launch_file = self._write_launch_package(run, launch_preview)

        logger.info(
            "generation_completed",
            workspace_dir=str(run.workspace_dir),
            packages=len(ir.packages),
            executables=len(run.entries),
            files=len(run.files),
        )
        return GenerationResult(
            workspace_dir=run.workspace_dir,
            launch_file=launch_file,
            launch_preview=launch_preview,
            entries=run.entries,
            files=run.files,
        )

    def _write_package(self, run: _Run, package: IRPackage) -> None:
        package_name = package.name
        module_name = package_name.replace("-", "_")
        package_dir = run.src_root / package_name
        module_dir = package_dir / module_name

        if package.lang == "cpp":
            logger.warning("cpp_generation_unsupported", package=package_name, generated="python")

        module_dir.mkdir(parents=True, exist_ok=True)
        (package_dir / "launch").mkdir(parents=True, exist_ok=True)

        package_context = {
            "package_name": package_name,
            "dependencies": _message_packages(package),
        }
        run.write(package_dir / "package.xml", self.renderer.render("package.xml.j2", package_context))
        run.write(package_dir / "setup.cfg", self.renderer.render("setup.cfg.j2", package_context))
        run.write(
            package_dir / "CMakeLists.txt",
            self.renderer.render("CMakeLists.txt.j2", package_context),
        )
        run.write(package_dir / "resource" / package_name, "")
        run.write(module_dir / "__init__.py", "")

        console_scripts: list[dict[str, str]] = []
        for node in package.nodes:
            for executable in self._node_executables(node):
                run.write(
                    module_dir / f"{executable.name}.py",
                    self.renderer.render(executable.template, executable.context),
                )
                console_scripts.append(
                    {
                        "script": executable.name,
                        "module": f"{module_name}.{executable.name}",
                        "func": "main",
                    }
                )
                run.record(
                    LaunchEntry(
                        package=package_name,
                        executable=executable.name,
                        namespace=node.namespace,
                    )
                )

        scripts = list({s["script"]: s for s in console_scripts}.values())
        run.write(
            package_dir / "setup.py",
            self.renderer.render(
                "setup.py.j2",
                {**package_context, "module_name": module_name, "console_scripts": scripts},
            ),
        )

    def _node_executables(self, node: IRNode) -> list[_Executable]:
        node_name = sanitize_name(node.name, sanitize_name(node.id, DEFAULT_NODE_NAME))
        base = sanitize_name(node.executable, node_name)
        pubs = node.pubs or []
        subs = node.subs or []

        if pubs and subs:
            return [
                self._publisher(f"{base}_pub", f"{node_name}_pub", pubs),
                self._subscriber(f"{base}_sub", f"{node_name}_sub", subs),
            ]
        if pubs:
            return [self._publisher(base, node_name, pubs)]
        if subs:
            return [self._subscriber(base, node_name, subs)]
        return [
            _Executable(
                name=base,
                template="node_placeholder.py.j2",
                context={"node_name": node_name, "class_name": _class_name(node_name)},
            )
        ]

    def _publisher(self, name: str, node_name: str, refs: list[IRTopicRef]) -> _Executable:
        imports, pubs = _topic_context(refs)
        return _Executable(
            name=name,
            template="node_pub.py.j2",
            context={
                "node_name": node_name,
                "class_name": _class_name(node_name),
                "imports": imports,
                "pubs": pubs,
            },
        )

    def _subscriber(self, name: str, node_name: str, refs: list[IRTopicRef]) -> _Executable:
        imports, subs = _topic_context(refs)
        return _Executable(
            name=name,
            template="node_sub.py.j2",
            context={
                "node_name": node_name,
                "class_name": _class_name(node_name),
                "imports": imports,
                "subs": subs,
            },
        )

    def _write_launch_package(self, run: _Run, launch_preview: str) -> Path:
        package_dir = run.src_root / LAUNCH_PACKAGE_NAME
        context = {"package_name": LAUNCH_PACKAGE_NAME}

        run.write(
            package_dir / "package.xml",
            self.renderer.render("launch_package.xml.j2", context),
        )
        run.write(
            package_dir / "CMakeLists.txt",
            self.renderer.render("launch_CMakeLists.txt.j2", context),
        )
        launch_file = package_dir / "launch" / LAUNCH_FILE_NAME
        run.write(launch_file, launch_preview)
        return launch_file
