"""IR validator.

Two passes over canonical IR, with findings split into two tiers:

1. Per-package duplicate-node check. Within one ``(package, namespace)``
   scope a repeated node name is a ``duplicate-node`` error; the duplicate's
   topic refs are not recorded.
2. Global topic registry. Blank types are ``missing-topic-type`` errors; the
   first type seen for a topic is canonical and any other type on the same
   topic is a ``topic-type-mismatch`` error.

Topics with only publishers or only subscribers then get exactly one
``topic-orphan`` warning, located at the first location on the populated
side.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

import structlog

from bros_core.schemas.ir import IR, IRNode, IRPackage, IRTopicRef
from bros_core.schemas.issues import Issue, IssueCode, ValidationResult

logger = structlog.get_logger(__name__)

Role = Literal["publisher", "subscriber"]


@dataclass(frozen=True)
class TopicLocation:
    """Where a topic ref was declared."""

    package: str
    node: str
    namespace: str | None = None

    def __str__(self) -> str:
        return format_location(self.package, self.node, self.namespace)


@dataclass
class _TopicUsage:
    type: str | None = None
    publishers: list[TopicLocation] = field(default_factory=list)
    subscribers: list[TopicLocation] = field(default_factory=list)


def normalize_namespace(namespace: str | None) -> str | None:
    """Return the namespace with a leading ``/``; root or blank gives None.

    Example:
        >>> normalize_namespace("robot1")
        '/robot1'
        >>> normalize_namespace("/") is None
        True
    """
    if namespace is None or namespace == "/" or not namespace.strip():
        return None
    return namespace if namespace.startswith("/") else f"/{namespace}"


def format_location(package: str, node: str, namespace: str | None = None) -> str:
    """Format a ``package[/namespace]/node`` locator.

    Example:
        >>> format_location("demo_pkg", "talker", "robot1")
        'demo_pkg/robot1/talker'
    """
    ns = normalize_namespace(namespace)
    return f"{package}{ns}/{node}" if ns else f"{package}/{node}"


class IRValidator:
    """Single-use validator holding the topic registry for one run."""

    def __init__(self) -> None:
        self.errors: list[Issue] = []
        self.warnings: list[Issue] = []
        self._topics: dict[str, _TopicUsage] = {}

    def run(self, ir: IR) -> ValidationResult:
        for package in ir.packages:
            self._check_package(package)
        self._check_orphans()
        return ValidationResult(errors=self.errors, warnings=self.warnings)

    def _check_package(self, package: IRPackage) -> None:
        seen: dict[tuple[str, str], IRNode] = {}

        for node in package.nodes:
            ns = normalize_namespace(node.namespace) or ""
            key = (ns, node.name)
            previous = seen.get(key)
            if previous is not None:
                self.errors.append(
                    Issue(
                        level="error",
                        code=IssueCode.DUPLICATE_NODE,
                        message=(
                            f'Duplicate node name "{node.name}" in package '
                            f'"{package.name}" and namespace "{ns or "/"}" '
                            f"(conflicts with "
                            f"{format_location(package.name, previous.name, previous.namespace)})."
                        ),
                        at=format_location(package.name, node.name, node.namespace),
                    )
                )
                continue

            seen[key] = node
            self._collect(package.name, node, node.pubs, "publisher")
            self._collect(package.name, node, node.subs, "subscriber")

    def _collect(
        self,
        package_name: str,
        node: IRNode,
        refs: list[IRTopicRef] | None,
        role: Role,
    ) -> None:
        location = TopicLocation(package=package_name, node=node.name, namespace=node.namespace)

        for ref in refs or []:
            if not ref.type or not ref.type.strip():
                self.errors.append(
                    Issue(
                        level="error",
                        code=IssueCode.MISSING_TOPIC_TYPE,
                        message=(
                            f'Topic "{ref.topic}" is missing a type on {role} '
                            f'"{node.name}" in package "{package_name}".'
                        ),
                        at=str(location),
                    )
                )
                continue

            usage = self._topics.setdefault(ref.topic, _TopicUsage())
            if usage.type is None:
                usage.type = ref.type
            elif usage.type != ref.type:
                self.errors.append(
                    Issue(
                        level="error",
                        code=IssueCode.TOPIC_TYPE_MISMATCH,
                        message=(
                            f'Topic "{ref.topic}" has conflicting types '
                            f'"{usage.type}" and "{ref.type}".'
                        ),
                        at=str(location),
                    )
                )

            if role == "publisher":
                usage.publishers.append(location)
            else:
                usage.subscribers.append(location)

    def _check_orphans(self) -> None:
        for topic, usage in self._topics.items():
            if usage.publishers and usage.subscribers:
                continue

            if usage.publishers:
                populated, missing, source = "publishers", "subscribers", usage.publishers[0]
            else:
                populated, missing, source = "subscribers", "publishers", usage.subscribers[0]

            self.warnings.append(
                Issue(
                    level="warning",
                    code=IssueCode.TOPIC_ORPHAN,
                    message=f'Topic "{topic}" has {populated} but no {missing}.',
                    at=str(source),
                )
            )


def validate_ir(ir: IR) -> ValidationResult:
    """Validate canonical IR.

    Args:
        ir: Canonical IR (merge output).

    Returns:
        ValidationResult. Errors must block code generation; warnings never do.

    Example:
        >>> result = validate_ir(IR())
        >>> result.ok, result.warnings
        (True, [])
    """
    result = IRValidator().run(ir)
    logger.info(
        "ir_validated",
        errors=len(result.errors),
        warnings=len(result.warnings),
    )
    return result
