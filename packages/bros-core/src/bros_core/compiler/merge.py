"""Merge engine: fold IR fragments into one canonical IR.

Fragments arrive in discovery order, which is not stable across edits. The
merge is keyed so that the result does not depend on that order:

- packages are keyed by sanitized name
- nodes are keyed by ``id`` within their package
- topic refs are keyed by ``(topic, type)``

The canonical output is sorted (packages by name, nodes by name, refs by
topic/type, params by key), so merging the same fragments in any permutation
yields the same IR. Scalar node fields are "last present value wins";
fragments built from one node block agree on them. A package takes
``python`` when any fragment declares it, otherwise the single other lang
seen.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from bros_core.schemas.ir import IR, IRNode, IRPackage, IRTopicRef, Lang

DEFAULT_PACKAGE_NAME = "package"
DEFAULT_NODE_NAME = "node"
DEFAULT_NAMESPACE = "ns"
DEFAULT_LANG: Lang = "python"

_INVALID_NAME_CHARS = re.compile(r"[^A-Za-z0-9_]")
_UNDERSCORE_RUNS = re.compile(r"_+")


def sanitize_name(value: str | None, fallback: str) -> str:
    """Reduce a name to the ``[A-Za-z0-9_]`` alphabet.

    Invalid characters become ``_``, runs of ``_`` collapse into one and
    leading/trailing ``_`` are trimmed. An empty result returns ``fallback``.

    Args:
        value: Raw name (may be None).
        fallback: Value returned when nothing survives sanitization.

    Returns:
        Sanitized name.

    Example:
        >>> sanitize_name("Example Node!", "node")
        'Example_Node'
        >>> sanitize_name("--", "node")
        'node'
    """
    sanitized = _INVALID_NAME_CHARS.sub("_", value or "")
    sanitized = _UNDERSCORE_RUNS.sub("_", sanitized).strip("_")
    return sanitized or fallback


def sanitize_namespace(value: str | None) -> str | None:
    """Sanitize a namespace; the root namespace ("/" or blank) becomes None."""
    if value is None or not value.strip().strip("/"):
        return None
    return sanitize_name(value, DEFAULT_NAMESPACE)


@dataclass
class _NodeAccumulator:
    id: str
    name: str
    executable: str
    lang: Lang | None
    namespace: str | None
    params: dict[str, Any] | None
    pubs: dict[tuple[str, str], IRTopicRef] = field(default_factory=dict)
    subs: dict[tuple[str, str], IRTopicRef] = field(default_factory=dict)


@dataclass
class _PackageAccumulator:
    name: str
    langs: set[Lang] = field(default_factory=set)
    nodes: dict[str, _NodeAccumulator] = field(default_factory=dict)


def merge_fragments(fragments: Iterable[IR | Mapping[str, Any]]) -> IR:
    """Merge IR fragments into a canonical IR.

    Args:
        fragments: Fragments in discovery order. Mappings are validated
            into IR first.

    Returns:
        Canonical IR. Empty input yields ``IR()``.

    Example:
        >>> a = IR.model_validate({"packages": [{"name": "demo", "nodes": [
        ...     {"id": "t", "name": "talker",
        ...      "pubs": [{"topic": "/chatter", "type": "std_msgs/msg/String"}]}]}]})
        >>> merged = merge_fragments([a, a])
        >>> len(merged.packages[0].nodes[0].pubs)
        1
    """
    packages: dict[str, _PackageAccumulator] = {}

    for fragment in fragments:
        ir = fragment if isinstance(fragment, IR) else IR.model_validate(fragment)
        for pkg in ir.packages:
            package_name = sanitize_name(pkg.name, DEFAULT_PACKAGE_NAME)
            accumulator = packages.get(package_name)
            if accumulator is None:
                accumulator = _PackageAccumulator(name=package_name)
                packages[package_name] = accumulator
            if pkg.lang:
                accumulator.langs.add(pkg.lang)

            for node in pkg.nodes:
                _merge_node(accumulator, node)

    return IR(packages=[_finalize_package(packages[name]) for name in sorted(packages)])


def _merge_node(package: _PackageAccumulator, node: IRNode) -> None:
    name = sanitize_name(node.name, "") or None
    executable = sanitize_name(node.executable, "") or None
    namespace = sanitize_namespace(node.namespace)

    existing = package.nodes.get(node.id)
    if existing is None:
        node_name = name or sanitize_name(node.id, DEFAULT_NODE_NAME)
        existing = _NodeAccumulator(
            id=node.id,
            name=node_name,
            executable=executable or node_name,
            lang=node.lang,
            namespace=namespace,
            params=dict(node.params) if node.params is not None else None,
        )
        package.nodes[node.id] = existing
    else:
        existing.name = name or existing.name
        existing.executable = executable or existing.executable
        existing.namespace = namespace or existing.namespace
        existing.lang = node.lang or existing.lang
        existing.params = _merge_params(existing.params, node.params)

    _union_refs(existing.pubs, node.pubs)
    _union_refs(existing.subs, node.subs)


def _merge_params(
    existing: dict[str, Any] | None,
    incoming: dict[str, Any] | None,
) -> dict[str, Any] | None:
    if existing is None and incoming is None:
        return None
    return {**(existing or {}), **(incoming or {})}


def _union_refs(
    target: dict[tuple[str, str], IRTopicRef],
    incoming: list[IRTopicRef] | None,
) -> None:
    for ref in incoming or []:
        target.setdefault(ref.key, ref)


def resolve_package_lang(langs: Iterable[Lang]) -> Lang:
    """Pick one package lang; python wins over any other declared lang."""
    declared = set(langs)
    if not declared or DEFAULT_LANG in declared:
        return DEFAULT_LANG
    return min(declared)


def _sorted_params(params: dict[str, Any] | None) -> dict[str, Any] | None:
    if params is None:
        return None
    return {key: params[key] for key in sorted(params)}


def _sorted_refs(refs: dict[tuple[str, str], IRTopicRef]) -> list[IRTopicRef] | None:
    if not refs:
        return None
    return [refs[key] for key in sorted(refs)]


def _finalize_package(package: _PackageAccumulator) -> IRPackage:
    package_lang = resolve_package_lang(package.langs)
    nodes = [
        IRNode(
            id=node.id,
            name=node.name,
            package=package.name,
            executable=node.executable,
            lang=node.lang or package_lang,
            namespace=node.namespace,
            params=_sorted_params(node.params),
            pubs=_sorted_refs(node.pubs),
            subs=_sorted_refs(node.subs),
        )
        for node in package.nodes.values()
    ]
    nodes.sort(key=lambda n: (n.name, n.namespace or "", n.id))
    return IRPackage(name=package.name, lang=package_lang, nodes=nodes)
