"""Scope resolution and binding-aware tree walks."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional

from sheetsync.core.errors import SetupError
from sheetsync.core.models import Binding
from sheetsync.core.profiles import SyncScope
from sheetsync.services.binding.parser import parse

from .nodes import Document, NodeType, SceneNode

ParseFn = Callable[[str], Binding]


def scope_roots(document: Document, scope: SyncScope, *, page_name: Optional[str] = None) -> List[SceneNode]:
    """Return the ordered root nodes a run over ``scope`` starts from."""

    if scope == "document":
        return [child for pg in document.pages for child in pg.children]

    target = document.page_by_name(page_name) if page_name else document.current_page
    if target is None:
        raise SetupError(f"page not found: {page_name or '<current>'}")

    if scope == "page":
        return list(target.children)

    if not document.selection:
        raise SetupError("selection scope requested but nothing is selected")
    roots: List[SceneNode] = []
    for node_id in document.selection:
        node = document.find_node(node_id)
        if node is None:
            raise SetupError(f"selected node not found: {node_id}")
        roots.append(node)
    return roots


@dataclass(slots=True)
class TraversalResult:
    bound: List[SceneNode] = field(default_factory=list)
    repeat_containers: List[SceneNode] = field(default_factory=list)
    examined: int = 0
    ignored: int = 0
    components_skipped: int = 0


def traverse(
    roots: Iterable[SceneNode],
    *,
    include_main_components: bool = False,
    parse_fn: ParseFn = parse,
) -> TraversalResult:
    """Depth-first walk collecting bound nodes and repeat containers.

    Ignored (``-``) subtrees are pruned, as are main components unless their
    name carries ``+`` or ``include_main_components`` is set.
    """

    result = TraversalResult()
    stack = list(reversed(list(roots)))
    while stack:
        node = stack.pop()
        if node.is_page_like:
            stack.extend(reversed(node.children))
            continue

        binding = parse_fn(node.name)
        result.examined += 1
        if binding.is_ignored:
            result.ignored += 1
            continue
        if node.type is NodeType.COMPONENT and not (binding.force_include or include_main_components):
            result.components_skipped += 1
            continue

        if binding.is_repeat_frame:
            result.repeat_containers.append(node)
        if binding.has_binding:
            result.bound.append(node)
        stack.extend(reversed(node.children))
    return result


__all__ = ["TraversalResult", "scope_roots", "traverse"]
