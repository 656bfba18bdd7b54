"""Repeat containers (``@#``): grow or shrink children to match the data.

Child 0 is the template. Growing appends clones of it, shrinking removes
children from the tail. A failure part-way through rolls the container back
to the children it had before the call.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple

from sheetsync.core.errors import MutationError, WorksheetNotFound, format_warning
from sheetsync.core.models import Binding, Table
from sheetsync.scene.mutator import NodeMutator
from sheetsync.scene.nodes import SceneNode
from sheetsync.services.binding import find_worksheet, match, parse, resolve

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class ExpansionResult:
    added: int = 0
    removed: int = 0
    target_count: int = 0
    rolled_back: bool = False
    warnings: List[str] = field(default_factory=list)


def first_bound_label(container: SceneNode, parse_fn: Callable[[str], Binding] = parse) -> Optional[str]:
    """First label found depth-first in ``container``'s subtree, itself included."""

    for node in container.iter_tree():
        binding = parse_fn(node.name)
        if binding.is_ignored:
            continue
        if binding.primary_label is not None:
            return binding.primary_label
    return None


def target_count_for(container: SceneNode, table: Table, parse_fn: Callable[[str], Binding] = parse) -> int:
    """Row count of the container's first bound label, 0 when nothing is bound."""

    label = first_bound_label(container, parse_fn)
    if label is None:
        return 0
    binding = resolve(container, parse_fn)
    worksheet = find_worksheet(table, binding.worksheet)
    if worksheet is None:
        raise WorksheetNotFound(f"worksheet {binding.worksheet!r} not found")
    matched = match(label, worksheet.labels)
    if matched is None:
        return 0
    return len(worksheet.values(matched))


def _rollback(
    container: SceneNode,
    added: List[SceneNode],
    removed: List[Tuple[int, SceneNode]],
    mutator: NodeMutator,
    result: ExpansionResult,
) -> None:
    for clone in reversed(added):
        if clone.parent is None:
            continue
        try:
            mutator.remove(clone)
        except Exception as e:  # noqa: BLE001
            result.warnings.append(format_warning(f"rollback could not remove clone: {e}", container.name))
    for position, child in reversed(removed):
        try:
            mutator.insert_child(container, position, child)
        except Exception as e:  # noqa: BLE001
            result.warnings.append(format_warning(f"rollback could not restore child: {e}", container.name))


def expand(container: SceneNode, target_count: int, mutator: NodeMutator) -> ExpansionResult:
    result = ExpansionResult(target_count=target_count)

    if not container.has_layout:
        result.warnings.append(
            format_warning("repeat marker needs a layout-managed container; skipping", container.name)
        )
        return result
    if not container.children:
        result.warnings.append(format_warning("repeat container has no template child", container.name))
        return result
    if target_count <= 0:
        result.warnings.append(format_warning("no values found for the repeated label", container.name))
        return result

    current = len(container.children)
    template = container.children[0]
    added: List[SceneNode] = []
    removed: List[Tuple[int, SceneNode]] = []

    try:
        if current < target_count:
            for _ in range(target_count - current):
                clone = mutator.clone(template)
                mutator.append_child(container, clone)
                added.append(clone)
        elif current > target_count:
            for position in range(current - 1, target_count - 1, -1):
                child = container.children[position]
                mutator.remove(child)
                removed.append((position, child))
    except Exception as e:  # noqa: BLE001
        message = e.message if isinstance(e, MutationError) else str(e)
        LOGGER.warning("repeat expansion failed for %s: %s", container.name, message)
        _rollback(container, added, removed, mutator, result)
        result.rolled_back = True
        result.warnings.append(format_warning(f"expansion rolled back: {message}", container.name))
        return result

    result.added = len(added)
    result.removed = len(removed)
    LOGGER.info(
        "repeat %s: %d -> %d children (+%d/-%d)",
        container.name,
        current,
        len(container.children),
        result.added,
        result.removed,
    )
    return result


__all__ = ["ExpansionResult", "expand", "first_bound_label", "target_count_for"]
