from __future__ import annotations

from sheetsync.core.errors import MutationError
from sheetsync.scene.fonts import FontCache
from sheetsync.scene.mutator import NodeMutator
from sheetsync.scene.nodes import NodeType, SceneNode
from sheetsync.services.index_tracker.tracker import is_blank


def sync_text(
    node: SceneNode,
    value: str,
    mutator: NodeMutator,
    font_cache: FontCache,
    *,
    clear_on_empty: bool = True,
) -> bool:
    """Write ``value`` into a text node; return True when the content changed.

    The node's fonts must load first, so a :class:`FontLoadError` propagates.
    """

    if node.type is not NodeType.TEXT:
        raise MutationError(f"{node.name!r} is not a text node")
    font_cache.ensure_node(node)

    if is_blank(value):
        if clear_on_empty and node.characters:
            mutator.set_text(node, "")
            return True
        return False
    if node.characters == value:
        return False
    mutator.set_text(node, value)
    return True


__all__ = ["sync_text"]
