"""Node mutation primitives.

The sync engine decides *which* change to make; a :class:`NodeMutator`
performs it. :class:`InMemoryMutator` applies changes to the in-memory scene
tree and rejects changes a node type cannot take, the way a real host would.
"""

from __future__ import annotations

import hashlib
import itertools
import logging
from typing import List, Optional, Protocol, Tuple

from sheetsync.core.errors import MutationError

from .nodes import RGB, NodeType, SceneNode

LOGGER = logging.getLogger(__name__)

TEXT_PROPERTIES = frozenset(
    {"text_align_horizontal", "text_align_vertical", "font_size", "line_height", "letter_spacing"}
)

FILL_TYPES = frozenset(
    {
        NodeType.FRAME,
        NodeType.COMPONENT,
        NodeType.INSTANCE,
        NodeType.TEXT,
        NodeType.RECTANGLE,
        NodeType.ELLIPSE,
        NodeType.POLYGON,
        NodeType.STAR,
        NodeType.VECTOR,
        NodeType.LINE,
        NodeType.BOOLEAN_OPERATION,
    }
)

IMAGE_FILL_TYPES = FILL_TYPES - {NodeType.TEXT}

CONTAINER_TYPES = frozenset(
    {
        NodeType.FRAME,
        NodeType.GROUP,
        NodeType.SECTION,
        NodeType.COMPONENT,
        NodeType.COMPONENT_SET,
        NodeType.INSTANCE,
        NodeType.BOOLEAN_OPERATION,
        NodeType.PAGE,
    }
)


class NodeMutator(Protocol):
    def set_text(self, node: SceneNode, text: str) -> None: ...

    def set_fill_color(self, node: SceneNode, color: RGB) -> None: ...

    def set_opacity(self, node: SceneNode, opacity: float) -> None: ...

    def resize(self, node: SceneNode, width: float, height: float) -> None: ...

    def set_position(self, node: SceneNode, axis: str, value: float, *, absolute: bool = False) -> None: ...

    def set_rotation(self, node: SceneNode, degrees: float) -> None: ...

    def set_visible(self, node: SceneNode, visible: bool) -> None: ...

    def set_text_property(self, node: SceneNode, name: str, value: object) -> None: ...

    def swap_component(self, node: SceneNode, component: SceneNode) -> None: ...

    def set_image_fill(self, node: SceneNode, data: bytes) -> None: ...

    def clone(self, node: SceneNode) -> SceneNode: ...

    def append_child(self, parent: SceneNode, child: SceneNode) -> None: ...

    def insert_child(self, parent: SceneNode, index: int, child: SceneNode) -> None: ...

    def remove(self, node: SceneNode) -> None: ...


def can_have_image_fill(node: SceneNode) -> bool:
    return node.type in IMAGE_FILL_TYPES


class InMemoryMutator:
    """Reference :class:`NodeMutator` over :class:`SceneNode` trees.

    Every successful change is appended to ``log`` as ``(operation, node id)``.
    """

    def __init__(self) -> None:
        self.log: List[Tuple[str, str]] = []
        self._clone_ids = itertools.count(1)

    def _record(self, op: str, node: SceneNode) -> None:
        self.log.append((op, node.id))

    def _require(self, node: SceneNode, allowed: frozenset, op: str) -> None:
        if node.type not in allowed:
            raise MutationError(f"{op} not supported on {node.type.value} node {node.name!r}")

    # ------------------------------------------------------------------
    def set_text(self, node: SceneNode, text: str) -> None:
        self._require(node, frozenset({NodeType.TEXT}), "set_text")
        node.characters = text
        self._record("set_text", node)

    def set_fill_color(self, node: SceneNode, color: RGB) -> None:
        # Groups have no fills of their own; paint their children instead.
        if node.type is NodeType.GROUP:
            for child in node.children:
                self.set_fill_color(child, color)
            return
        self._require(node, FILL_TYPES, "set_fill_color")
        node.fill_color = color
        node.image_hash = None
        self._record("set_fill_color", node)

    def set_opacity(self, node: SceneNode, opacity: float) -> None:
        if not 0.0 <= opacity <= 1.0:
            raise MutationError(f"opacity out of range: {opacity}")
        node.opacity = opacity
        self._record("set_opacity", node)

    def resize(self, node: SceneNode, width: float, height: float) -> None:
        if width <= 0 or height <= 0:
            raise MutationError(f"invalid size {width}x{height} for {node.name!r}")
        node.width = width
        node.height = height
        self._record("resize", node)

    def set_position(self, node: SceneNode, axis: str, value: float, *, absolute: bool = False) -> None:
        if axis not in ("x", "y"):
            raise MutationError(f"unknown axis: {axis}")
        if absolute:
            abs_x, abs_y = node.absolute_position()
            current = abs_x if axis == "x" else abs_y
            value = getattr(node, axis) + (value - current)
        setattr(node, axis, value)
        self._record("set_position", node)

    def set_rotation(self, node: SceneNode, degrees: float) -> None:
        node.rotation = degrees
        self._record("set_rotation", node)

    def set_visible(self, node: SceneNode, visible: bool) -> None:
        node.visible = visible
        self._record("set_visible", node)

    def set_text_property(self, node: SceneNode, name: str, value: object) -> None:
        self._require(node, frozenset({NodeType.TEXT}), "set_text_property")
        if name not in TEXT_PROPERTIES:
            raise MutationError(f"unknown text property: {name}")
        node.text_props[name] = value
        self._record(f"set_{name}", node)

    def swap_component(self, node: SceneNode, component: SceneNode) -> None:
        self._require(node, frozenset({NodeType.INSTANCE}), "swap_component")
        if component.type is not NodeType.COMPONENT:
            raise MutationError(f"{component.name!r} is not a component")
        node.main_component = component.id
        self._record("swap_component", node)

    def set_image_fill(self, node: SceneNode, data: bytes) -> None:
        self._require(node, IMAGE_FILL_TYPES, "set_image_fill")
        if not data:
            raise MutationError("empty image data")
        node.image_hash = hashlib.sha1(data).hexdigest()
        node.fill_color = None
        self._record("set_image_fill", node)

    # ------------------------------------------------------------------
    def clone(self, node: SceneNode) -> SceneNode:
        copy = node.copy_tree(lambda src: f"{src.id}~{next(self._clone_ids)}")
        self._record("clone", node)
        return copy

    def append_child(self, parent: SceneNode, child: SceneNode) -> None:
        self.insert_child(parent, len(parent.children), child)

    def insert_child(self, parent: SceneNode, index: int, child: SceneNode) -> None:
        self._require(parent, CONTAINER_TYPES, "insert_child")
        if child.parent is not None:
            self.remove(child)
        index = max(0, min(index, len(parent.children)))
        parent.children.insert(index, child)
        child.parent = parent
        self._record("insert_child", child)

    def remove(self, node: SceneNode) -> None:
        parent: Optional[SceneNode] = node.parent
        if parent is None:
            raise MutationError(f"node {node.name!r} is not attached")
        parent.children.remove(node)
        node.parent = None
        self._record("remove", node)


__all__ = [
    "CONTAINER_TYPES",
    "FILL_TYPES",
    "IMAGE_FILL_TYPES",
    "InMemoryMutator",
    "NodeMutator",
    "TEXT_PROPERTIES",
    "can_have_image_fill",
]
