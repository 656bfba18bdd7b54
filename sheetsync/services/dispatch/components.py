"""Component lookup and instance swapping.

Component names are compared case-insensitively. A value such as
``Size=Large, State=Hover`` is variant syntax: it is merged over the
instance's current variant properties and resolved inside the same
component set first, then against every variant in the document.
"""

from __future__ import annotations

import logging
import re
from typing import Dict, Iterable, List, Optional

from sheetsync.core.errors import ComponentNotFound, MutationError
from sheetsync.scene.mutator import NodeMutator
from sheetsync.scene.nodes import NodeType, SceneNode

from .images import is_image_url

LOGGER = logging.getLogger(__name__)

_VARIANT = re.compile(r"^[^=]+=.+$")


def normalize_component_name(name: str) -> str:
    return name.strip().lower()


def is_variant_syntax(value: str) -> bool:
    trimmed = value.strip()
    return not is_image_url(trimmed) and bool(_VARIANT.match(trimmed))


def parse_variant_properties(value: str) -> Dict[str, str]:
    """``"Size=Large, Color=Red"`` -> ``{"size": "large", "color": "red"}``."""

    props: Dict[str, str] = {}
    for pair in value.split(","):
        name, sep, prop_value = pair.partition("=")
        name, prop_value = name.strip(), prop_value.strip()
        if sep and name and prop_value:
            props[name.lower()] = prop_value.lower()
    return props


class ComponentIndex:
    """Run-scoped lookup of components and component sets by name."""

    def __init__(self) -> None:
        self.components: Dict[str, SceneNode] = {}
        self.component_sets: Dict[str, SceneNode] = {}
        self.by_id: Dict[str, SceneNode] = {}
        self._variants: List[SceneNode] = []

    @classmethod
    def build(cls, roots: Iterable[SceneNode]) -> "ComponentIndex":
        index = cls()
        for root in roots:
            for node in root.iter_tree():
                index.add(node)
        return index

    def add(self, node: SceneNode) -> None:
        key = normalize_component_name(node.name)
        if node.type is NodeType.COMPONENT:
            self.components.setdefault(key, node)
            self.by_id.setdefault(node.id, node)
            if "=" in node.name:
                self._variants.append(node)
        elif node.type is NodeType.COMPONENT_SET:
            self.component_sets.setdefault(key, node)

    def __len__(self) -> int:
        return len(self.components)

    def find(self, name: str) -> Optional[SceneNode]:
        return self.components.get(normalize_component_name(name))

    def find_variant(self, props: Dict[str, str], *, within: Optional[SceneNode] = None) -> Optional[SceneNode]:
        """First variant whose properties include every ``props`` entry."""

        candidates = self._variants
        if within is not None:
            candidates = [node for node in within.children if node.type is NodeType.COMPONENT]
        for component in candidates:
            own = parse_variant_properties(component.name)
            if all(own.get(key) == value for key, value in props.items()):
                return component
        return None


def _resolve_variant(instance: SceneNode, value: str, index: ComponentIndex) -> Optional[SceneNode]:
    requested = parse_variant_properties(value)
    current = index.by_id.get(instance.main_component or "")
    if current is not None and current.parent is not None and current.parent.type is NodeType.COMPONENT_SET:
        merged = {**parse_variant_properties(current.name), **requested}
        found = index.find_variant(merged, within=current.parent)
        if found is not None:
            return found
    return index.find_variant(requested) or index.find(value)


def swap_component(instance: SceneNode, value: str, index: ComponentIndex, mutator: NodeMutator) -> bool:
    """Point ``instance`` at the component named by ``value``; True when it changed."""

    if instance.type is not NodeType.INSTANCE:
        raise MutationError(f"cannot swap component on {instance.type.value} node {instance.name!r}")
    name = value.strip()
    if not name:
        raise ComponentNotFound("component name is empty")

    if is_variant_syntax(name):
        target = _resolve_variant(instance, name, index)
        missing = f"variant not found: {name!r}"
    else:
        target = index.find(name)
        missing = f"component not found: {name!r}"
    if target is None:
        raise ComponentNotFound(missing)

    if instance.main_component == target.id:
        return False
    mutator.swap_component(instance, target)
    LOGGER.debug("swapped %s -> %s", instance.name, target.name)
    return True


__all__ = [
    "ComponentIndex",
    "is_variant_syntax",
    "normalize_component_name",
    "parse_variant_properties",
    "swap_component",
]
