from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Union

from sheetsync.core.errors import FontLoadError, format_warning
from sheetsync.scene.fonts import FontCache
from sheetsync.scene.mutator import NodeMutator
from sheetsync.scene.nodes import NodeType, SceneNode

from .models import SpecialValue
from .parser import parse_chained

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class ApplyOutcome:
    applied: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.applied)


def _apply_geometry(node: SceneNode, value: SpecialValue, mutator: NodeMutator, outcome: ApplyOutcome) -> None:
    if value.visible is not None:
        mutator.set_visible(node, value.visible)
        outcome.applied.append("visibility")
    if value.color is not None:
        mutator.set_fill_color(node, value.color.as_tuple())
        outcome.applied.append("color")
    if value.opacity is not None:
        mutator.set_opacity(node, value.opacity)
        outcome.applied.append("opacity")
    if value.dimension is not None:
        dim = value.dimension
        width = dim.value if dim.kind in ("size", "width") else node.width
        height = dim.value if dim.kind in ("size", "height") else node.height
        mutator.resize(node, width, height)
        outcome.applied.append("dimension")
    if value.position is not None:
        pos = value.position
        mutator.set_position(node, pos.axis, pos.value, absolute=pos.kind == "absolute")
        outcome.applied.append("position")
    if value.rotation is not None:
        mutator.set_rotation(node, value.rotation)
        outcome.applied.append("rotation")


def _apply_text(node: SceneNode, value: SpecialValue, mutator: NodeMutator, outcome: ApplyOutcome) -> None:
    updates = [
        ("text_align_horizontal", value.text_align, "textAlign"),
        ("text_align_vertical", value.text_align_vertical, "textAlignVertical"),
        ("font_size", value.font_size, "fontSize"),
        ("line_height", value.line_height, "lineHeight"),
        ("letter_spacing", value.letter_spacing, "letterSpacing"),
    ]
    for prop, field_value, label in updates:
        if field_value is None:
            continue
        mutator.set_text_property(node, prop, field_value)
        outcome.applied.append(label)


def apply_chained(
    node: SceneNode,
    value: Union[str, SpecialValue],
    mutator: NodeMutator,
    font_cache: FontCache,
) -> ApplyOutcome:
    """Apply every populated field of ``value`` to ``node``.

    Text formatting is only applied to ``TEXT`` nodes and only after the
    node's fonts are loaded, once per node. A font that cannot be loaded
    turns into a warning and the text formatting is skipped; mutator
    failures propagate to the caller.
    """

    special = parse_chained(value) if isinstance(value, str) else value
    outcome = ApplyOutcome()
    if special.is_empty():
        return outcome

    _apply_geometry(node, special, mutator, outcome)

    if not special.has_text_fields():
        return outcome
    if node.type is not NodeType.TEXT:
        LOGGER.debug("text formatting skipped on %s node %s", node.type.value, node.name)
        return outcome
    try:
        font_cache.ensure_node(node)
    except FontLoadError as exc:
        outcome.warnings.append(format_warning(exc.message, node.name))
        return outcome
    _apply_text(node, special, mutator, outcome)
    return outcome


__all__ = ["ApplyOutcome", "apply_chained"]
