"""In-memory scene tree: documents, pages and the nodes they contain."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, Iterator, List, Optional, Tuple


class NodeType(str, Enum):
    DOCUMENT = "DOCUMENT"
    PAGE = "PAGE"
    FRAME = "FRAME"
    GROUP = "GROUP"
    SECTION = "SECTION"
    COMPONENT = "COMPONENT"
    COMPONENT_SET = "COMPONENT_SET"
    INSTANCE = "INSTANCE"
    TEXT = "TEXT"
    RECTANGLE = "RECTANGLE"
    ELLIPSE = "ELLIPSE"
    POLYGON = "POLYGON"
    STAR = "STAR"
    VECTOR = "VECTOR"
    LINE = "LINE"
    BOOLEAN_OPERATION = "BOOLEAN_OPERATION"


PAGE_LIKE = frozenset({NodeType.DOCUMENT, NodeType.PAGE})
MAIN_COMPONENT_TYPES = frozenset({NodeType.COMPONENT, NodeType.COMPONENT_SET})

LAYOUT_NONE = "NONE"

RGB = Tuple[float, float, float]


@dataclass(frozen=True, slots=True)
class FontName:
    family: str
    style: str = "Regular"

    def __str__(self) -> str:
        return f"{self.family} {self.style}"


@dataclass(eq=False, slots=True)
class SceneNode:
    """A node in the scene tree.

    Geometry is relative to the parent. Text attributes are only meaningful
    on ``TEXT`` nodes; ``main_component`` holds the id of the component an
    ``INSTANCE`` renders.
    """

    id: str
    name: str
    type: NodeType = NodeType.FRAME
    children: List["SceneNode"] = field(default_factory=list)
    parent: Optional["SceneNode"] = field(default=None, repr=False)
    visible: bool = True
    opacity: float = 1.0
    fill_color: Optional[RGB] = None
    image_hash: Optional[str] = None
    x: float = 0.0
    y: float = 0.0
    width: float = 100.0
    height: float = 100.0
    rotation: float = 0.0
    layout_mode: str = LAYOUT_NONE
    characters: str = ""
    fonts: List[FontName] = field(default_factory=list)
    text_props: Dict[str, object] = field(default_factory=dict)
    main_component: Optional[str] = None

    def __post_init__(self) -> None:
        for child in self.children:
            child.parent = self

    @property
    def is_page_like(self) -> bool:
        return self.type in PAGE_LIKE

    @property
    def has_layout(self) -> bool:
        return self.layout_mode != LAYOUT_NONE

    def iter_tree(self) -> Iterator["SceneNode"]:
        """Yield this node and every descendant, depth-first pre-order."""

        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def ancestors(self, max_depth: int = 256) -> Iterator["SceneNode"]:
        node = self.parent
        depth = 0
        while node is not None and depth < max_depth:
            yield node
            node = node.parent
            depth += 1

    def absolute_position(self) -> Tuple[float, float]:
        x, y = self.x, self.y
        for ancestor in self.ancestors():
            if ancestor.is_page_like:
                break
            x += ancestor.x
            y += ancestor.y
        return x, y

    def copy_tree(self, new_id: Callable[["SceneNode"], str]) -> "SceneNode":
        """Deep copy of this subtree with fresh ids; the copy has no parent."""

        clone = SceneNode(
            id=new_id(self),
            name=self.name,
            type=self.type,
            visible=self.visible,
            opacity=self.opacity,
            fill_color=self.fill_color,
            image_hash=self.image_hash,
            x=self.x,
            y=self.y,
            width=self.width,
            height=self.height,
            rotation=self.rotation,
            layout_mode=self.layout_mode,
            characters=self.characters,
            fonts=list(self.fonts),
            text_props=dict(self.text_props),
            main_component=self.main_component,
        )
        for child in self.children:
            copied = child.copy_tree(new_id)
            copied.parent = clone
            clone.children.append(copied)
        return clone


def page(id: str, name: str, children: Optional[List[SceneNode]] = None) -> SceneNode:
    return SceneNode(id=id, name=name, type=NodeType.PAGE, children=list(children or []))


@dataclass(slots=True)
class Document:
    """Ordered pages plus the editor state that scope resolution reads."""

    pages: List[SceneNode] = field(default_factory=list)
    current_page_id: Optional[str] = None
    selection: List[str] = field(default_factory=list)

    @property
    def current_page(self) -> Optional[SceneNode]:
        if self.current_page_id is not None:
            for pg in self.pages:
                if pg.id == self.current_page_id:
                    return pg
        return self.pages[0] if self.pages else None

    def page_by_name(self, name: str) -> Optional[SceneNode]:
        for pg in self.pages:
            if pg.name == name:
                return pg
        return None

    def iter_nodes(self) -> Iterator[SceneNode]:
        for pg in self.pages:
            yield from pg.iter_tree()

    def find_node(self, node_id: str) -> Optional[SceneNode]:
        for node in self.iter_nodes():
            if node.id == node_id:
                return node
        return None


__all__ = [
    "Document",
    "FontName",
    "LAYOUT_NONE",
    "MAIN_COMPONENT_TYPES",
    "NodeType",
    "PAGE_LIKE",
    "RGB",
    "SceneNode",
    "page",
]
