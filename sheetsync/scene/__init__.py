"""In-memory scene tree and the host collaborators that act on it."""

from .fonts import FontCache, FontLoader, StaticFontLoader
from .mutator import InMemoryMutator, NodeMutator
from .nodes import Document, FontName, NodeType, SceneNode, page
from .traversal import TraversalResult, scope_roots, traverse

__all__ = [
    "Document",
    "FontCache",
    "FontLoader",
    "FontName",
    "InMemoryMutator",
    "NodeMutator",
    "NodeType",
    "SceneNode",
    "StaticFontLoader",
    "TraversalResult",
    "page",
    "scope_roots",
    "traverse",
]
