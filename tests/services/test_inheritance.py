from __future__ import annotations

from sheetsync.core.models import INCREMENT_NON_BLANK, RANDOM, IndexSpecifier
from sheetsync.scene.nodes import NodeType, SceneNode, page
from sheetsync.services.binding import parse, resolve


def _node(name: str, children=None, type_=NodeType.FRAME) -> SceneNode:
    return SceneNode(id=name, name=name, type=type_, children=list(children or []))


def test_node_fields_override_inherited():
    leaf = _node("#Title // Own.2", type_=NodeType.TEXT)
    _node("Card // Outer.x", [leaf])
    binding = resolve(leaf)
    assert binding.worksheet == "Own"
    assert binding.index == IndexSpecifier.specific(2)


def test_closest_ancestor_wins():
    leaf = _node("#Title", type_=NodeType.TEXT)
    inner = _node("Inner // Near", [leaf])
    _node("Outer // Far.r", [inner])
    binding = resolve(leaf)
    assert binding.worksheet == "Near"


def test_worksheet_and_index_inherit_independently():
    leaf = _node("#Title", type_=NodeType.TEXT)
    inner = _node("Inner.i", [leaf])
    middle = _node("Middle // Products.x", [inner])
    _node("Outer // Other", [middle])
    binding = resolve(leaf)
    assert binding.index == INCREMENT_NON_BLANK
    assert binding.worksheet == "Products"


def test_page_name_is_worksheet_fallback_only():
    leaf = _node("#Title", type_=NodeType.TEXT)
    card = _node("Card", [leaf])
    page("0:1", "Page 1 // People.x", [card])
    binding = resolve(leaf)
    assert binding.worksheet == "People"
    # Pages never supply an index.
    assert binding.index is None


def test_walk_stops_at_page():
    leaf = _node("#Title", type_=NodeType.TEXT)
    pg = page("0:1", "Page", [leaf])
    doc_root = _node("Root // Hidden.x", [pg], type_=NodeType.DOCUMENT)
    assert doc_root.children[0] is pg
    binding = resolve(leaf)
    assert binding.worksheet is None
    assert binding.index is None


def test_resolve_without_parent_returns_own_binding():
    binding = resolve(_node("#Title.x"))
    assert binding.labels == ("Title",)
    assert binding.index == RANDOM
    assert binding.worksheet is None


def test_depth_guard_stops_on_cyclic_parent_chain():
    a = _node("A")
    b = _node("B")
    a.parent = b
    b.parent = a
    leaf = _node("#Title", type_=NodeType.TEXT)
    leaf.parent = a
    calls = []

    def counting_parse(name):
        calls.append(name)
        return parse(name)

    binding = resolve(leaf, counting_parse, max_depth=10)
    assert binding.worksheet is None
    # Own name plus at most max_depth ancestors.
    assert len(calls) == 11
