from __future__ import annotations

import pytest

from sheetsync.core.errors import FontLoadError, MutationError, SetupError
from sheetsync.scene import (
    Document,
    FontCache,
    FontName,
    InMemoryMutator,
    NodeType,
    SceneNode,
    StaticFontLoader,
    page,
    scope_roots,
    traverse,
)

INTER = FontName("Inter", "Regular")


def _build_document() -> Document:
    first = page(
        "0:1",
        "Page 1",
        [
            SceneNode(
                id="1:1",
                name="Card",
                children=[
                    SceneNode(id="1:2", name="#Title", type=NodeType.TEXT),
                    SceneNode(id="1:3", name="-Notes #Title", type=NodeType.TEXT),
                ],
            ),
            SceneNode(id="1:4", name="List @#Title", layout_mode="VERTICAL"),
        ],
    )
    second = page(
        "0:2",
        "Page 2",
        [
            SceneNode(
                id="2:1",
                name="Badge",
                type=NodeType.COMPONENT,
                children=[SceneNode(id="2:2", name="#Label", type=NodeType.TEXT)],
            ),
            SceneNode(id="2:3", name="+Pill #Label", type=NodeType.COMPONENT),
        ],
    )
    return Document(pages=[first, second], current_page_id="0:1", selection=["1:4"])


def test_scope_roots_per_scope():
    doc = _build_document()
    assert [n.id for n in scope_roots(doc, "page")] == ["1:1", "1:4"]
    assert [n.id for n in scope_roots(doc, "page", page_name="Page 2")] == ["2:1", "2:3"]
    assert [n.id for n in scope_roots(doc, "document")] == ["1:1", "1:4", "2:1", "2:3"]
    assert [n.id for n in scope_roots(doc, "selection")] == ["1:4"]


def test_scope_roots_setup_errors():
    doc = _build_document()
    with pytest.raises(SetupError):
        scope_roots(doc, "page", page_name="Nope")
    doc.selection = []
    with pytest.raises(SetupError):
        scope_roots(doc, "selection")
    doc.selection = ["9:9"]
    with pytest.raises(SetupError):
        scope_roots(doc, "selection")


def test_traverse_prunes_ignored_and_main_components():
    doc = _build_document()
    found = traverse(scope_roots(doc, "document"))
    assert [n.id for n in found.bound] == ["1:2", "1:4", "2:3"]
    assert [n.id for n in found.repeat_containers] == ["1:4"]
    assert found.ignored == 1
    assert found.components_skipped == 1


def test_traverse_can_include_main_components():
    doc = _build_document()
    found = traverse(scope_roots(doc, "page", page_name="Page 2"), include_main_components=True)
    assert [n.id for n in found.bound] == ["2:2", "2:3"]


def test_document_lookup_helpers():
    doc = _build_document()
    assert doc.current_page.id == "0:1"
    assert doc.find_node("2:2").parent.id == "2:1"
    assert doc.find_node("missing") is None
    assert [n.id for n in doc.pages[0].iter_tree()] == ["0:1", "1:1", "1:2", "1:3", "1:4"]


def test_mutator_rejects_unsupported_changes():
    mutator = InMemoryMutator()
    frame = SceneNode(id="f", name="Frame")
    with pytest.raises(MutationError):
        mutator.set_text(frame, "x")
    with pytest.raises(MutationError):
        mutator.set_opacity(frame, 1.5)
    with pytest.raises(MutationError):
        mutator.resize(frame, 0, 10)
    with pytest.raises(MutationError):
        mutator.remove(frame)
    assert mutator.log == []


def test_mutator_group_fill_paints_children():
    shapes = [SceneNode(id=f"s{i}", name="Shape", type=NodeType.RECTANGLE) for i in range(2)]
    group = SceneNode(id="g", name="Group", type=NodeType.GROUP, children=shapes)
    InMemoryMutator().set_fill_color(group, (0.0, 1.0, 0.0))
    assert all(shape.fill_color == (0.0, 1.0, 0.0) for shape in shapes)
    assert group.fill_color is None


def test_mutator_clone_and_insert():
    mutator = InMemoryMutator()
    child = SceneNode(id="c", name="Item", children=[SceneNode(id="t", name="#T", type=NodeType.TEXT)])
    parent = SceneNode(id="p", name="List", children=[child])
    copy = mutator.clone(child)
    assert copy.parent is None
    assert copy.id != child.id and copy.children[0].id != "t"
    mutator.insert_child(parent, 0, copy)
    assert parent.children == [copy, child]
    assert copy.parent is parent


def test_font_cache_requests_each_font_once():
    bold = FontName("Inter", "Bold")
    loader = StaticFontLoader(available=[INTER])
    cache = FontCache(loader)
    cache.ensure(INTER)
    cache.ensure(INTER)
    for _ in range(2):
        with pytest.raises(FontLoadError):
            cache.ensure(bold)
    assert loader.calls == [INTER, bold]
    assert cache.loaded == [INTER]
