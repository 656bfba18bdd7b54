from __future__ import annotations

import pytest

from sheetsync.core.errors import TableError
from sheetsync.core.models import Table, Worksheet
from sheetsync.core.pipeline import SyncPipeline
from sheetsync.core.profiles import SyncSettings
from sheetsync.scene import Document, FontName, InMemoryMutator, NodeType, SceneNode, StaticFontLoader, page

INTER = FontName("Inter", "Regular")


class StubFetcher:
    def __init__(self) -> None:
        self.urls = []

    def fetch(self, url: str) -> bytes:
        self.urls.append(url)
        return b"image-bytes"


class ExplodingMutator(InMemoryMutator):
    """Raises a non-library exception for one node id."""

    def __init__(self, bad_id: str) -> None:
        super().__init__()
        self.bad_id = bad_id

    def set_text(self, node, text):
        if node.id == self.bad_id:
            raise RuntimeError("host crashed")
        super().set_text(node, text)


class CrashingCloneMutator(InMemoryMutator):
    def clone(self, node):
        if any(op == "clone" for op, _ in self.log):
            raise RuntimeError("host crashed mid-clone")
        return super().clone(node)


def _build_pipeline(**kwargs) -> SyncPipeline:
    kwargs.setdefault("font_loader", StaticFontLoader())
    kwargs.setdefault("image_fetcher", StubFetcher())
    settings = kwargs.pop("settings", SyncSettings(random_seed=1))
    return SyncPipeline(settings, **kwargs)


def _text(id: str, name: str, characters: str = "") -> SceneNode:
    return SceneNode(id=id, name=name, type=NodeType.TEXT, characters=characters, fonts=[INTER])


def test_run_resolves_specific_index(products_table, card_document):
    result = _build_pipeline().run(card_document, products_table)
    title = card_document.find_node("1:2")
    price = card_document.find_node("1:3")
    caption = card_document.find_node("1:4")
    assert title.characters == "B"
    assert price.characters == "10"
    assert caption.characters == ""
    assert result.success is True
    assert result.layers_processed == 2
    assert result.layers_updated == 2
    assert result.errors == []


def test_run_accepts_table_factory(products_table, card_document):
    result = _build_pipeline().run(card_document, lambda: products_table)
    assert result.success is True


def test_run_progress_phases(products_table, card_document):
    seen = []
    _build_pipeline().run(card_document, products_table, progress_cb=lambda msg, pct: seen.append(pct))
    assert seen[:3] == [5, 15, 30]
    assert seen[-1] == 100
    assert seen == sorted(seen)


def test_repeat_container_expands_then_binds(products_table):
    item = SceneNode(id="2:2", name="Item", children=[_text("2:3", "#Title")])
    container = SceneNode(id="2:1", name="List // Products @#", layout_mode="VERTICAL", children=[item])
    doc = Document(pages=[page("0:1", "Page 1", [container])], current_page_id="0:1")

    result = _build_pipeline().run(doc, products_table)

    assert len(container.children) == 3
    assert [child.children[0].characters for child in container.children] == ["A", "B", "C"]
    assert result.layers_updated == 3
    assert result.success is True


def test_host_error_during_expansion_rolls_back_and_reports(products_table):
    item = SceneNode(id="2:2", name="Item", children=[_text("2:3", "#Title")])
    container = SceneNode(id="2:1", name="List // Products @#", layout_mode="VERTICAL", children=[item])
    doc = Document(pages=[page("0:1", "Page 1", [container])], current_page_id="0:1")

    result = _build_pipeline(mutator=CrashingCloneMutator()).run(doc, products_table)

    assert container.children == [item]
    assert any("host crashed mid-clone" in warning for warning in result.warnings)
    assert item.children[0].characters == "A"
    assert result.success is True


def test_per_node_errors_do_not_stop_the_run(products_table):
    nodes = [
        _text("1:1", "#Missing"),
        _text("1:2", "#Title // Nowhere"),
        _text("1:3", "#Title"),
    ]
    doc = Document(pages=[page("0:1", "Page 1", nodes)], current_page_id="0:1")

    result = _build_pipeline().run(doc, products_table)

    assert result.layers_processed == 3
    assert result.layers_updated == 1
    assert [issue.layer_id for issue in result.errors] == ["1:1", "1:2"]
    assert "Label not found" in result.errors[0].message
    assert "Worksheet not found" in result.errors[1].message
    assert doc.find_node("1:3").characters == "A"
    # Some layers updated, so the run still counts as a success.
    assert result.success is True


def test_unexpected_exception_is_recorded_per_node(products_table):
    nodes = [_text("1:1", "#Title"), _text("1:2", "#Title")]
    doc = Document(pages=[page("0:1", "Page 1", nodes)], current_page_id="0:1")

    result = _build_pipeline(mutator=ExplodingMutator("1:1")).run(doc, products_table)

    assert result.errors[0].layer_id == "1:1"
    assert result.errors[0].message == "host crashed"
    assert doc.find_node("1:2").characters == "B"


def test_errors_without_updates_fail_the_run(products_table):
    doc = Document(pages=[page("0:1", "Page 1", [_text("1:1", "#Missing")])], current_page_id="0:1")
    result = _build_pipeline().run(doc, products_table)
    assert result.success is False
    assert len(result.errors) == 1


def test_setup_failure_aborts_with_single_error(card_document):
    def broken():
        raise TableError("sheet unreachable")

    result = _build_pipeline().run(card_document, broken)
    assert result.success is False
    assert len(result.errors) == 1
    assert result.errors[0].layer_id == ""
    assert result.layers_processed == 0

    empty = _build_pipeline().run(card_document, Table())
    assert empty.success is False


def test_cancellation_between_nodes(products_table):
    nodes = [_text(f"1:{i}", "#Title") for i in range(5)]
    doc = Document(pages=[page("0:1", "Page 1", nodes)], current_page_id="0:1")

    def should_cancel() -> bool:
        return sum(1 for node in nodes if node.characters) >= 2

    result = _build_pipeline().run(doc, products_table, should_cancel=should_cancel)

    assert result.cancelled is True
    assert result.success is False
    assert result.layers_processed == 2
    assert doc.find_node("1:2").characters == ""


def test_no_bound_layers_warns(products_table):
    doc = Document(pages=[page("0:1", "Page 1", [SceneNode(id="1:1", name="Plain")])], current_page_id="0:1")
    result = _build_pipeline().run(doc, products_table)
    assert result.success is True
    assert result.warnings == ["No layers with bindings found in the selected scope"]


def test_value_classification(products_table):
    colour = SceneNode(id="1:1", name="#Colour.3", type=NodeType.RECTANGLE)
    prefixed = _text("1:2", "#Style", "keep")
    photo = SceneNode(id="1:3", name="#Photo", type=NodeType.RECTANGLE)
    icon_component = SceneNode(id="c:1", name="Star", type=NodeType.COMPONENT)
    icon = SceneNode(id="1:4", name="#Icon", type=NodeType.INSTANCE)
    table = Table(
        worksheets=[
            products_table.worksheets[0],
            Worksheet(
                name="Extras",
                labels=["Style", "Photo", "Icon"],
                rows={
                    "Style": ["/font-size:24, 50%"],
                    "Photo": ["https://example.com/p.png"],
                    "Icon": ["star"],
                },
            ),
        ],
        active_worksheet="Products",
    )
    container = SceneNode(id="1:0", name="Extras // Extras", children=[prefixed, photo, icon])
    doc = Document(
        pages=[page("0:1", "Page 1", [colour, container, icon_component])],
        current_page_id="0:1",
    )
    fetcher = StubFetcher()

    result = _build_pipeline(image_fetcher=fetcher).run(doc, table)

    assert colour.fill_color == (0.0, 0.0, 1.0)
    assert prefixed.characters == "keep"
    assert prefixed.text_props["font_size"] == 24.0
    assert prefixed.opacity == pytest.approx(0.5)
    assert fetcher.urls == ["https://example.com/p.png"]
    assert photo.image_hash is not None
    assert icon.main_component == "c:1"
    assert result.layers_updated == 4


def test_extra_labels_apply_at_same_row(products_table):
    node = _text("1:1", "#Title #Colour.3")
    doc = Document(pages=[page("0:1", "Page 1", [node])], current_page_id="0:1")
    result = _build_pipeline().run(doc, products_table)
    assert node.characters == "C"
    assert node.fill_color == (0.0, 0.0, 1.0)
    assert result.layers_updated == 1


def test_font_failure_on_text_is_node_error(products_table, card_document):
    pipeline = _build_pipeline(font_loader=StaticFontLoader(available=[]))
    result = pipeline.run(card_document, products_table)
    assert len(result.errors) == 2
    assert all("fonts" in issue.message for issue in result.errors)
    assert result.success is False


def test_sync_targeted(products_table, card_document):
    pipeline = _build_pipeline()
    result = pipeline.sync_targeted(card_document, products_table, ["1:3", "9:9", "0:1"])
    assert card_document.find_node("1:3").characters == "10"
    assert card_document.find_node("1:2").characters == "old"
    assert result.layers_processed == 1
    assert len(result.warnings) == 2


def test_sync_targeted_without_ids(products_table, card_document):
    pipeline = _build_pipeline()
    assert pipeline.sync_targeted(card_document, products_table, []).warnings == [
        "No layer IDs provided for targeted sync"
    ]
    missing = pipeline.sync_targeted(card_document, products_table, ["9:9"])
    assert missing.warnings[-1] == "No valid layers found from the given IDs"
    assert missing.layers_processed == 0


def test_random_seed_makes_runs_reproducible(products_table):
    def run_once():
        nodes = [_text(f"1:{i}", "#Title.x") for i in range(3)]
        doc = Document(pages=[page("0:1", "Page 1", nodes)], current_page_id="0:1")
        _build_pipeline(settings=SyncSettings(random_seed=9)).run(doc, products_table)
        return [node.characters for node in nodes]

    first = run_once()
    assert first == run_once()
    assert sorted(first) == ["A", "B", "C"]
