"""Scene document JSON I/O."""

# Module responsibilities:
# - Load a Document from a JSON description (pages -> nested nodes).
# - Save a Document back to JSON after a sync run.

from __future__ import annotations

import itertools
import json
from dataclasses import asdict, is_dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Union

from sheetsync.core.errors import SetupError
from sheetsync.scene.nodes import Document, FontName, NodeType, SceneNode

from .utils.log import get_logger

logger = get_logger("document_io")

PathLike = Union[str, Path]

_SCALAR_FIELDS = ("visible", "opacity", "x", "y", "width", "height", "rotation", "layout_mode", "characters", "image_hash")


def _node_from_dict(data: Dict[str, Any], next_id: Callable[[], str]) -> SceneNode:
    try:
        node_type = NodeType(str(data.get("type", "FRAME")).upper())
    except ValueError as exc:
        raise SetupError(f"unknown node type: {data.get('type')}") from exc
    node = SceneNode(
        id=str(data.get("id") or next_id()),
        name=str(data.get("name", "")),
        type=node_type,
        children=[_node_from_dict(child, next_id) for child in data.get("children", [])],
        fonts=[FontName(**font) for font in data.get("fonts", [])],
        text_props=dict(data.get("text_props", {})),
        main_component=data.get("main_component"),
    )
    for name in _SCALAR_FIELDS:
        if name in data:
            setattr(node, name, data[name])
    if data.get("fill_color") is not None:
        node.fill_color = tuple(float(c) for c in data["fill_color"])
    return node


def document_from_dict(data: Dict[str, Any]) -> Document:
    counter = itertools.count(1)

    def next_id() -> str:
        return f"auto:{next(counter)}"

    pages = []
    for raw in data.get("pages", []):
        pg = _node_from_dict({**raw, "type": "PAGE"}, next_id)
        pages.append(pg)
    return Document(
        pages=pages,
        current_page_id=data.get("current_page"),
        selection=[str(node_id) for node_id in data.get("selection", [])],
    )


def _plain(value: Any) -> Any:
    return asdict(value) if is_dataclass(value) else value


def _node_to_dict(node: SceneNode) -> Dict[str, Any]:
    data: Dict[str, Any] = {"id": node.id, "name": node.name, "type": node.type.value}
    for name in _SCALAR_FIELDS:
        data[name] = getattr(node, name)
    if node.fill_color is not None:
        data["fill_color"] = list(node.fill_color)
    if node.fonts:
        data["fonts"] = [asdict(font) for font in node.fonts]
    if node.text_props:
        data["text_props"] = {key: _plain(value) for key, value in node.text_props.items()}
    if node.main_component is not None:
        data["main_component"] = node.main_component
    if node.children:
        data["children"] = [_node_to_dict(child) for child in node.children]
    return data


def document_to_dict(document: Document) -> Dict[str, Any]:
    return {
        "current_page": document.current_page_id,
        "selection": list(document.selection),
        "pages": [
            {"id": pg.id, "name": pg.name, "children": [_node_to_dict(child) for child in pg.children]}
            for pg in document.pages
        ],
    }


def load_document(path: PathLike) -> Document:
    source = Path(path)
    if not source.exists():
        raise SetupError(f"document not found: {source}")
    try:
        with source.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except ValueError as exc:
        raise SetupError(f"{source.name}: invalid JSON ({exc})") from exc
    document = document_from_dict(data)
    logger.info("Loaded document %s with %d pages", source, len(document.pages))
    return document


def save_document(document: Document, path: PathLike) -> Path:
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    with target.open("w", encoding="utf-8") as f:
        json.dump(document_to_dict(document), f, ensure_ascii=False, indent=2)
    logger.info("Saved document to %s", target)
    return target


__all__ = ["document_from_dict", "document_to_dict", "load_document", "save_document"]
