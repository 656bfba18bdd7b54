from __future__ import annotations

import os
import sys
import tempfile
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Keep test logs out of the user's home directory.
os.environ.setdefault("SHEETSYNC_LOG_DIR", tempfile.mkdtemp(prefix="sheetsync-logs-"))

from sheetsync.core.models import Table, Worksheet  # noqa: E402
from sheetsync.scene.nodes import Document, FontName, NodeType, SceneNode, page  # noqa: E402

INTER = FontName("Inter", "Regular")


def _text(id: str, name: str, characters: str = "", **kwargs) -> SceneNode:
    return SceneNode(id=id, name=name, type=NodeType.TEXT, characters=characters, fonts=[INTER], **kwargs)


def _frame(id: str, name: str, children=None, **kwargs) -> SceneNode:
    return SceneNode(id=id, name=name, type=NodeType.FRAME, children=list(children or []), **kwargs)


@pytest.fixture
def products_table() -> Table:
    products = Worksheet(
        name="Products",
        labels=["Title", "Price", "Colour", "Photo"],
        rows={
            "Title": ["A", "B", "C"],
            "Price": ["10", "", "30"],
            "Colour": ["#f00", "#0f0", "#00f"],
            "Photo": ["", "", ""],
        },
    )
    people = Worksheet(
        name="People",
        labels=["First Name", "Email"],
        rows={"First Name": ["Ada", "Grace"], "Email": ["ada@example.com", "grace@example.com"]},
    )
    return Table(worksheets=[products, people], active_worksheet="Products")


@pytest.fixture
def card_document() -> Document:
    """One page holding a card frame with three bound text layers."""

    card = _frame(
        "1:1",
        "Card // Products",
        [
            _text("1:2", "#Title.2", "old"),
            _text("1:3", "#Price"),
            _text("1:4", "Caption"),
        ],
    )
    return Document(pages=[page("0:1", "Page 1", [card])], current_page_id="0:1")
