from __future__ import annotations

import json
from pathlib import Path

import pandas as pd
import pytest
from openpyxl import Workbook

from sheetsync.core.errors import TableError
from sheetsync_io import detect_orientation, find_data_bounds, frame_to_worksheet, load_table
from sheetsync_io.structure import as_grid, normalize_sheet


def test_find_data_bounds_skips_blank_margin():
    grid = as_grid(pd.DataFrame([["", "", ""], ["", "Title", "Price"], ["", "A", None]]))
    bounds = find_data_bounds(grid)
    assert (bounds.start_row, bounds.end_row, bounds.start_col, bounds.end_col) == (1, 2, 1, 2)
    assert (bounds.row_count, bounds.col_count) == (2, 2)


def test_detect_orientation_columns():
    rows = [["Name", "Price"], ["Apple", "1.5"], ["Pear", "2"]]
    assert detect_orientation(rows) == "columns"


def test_detect_orientation_rows_with_snake_case_labels():
    rows = [["product_name", "Apple", "Pear"], ["unit_price", "1.5", "2"]]
    assert detect_orientation(rows) == "rows"
    labels, values = normalize_sheet(rows, "rows")
    assert labels == ["product_name", "unit_price"]
    assert values["unit_price"] == ["1.5", "2"]


def test_detect_orientation_edge_shapes():
    assert detect_orientation([]) == "columns"
    assert detect_orientation([["Title", "Price"]]) == "columns"
    assert detect_orientation([["Title"], ["A"], ["B"]]) == "rows"


def test_normalize_sheet_drops_blank_and_repeated_labels():
    rows = [["Title", "", "Title", "Price"], ["A", "x", "B", "1"]]
    labels, values = normalize_sheet(rows, "columns")
    assert labels == ["Title", "Price"]
    assert values == {"Title": ["A"], "Price": ["1"]}


def test_frame_to_worksheet_of_empty_frame():
    worksheet = frame_to_worksheet(pd.DataFrame([["", ""]]), "Blank")
    assert worksheet.labels == []
    assert worksheet.row_count == 0


def test_load_csv(tmp_path: Path):
    path = tmp_path / "products.csv"
    path.write_text(",,\n,Title,Price\n,A,10\n,B,\n", encoding="utf-8")
    table = load_table(path)
    assert table.worksheet_names == ["products"]
    assert table.active_worksheet == "products"
    worksheet = table.worksheets[0]
    assert worksheet.labels == ["Title", "Price"]
    assert worksheet.values("Price") == ["10", ""]


def test_load_xlsx_reads_every_sheet_and_active(tmp_path: Path):
    wb = Workbook()
    products = wb.active
    products.title = "Products"
    for row in (["Title", "Price"], ["A", "10"], ["B", "20"]):
        products.append(row)
    people = wb.create_sheet("People")
    for row in (["First Name", "Email"], ["Ada", "ada@example.com"]):
        people.append(row)
    wb.active = 1
    path = tmp_path / "data.xlsx"
    wb.save(path)

    table = load_table(path)

    assert table.worksheet_names == ["Products", "People"]
    assert table.active_worksheet == "People"
    assert table.worksheets[0].values("Title") == ["A", "B"]
    assert table.worksheets[1].values("Email") == ["ada@example.com"]
    assert load_table(path, active="Products").active_worksheet == "Products"


def test_load_json_explicit_worksheets(tmp_path: Path):
    payload = {
        "active_worksheet": "People",
        "worksheets": [
            {"name": "Products", "labels": ["Title"], "rows": {"Title": ["A", None, 3]}},
            {"name": "People", "labels": ["Name"], "rows": {"Name": ["Ada"]}, "orientation": "rows"},
        ],
    }
    path = tmp_path / "table.json"
    path.write_text(json.dumps(payload), encoding="utf-8")
    table = load_table(path)
    assert table.active_worksheet == "People"
    assert table.worksheets[0].values("Title") == ["A", "", "3"]
    assert table.worksheets[1].orientation == "rows"


def test_load_json_grids_and_records(tmp_path: Path):
    payload = {
        "Grid": [["Title", "Price"], ["A", "10"]],
        "Records": [{"Title": "A", "Price": 10}, {"Title": "B"}],
    }
    path = tmp_path / "table.json"
    path.write_text(json.dumps(payload), encoding="utf-8")
    table = load_table(path)
    assert table.active_worksheet == "Grid"
    grid, records = table.worksheets
    assert grid.values("Price") == ["10"]
    assert records.labels == ["Title", "Price"]
    assert records.values("Title") == ["A", "B"]


@pytest.mark.parametrize(
    "name,content",
    [
        ("missing.csv", None),
        ("table.txt", "x"),
        ("broken.json", "{not json"),
        ("list.json", "[1, 2]"),
    ],
)
def test_load_table_errors(tmp_path: Path, name, content):
    path = tmp_path / name
    if content is not None:
        path.write_text(content, encoding="utf-8")
    with pytest.raises(TableError):
        load_table(path)
