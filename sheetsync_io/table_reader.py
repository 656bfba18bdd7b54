"""Table input helpers."""

# Module responsibilities:
# - Read .xlsx/.csv/.json files with pandas into the Table shape the sync engine consumes.
# - Translate reader failures into TableError so callers see one setup error type.

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import pandas as pd
from openpyxl import load_workbook

from sheetsync.core.errors import TableError
from sheetsync.core.models import Table, Worksheet

from .structure import frame_to_worksheet
from .utils.log import get_logger

logger = get_logger("table_reader")

PathLike = Union[str, Path]

EXCEL_SUFFIXES = {".xlsx", ".xlsm"}


def _active_sheet_name(path: Path) -> str:
    workbook = load_workbook(path, read_only=True)
    try:
        return workbook.active.title if workbook.active is not None else ""
    finally:
        workbook.close()


def _read_excel(path: Path) -> Table:
    frames: Dict[str, pd.DataFrame] = pd.read_excel(path, sheet_name=None, header=None, dtype=str)
    worksheets = [frame_to_worksheet(frame, str(name)) for name, frame in frames.items()]
    return Table(worksheets=worksheets, active_worksheet=_active_sheet_name(path))


def _read_csv(path: Path) -> Table:
    frame = pd.read_csv(path, header=None, dtype=str, keep_default_na=False)
    worksheet = frame_to_worksheet(frame, path.stem)
    return Table(worksheets=[worksheet], active_worksheet=worksheet.name)


def _worksheet_from_json(name: str, payload: Any) -> Worksheet:
    if isinstance(payload, list):
        # A raw grid (list of rows) or a list of records.
        if payload and all(isinstance(item, dict) for item in payload):
            frame = pd.DataFrame(payload).fillna("").astype(str)
            grid = pd.DataFrame([list(frame.columns)] + frame.values.tolist())
        else:
            grid = pd.DataFrame(payload)
        return frame_to_worksheet(grid, name)
    if isinstance(payload, dict):
        labels: List[str] = [str(k) for k in payload.get("labels", [])]
        rows = {str(k): ["" if v is None else str(v) for v in vals] for k, vals in (payload.get("rows") or {}).items()}
        return Worksheet(
            name=str(payload.get("name", name)),
            labels=labels or list(rows),
            rows=rows,
            orientation=payload.get("orientation", "columns"),
        )
    raise TableError(f"worksheet {name!r} must be a list of rows or a mapping")


def _read_json(path: Path) -> Table:
    with path.open("r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise TableError(f"{path.name}: top level must be an object")
    if "worksheets" in data:
        worksheets = [_worksheet_from_json(str(ws.get("name", "")), ws) for ws in data["worksheets"]]
        active = str(data.get("active_worksheet", ""))
    else:
        worksheets = [_worksheet_from_json(str(name), payload) for name, payload in data.items()]
        active = ""
    return Table(worksheets=worksheets, active_worksheet=active or (worksheets[0].name if worksheets else ""))


def load_table(path: PathLike, active: Optional[str] = None) -> Table:
    """Load a :class:`Table` from a workbook, CSV or JSON file.

    Args:
        path: Source file path.
        active: Optional override for the active worksheet name.

    Raises:
        TableError: When the file is missing or cannot be decoded.
    """

    source = Path(path)
    if not source.exists():
        raise TableError(f"table source not found: {source}")

    suffix = source.suffix.lower()
    logger.info("Reading table %s", source)
    try:
        if suffix in EXCEL_SUFFIXES:
            table = _read_excel(source)
        elif suffix == ".csv":
            table = _read_csv(source)
        elif suffix == ".json":
            table = _read_json(source)
        else:
            raise TableError(f"unsupported table format: {suffix or source.name}")
    except TableError:
        raise
    except (ValueError, KeyError, OSError, pd.errors.ParserError) as exc:
        logger.error("Failed to read table %s: %s", source, exc)
        raise TableError(f"{source.name}: {exc}") from exc

    if active:
        table.active_worksheet = active
    logger.info("Table loaded: %s", ", ".join(table.worksheet_names) or "<empty>")
    return table


__all__ = ["load_table"]
