"""Worksheet structure detection."""

# Module responsibilities:
# - Locate the populated rectangle of a raw sheet grid.
# - Decide whether labels run along the top row ("columns") or down the left column ("rows").
# - Turn a trimmed grid into a label -> values mapping.

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple

import pandas as pd

from sheetsync.core.models import Orientation, Worksheet

from .utils.log import get_logger

logger = get_logger("structure")

_NUMERIC = re.compile(r"^-?\d*\.?\d+%?$")
_CURRENCY = re.compile(r"^\$[\d,]+\.?\d*$")
_SNAKE_CASE = re.compile(r"^[a-z][a-z0-9]*(_[a-z0-9]+)+$")
_CAMEL_CASE = re.compile(r"^[a-z]+[A-Z][a-zA-Z0-9]*$")
_PROPER_NAME = re.compile(r"^[A-Z][a-z]+(\s+[A-Z&][a-z]*)*$")


@dataclass(frozen=True, slots=True)
class DataBounds:
    start_row: int
    end_row: int
    start_col: int
    end_col: int

    @property
    def row_count(self) -> int:
        return max(0, self.end_row - self.start_row + 1)

    @property
    def col_count(self) -> int:
        return max(0, self.end_col - self.start_col + 1)


EMPTY_BOUNDS = DataBounds(0, -1, 0, -1)


def as_grid(frame: pd.DataFrame) -> pd.DataFrame:
    """Coerce a raw frame to stripped strings with blanks for missing cells."""

    return frame.astype(object).where(frame.notna(), "").astype(str).apply(lambda col: col.str.strip())


def find_data_bounds(grid: pd.DataFrame) -> DataBounds:
    if grid.empty:
        return EMPTY_BOUNDS
    filled = grid != ""
    rows = [i for i, has in enumerate(filled.any(axis=1).tolist()) if has]
    cols = [i for i, has in enumerate(filled.any(axis=0).tolist()) if has]
    if not rows or not cols:
        return EMPTY_BOUNDS
    return DataBounds(rows[0], rows[-1], cols[0], cols[-1])


def trim_to_bounds(grid: pd.DataFrame, bounds: DataBounds) -> List[List[str]]:
    if bounds.row_count == 0 or bounds.col_count == 0:
        return []
    block = grid.iloc[bounds.start_row : bounds.end_row + 1, bounds.start_col : bounds.end_col + 1]
    return block.values.tolist()


def _is_numeric(value: str) -> bool:
    return bool(_NUMERIC.match(value) or _CURRENCY.match(value))


def _label_score(values: Sequence[str]) -> float:
    present = [v for v in values if v]
    if not present:
        return 0.0
    score = 0.0
    if len(set(present)) == len(present):
        score += 2
    numeric = sum(1 for v in present if _is_numeric(v))
    if len(present) - numeric > numeric:
        score += 1
    if sum(1 for v in present if len(v) <= 30) / len(present) >= 0.7:
        score += 1
    if sum(1 for v in present if _SNAKE_CASE.match(v) or _CAMEL_CASE.match(v)) / len(present) >= 0.5:
        score += 5
    # Proper names look like data rather than labels.
    if sum(1 for v in present if _PROPER_NAME.match(v)) / len(present) >= 0.3:
        score -= 2
    return max(0.0, score)


def _consistent(values: Sequence[str]) -> bool:
    present = [v for v in values if v]
    if len(present) < 2:
        return True
    ratio = sum(1 for v in present if _is_numeric(v)) / len(present)
    return ratio > 0.8 or ratio < 0.2


def _pattern_score(rows: List[List[str]], orientation: Orientation) -> float:
    if len(rows) < 2 or len(rows[0]) < 2:
        return 0.0
    if orientation == "columns":
        series = [[row[c] for row in rows[1:]] for c in range(len(rows[0]))]
    else:
        series = [row[1:] for row in rows[1:]]
    # A single value says nothing about type consistency.
    series = [s for s in series if len(s) >= 2]
    if not series:
        return 0.0
    return 3 * sum(1 for s in series if _consistent(s)) / len(series)


def detect_orientation(rows: List[List[str]]) -> Orientation:
    """Score the first row and the first column as label candidates."""

    if not rows or not rows[0] or len(rows) == 1:
        return "columns"
    if len(rows[0]) == 1:
        return "rows"

    first_row = rows[0]
    first_col = [row[0] for row in rows]
    columns_score = _label_score(first_row) + _pattern_score(rows, "columns")
    rows_score = _label_score(first_col) + _pattern_score(rows, "rows")

    row_data, col_data = first_row[1:], first_col[1:]
    if row_data and sum(1 for v in row_data if _is_numeric(v)) / len(row_data) > 0.5:
        rows_score += 3
    if col_data and sum(1 for v in col_data if _is_numeric(v)) / len(col_data) > 0.5:
        columns_score += 3
    return "rows" if rows_score > columns_score else "columns"


def normalize_sheet(rows: List[List[str]], orientation: Orientation) -> Tuple[List[str], Dict[str, List[str]]]:
    """Return ``(labels, label -> values)``; blank labels and repeats are dropped."""

    if orientation == "columns":
        pairs = [(rows[0][c], [row[c] for row in rows[1:]]) for c in range(len(rows[0]))] if rows else []
    else:
        pairs = [(row[0], list(row[1:])) for row in rows]

    labels: List[str] = []
    values: Dict[str, List[str]] = {}
    for label, column in pairs:
        if not label:
            continue
        if label in values:
            logger.warning("duplicate label %r ignored", label)
            continue
        labels.append(label)
        values[label] = column
    return labels, values


def frame_to_worksheet(frame: pd.DataFrame, name: str) -> Worksheet:
    """Build a :class:`Worksheet` from a header-less raw frame."""

    grid = as_grid(frame)
    rows = trim_to_bounds(grid, find_data_bounds(grid))
    if not rows:
        return Worksheet(name=name, labels=[], rows={})
    orientation = detect_orientation(rows)
    labels, values = normalize_sheet(rows, orientation)
    logger.info("worksheet %s: %d labels, orientation=%s", name, len(labels), orientation)
    return Worksheet(name=name, labels=labels, rows=values, orientation=orientation)


__all__ = [
    "DataBounds",
    "as_grid",
    "detect_orientation",
    "find_data_bounds",
    "frame_to_worksheet",
    "normalize_sheet",
    "trim_to_bounds",
]
