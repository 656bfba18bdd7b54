"""Data models shared by the binding engine and the sync pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, Field


class IndexMode(str, Enum):
    SPECIFIC = "specific"
    INCREMENT = "increment"
    INCREMENT_NON_BLANK = "incrementNonBlank"
    RANDOM = "random"
    RANDOM_NON_BLANK = "randomNonBlank"


@dataclass(frozen=True, slots=True)
class IndexSpecifier:
    """Row selection policy; ``value`` is the 1-based row for ``SPECIFIC`` only."""

    mode: IndexMode
    value: Optional[int] = None

    def __post_init__(self) -> None:
        if self.mode is IndexMode.SPECIFIC:
            if self.value is None or self.value < 1:
                raise ValueError("specific index must be a positive 1-based integer")
        elif self.value is not None:
            raise ValueError(f"{self.mode.value} index does not take a value")

    @classmethod
    def specific(cls, n: int) -> "IndexSpecifier":
        return cls(IndexMode.SPECIFIC, n)

    def __str__(self) -> str:
        if self.mode is IndexMode.SPECIFIC:
            return f"specific({self.value})"
        return self.mode.value


INCREMENT = IndexSpecifier(IndexMode.INCREMENT)
INCREMENT_NON_BLANK = IndexSpecifier(IndexMode.INCREMENT_NON_BLANK)
RANDOM = IndexSpecifier(IndexMode.RANDOM)
RANDOM_NON_BLANK = IndexSpecifier(IndexMode.RANDOM_NON_BLANK)
DEFAULT_INDEX = INCREMENT


@dataclass(frozen=True, slots=True)
class Binding:
    """Instruction decoded from a node's display name."""

    has_binding: bool = False
    labels: Tuple[str, ...] = ()
    worksheet: Optional[str] = None
    index: Optional[IndexSpecifier] = None
    is_ignored: bool = False
    force_include: bool = False
    is_repeat_frame: bool = False

    @property
    def primary_label(self) -> Optional[str]:
        return self.labels[0] if self.labels else None

    def with_inherited(
        self,
        worksheet: Optional[str] = None,
        index: Optional[IndexSpecifier] = None,
    ) -> "Binding":
        """Return a copy filling only the fields this binding leaves unset."""

        return replace(
            self,
            worksheet=self.worksheet if self.worksheet is not None else worksheet,
            index=self.index if self.index is not None else index,
        )


EMPTY_BINDING = Binding()

Orientation = Literal["columns", "rows"]


@dataclass(slots=True)
class Worksheet:
    """One named table of labelled value sequences."""

    name: str
    labels: List[str]
    rows: Dict[str, List[str]]
    orientation: Orientation = "columns"

    def __post_init__(self) -> None:
        if len(set(self.labels)) != len(self.labels):
            raise ValueError(f"worksheet {self.name!r} has duplicate labels")
        for label in self.labels:
            self.rows.setdefault(label, [])
        # Short columns are blank-padded to the longest one.
        width = self.row_count
        for label in self.labels:
            values = self.rows[label]
            if len(values) < width:
                values.extend([""] * (width - len(values)))

    @property
    def row_count(self) -> int:
        return max((len(self.rows[label]) for label in self.labels), default=0)

    def values(self, label: str) -> List[str]:
        return self.rows[label]


@dataclass(slots=True)
class Table:
    """Tabular data handed to the sync engine; the engine never mutates it."""

    worksheets: List[Worksheet] = field(default_factory=list)
    active_worksheet: str = ""

    @property
    def worksheet_names(self) -> List[str]:
        return [ws.name for ws in self.worksheets]


class SyncIssue(BaseModel):
    """Error scoped to one node; empty identity marks a run-level error."""

    layer_id: str = ""
    layer_name: str = ""
    message: str


class SyncResult(BaseModel):
    """Aggregated outcome returned to callers once per run."""

    success: bool = True
    layers_processed: int = 0
    layers_updated: int = 0
    errors: List[SyncIssue] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    cancelled: bool = False

    def add_error(self, message: str, *, layer_id: str = "", layer_name: str = "") -> None:
        self.errors.append(SyncIssue(layer_id=layer_id, layer_name=layer_name, message=message))

    def add_warning(self, message: str) -> None:
        self.warnings.append(message)


__all__ = [
    "Binding",
    "DEFAULT_INDEX",
    "EMPTY_BINDING",
    "INCREMENT",
    "INCREMENT_NON_BLANK",
    "IndexMode",
    "IndexSpecifier",
    "RANDOM",
    "RANDOM_NON_BLANK",
    "SyncIssue",
    "SyncResult",
    "Table",
    "Worksheet",
]
