from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Literal, Optional, Tuple

DimensionKind = Literal["size", "width", "height"]
PositionKind = Literal["relative", "absolute"]
Axis = Literal["x", "y"]
HorizontalAlign = Literal["LEFT", "CENTER", "RIGHT", "JUSTIFIED"]
VerticalAlign = Literal["TOP", "CENTER", "BOTTOM"]


@dataclass(frozen=True, slots=True)
class Color:
    r: float
    g: float
    b: float

    def as_tuple(self) -> Tuple[float, float, float]:
        return (self.r, self.g, self.b)


@dataclass(frozen=True, slots=True)
class Dimension:
    kind: DimensionKind
    value: float


@dataclass(frozen=True, slots=True)
class Position:
    kind: PositionKind
    axis: Axis
    value: float


@dataclass(frozen=True, slots=True)
class LineHeight:
    unit: Literal["AUTO", "PIXELS", "PERCENT"]
    value: Optional[float] = None


@dataclass(frozen=True, slots=True)
class LetterSpacing:
    unit: Literal["PIXELS", "PERCENT"]
    value: float


TEXT_FIELDS = ("text_align", "text_align_vertical", "font_size", "line_height", "letter_spacing")


@dataclass(slots=True)
class SpecialValue:
    """Sparse set of property changes decoded from one cell value."""

    visible: Optional[bool] = None
    color: Optional[Color] = None
    opacity: Optional[float] = None
    dimension: Optional[Dimension] = None
    position: Optional[Position] = None
    rotation: Optional[float] = None
    text_align: Optional[HorizontalAlign] = None
    text_align_vertical: Optional[VerticalAlign] = None
    font_size: Optional[float] = None
    line_height: Optional[LineHeight] = None
    letter_spacing: Optional[LetterSpacing] = None

    def populated(self) -> Tuple[str, ...]:
        return tuple(f.name for f in fields(self) if getattr(self, f.name) is not None)

    def is_empty(self) -> bool:
        return not self.populated()

    def has_text_fields(self) -> bool:
        return any(getattr(self, name) is not None for name in TEXT_FIELDS)


__all__ = [
    "Color",
    "Dimension",
    "LetterSpacing",
    "LineHeight",
    "Position",
    "SpecialValue",
    "TEXT_FIELDS",
]
