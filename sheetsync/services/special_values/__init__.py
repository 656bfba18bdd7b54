"""Chained special values: color, opacity, geometry and text formatting."""

from .applier import ApplyOutcome, apply_chained
from .models import Color, Dimension, LetterSpacing, LineHeight, Position, SpecialValue
from .parser import describe_color, is_special_value, parse_chained

__all__ = [
    "ApplyOutcome",
    "Color",
    "Dimension",
    "LetterSpacing",
    "LineHeight",
    "Position",
    "SpecialValue",
    "apply_chained",
    "describe_color",
    "is_special_value",
    "parse_chained",
]
