"""Binding mini-language: parsing, label matching and inheritance."""

from .inheritance import resolve
from .matcher import LabelIndex, find_worksheet, match, normalize
from .parser import escape_label, parse

__all__ = [
    "LabelIndex",
    "escape_label",
    "find_worksheet",
    "match",
    "normalize",
    "parse",
    "resolve",
]
