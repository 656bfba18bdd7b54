"""Chained special-value grammar.

A cell value such as ``/50%, #F00, 30º`` is split into tokens and each token
is tried against :data:`RECOGNIZERS` in order; the first recognizer that
accepts a token wins and later tokens of the same kind overwrite earlier
ones. Tokens nobody recognizes are ignored.
"""

from __future__ import annotations

import re
from typing import Any, Callable, Dict, List, Optional, Tuple

from .models import Color, Dimension, LetterSpacing, LineHeight, Position, SpecialValue

PREFIX = "/"

_SPLIT = re.compile(r"[,\s]+")
_NUMBER = r"\d+(?:\.\d+)?"
_SIGNED = r"-?\d+(?:\.\d+)?"

_HEX = re.compile(r"^#([0-9a-f]+)$", re.IGNORECASE)
_OPACITY = re.compile(rf"^({_NUMBER})\s*%$")
_DIMENSION = re.compile(rf"^({_NUMBER})\s*([swh])$", re.IGNORECASE)
_POSITION = re.compile(rf"^({_SIGNED})\s*(xx|yy|x|y)$", re.IGNORECASE)
_ROTATION = re.compile(rf"^({_SIGNED})\s*[º°]$")
_TEXT_ALIGN = re.compile(r"^text-align:\s*(left|center|right|justified)$", re.IGNORECASE)
_TEXT_ALIGN_VERTICAL = re.compile(r"^text-align-vertical:\s*(top|center|bottom)$", re.IGNORECASE)
_FONT_SIZE = re.compile(rf"^font-size:\s*({_NUMBER})\s*(?:px)?$", re.IGNORECASE)
_LINE_HEIGHT = re.compile(rf"^line-height:\s*(?:(auto)|({_NUMBER})\s*(px|%)?)$", re.IGNORECASE)
_LETTER_SPACING = re.compile(rf"^letter-spacing:\s*({_SIGNED})\s*(px|%)?$", re.IGNORECASE)

_DIMENSION_KINDS = {"s": "size", "w": "width", "h": "height"}

Fields = Dict[str, Any]
Recognizer = Callable[[str], Optional[Fields]]


def strip_prefix(value: str) -> str:
    trimmed = value.strip()
    return trimmed[len(PREFIX):] if trimmed.startswith(PREFIX) else trimmed


def has_prefix(value: str) -> bool:
    return value.strip().startswith(PREFIX)


def tokenize(value: str) -> List[str]:
    """Split on comma/whitespace runs, re-joining ``key:`` with its value."""

    parts = [p for p in _SPLIT.split(value.strip()) if p]
    tokens: List[str] = []
    i = 0
    while i < len(parts):
        part = parts[i]
        if part.endswith(":") and i + 1 < len(parts):
            tokens.append(part + parts[i + 1])
            i += 2
            continue
        tokens.append(part)
        i += 1
    return tokens


# ---------------------------------------------------------------------------
# Recognizers
# ---------------------------------------------------------------------------


def parse_visibility(token: str) -> Optional[Fields]:
    word = token.strip().lower()
    if word == "show":
        return {"visible": True}
    if word == "hide":
        return {"visible": False}
    return None


def parse_hex_color(token: str) -> Optional[Color]:
    """``#A``/``#AB`` are grays, ``#ABC`` is shorthand, ``#AABBCC`` is full."""

    m = _HEX.match(token.strip())
    if not m:
        return None
    digits = m.group(1)
    if len(digits) == 1:
        r = g = b = int(digits * 2, 16)
    elif len(digits) == 2:
        r = g = b = int(digits, 16)
    elif len(digits) == 3:
        r, g, b = (int(ch * 2, 16) for ch in digits)
    elif len(digits) == 6:
        r, g, b = (int(digits[i : i + 2], 16) for i in (0, 2, 4))
    else:
        return None
    return Color(r / 255, g / 255, b / 255)


def _color(token: str) -> Optional[Fields]:
    color = parse_hex_color(token)
    return {"color": color} if color is not None else None


def _opacity(token: str) -> Optional[Fields]:
    m = _OPACITY.match(token)
    if not m:
        return None
    return {"opacity": min(100.0, float(m.group(1))) / 100}


def _dimension(token: str) -> Optional[Fields]:
    m = _DIMENSION.match(token)
    if not m:
        return None
    return {"dimension": Dimension(_DIMENSION_KINDS[m.group(2).lower()], float(m.group(1)))}


def _position(token: str) -> Optional[Fields]:
    m = _POSITION.match(token)
    if not m:
        return None
    suffix = m.group(2).lower()
    kind = "absolute" if len(suffix) == 2 else "relative"
    return {"position": Position(kind, suffix[0], float(m.group(1)))}


def _rotation(token: str) -> Optional[Fields]:
    m = _ROTATION.match(token)
    return {"rotation": float(m.group(1))} if m else None


def _text_align(token: str) -> Optional[Fields]:
    m = _TEXT_ALIGN.match(token)
    return {"text_align": m.group(1).upper()} if m else None


def _text_align_vertical(token: str) -> Optional[Fields]:
    m = _TEXT_ALIGN_VERTICAL.match(token)
    return {"text_align_vertical": m.group(1).upper()} if m else None


def _font_size(token: str) -> Optional[Fields]:
    m = _FONT_SIZE.match(token)
    return {"font_size": float(m.group(1))} if m else None


def _line_height(token: str) -> Optional[Fields]:
    m = _LINE_HEIGHT.match(token)
    if not m:
        return None
    if m.group(1):
        return {"line_height": LineHeight("AUTO")}
    unit = "PERCENT" if m.group(3) == "%" else "PIXELS"
    return {"line_height": LineHeight(unit, float(m.group(2)))}


def _letter_spacing(token: str) -> Optional[Fields]:
    m = _LETTER_SPACING.match(token)
    if not m:
        return None
    unit = "PERCENT" if m.group(2) == "%" else "PIXELS"
    return {"letter_spacing": LetterSpacing(unit, float(m.group(1)))}


RECOGNIZERS: Tuple[Tuple[str, Recognizer], ...] = (
    ("visibility", parse_visibility),
    ("color", _color),
    ("opacity", _opacity),
    ("dimension", _dimension),
    ("position", _position),
    ("rotation", _rotation),
    ("text-align-vertical", _text_align_vertical),
    ("text-align", _text_align),
    ("font-size", _font_size),
    ("line-height", _line_height),
    ("letter-spacing", _letter_spacing),
)


def recognize(token: str) -> Optional[Fields]:
    for _, recognizer in RECOGNIZERS:
        found = recognizer(token)
        if found is not None:
            return found
    return None


def parse_chained(value: str) -> SpecialValue:
    """Decode ``value`` (leading ``/`` optional) into a :class:`SpecialValue`.

    >>> parse_chained("/hide, 50%").visible
    False
    """

    result = SpecialValue()
    if not value:
        return result
    for token in tokenize(strip_prefix(value)):
        found = recognize(token)
        if found is None:
            continue
        for name, field_value in found.items():
            setattr(result, name, field_value)
    return result


def is_special_value(value: str, *, strip: bool = True) -> bool:
    """True when at least one token of ``value`` is a recognized special value."""

    if not value:
        return False
    text = strip_prefix(value) if strip else value.strip()
    return any(recognize(token) is not None for token in tokenize(text))


def describe_color(color: Color) -> str:
    return f"RGB({round(color.r * 255)}, {round(color.g * 255)}, {round(color.b * 255)})"


__all__ = [
    "PREFIX",
    "RECOGNIZERS",
    "describe_color",
    "has_prefix",
    "is_special_value",
    "parse_chained",
    "parse_hex_color",
    "parse_visibility",
    "recognize",
    "strip_prefix",
    "tokenize",
]
