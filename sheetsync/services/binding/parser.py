"""Layer name parsing.

Decodes the binding mini-language embedded in node display names:

- ``#Label``          bind to the column/row ``Label`` (several allowed, scan order kept)
- ``// Worksheet``    read from a specific worksheet
- ``.5 .n .i .x .r``  trailing index suffix (specific, increment, increment
  non-blank, random, random non-blank)
- ``-Name``           ignore this node and its subtree
- ``+Name``           force-include a main component
- ``@#``              repeat marker for layout containers

A backslash makes the following character literal, so ``#Price\\.net`` binds
to the label ``Price.net`` and ``\\#`` / ``\\/`` never act as markers.
"""

from __future__ import annotations

from typing import Callable, List, NamedTuple, Optional, Sequence, Tuple

from sheetsync.core.models import (
    EMPTY_BINDING,
    INCREMENT,
    INCREMENT_NON_BLANK,
    RANDOM,
    RANDOM_NON_BLANK,
    Binding,
    IndexSpecifier,
)

ESCAPE = "\\"
LABEL_MARKER = "#"
INDEX_MARKER = "."
WORKSHEET_MARKER = "/"
IGNORE_PREFIX = "-"
FORCE_PREFIX = "+"
REPEAT_MARKER = "@"
_SPECIAL_CHARS = frozenset({ESCAPE, LABEL_MARKER, INDEX_MARKER, WORKSHEET_MARKER})


class _Char(NamedTuple):
    value: str
    escaped: bool

    def is_(self, marker: str) -> bool:
        return not self.escaped and self.value == marker


def _scan(text: str) -> List[_Char]:
    chars: List[_Char] = []
    i = 0
    while i < len(text):
        ch = text[i]
        if ch == ESCAPE and i + 1 < len(text):
            chars.append(_Char(text[i + 1], True))
            i += 2
            continue
        chars.append(_Char(ch, False))
        i += 1
    return chars


def _in_name_class(ch: _Char) -> bool:
    if ch.escaped:
        return True
    return ch.value.isalnum() or ch.value in " _-"


def _read_name(chars: Sequence[_Char], start: int) -> Tuple[str, int]:
    """Read a label/worksheet name starting at ``start``; return (text, end)."""

    end = start
    while end < len(chars) and _in_name_class(chars[end]):
        end += 1
    return "".join(ch.value for ch in chars[start:end]).strip(), end


# ---------------------------------------------------------------------------
# Index suffix recognizers (ordered: first match wins)
# ---------------------------------------------------------------------------

_SuffixMatch = Optional[Tuple[IndexSpecifier, int]]


def _specific_suffix(chars: Sequence[_Char]) -> _SuffixMatch:
    pos = len(chars)
    while pos > 0 and not chars[pos - 1].escaped and chars[pos - 1].value.isdigit():
        pos -= 1
    digits = len(chars) - pos
    if digits == 0 or pos == 0 or not chars[pos - 1].is_(INDEX_MARKER):
        return None
    number = int("".join(ch.value for ch in chars[pos:]))
    # ".0" addresses the first row, like any other out-of-range value.
    return IndexSpecifier.specific(max(1, number)), digits + 1


def _letter_suffix(letter: str, spec: IndexSpecifier) -> Callable[[Sequence[_Char]], _SuffixMatch]:
    def _match(chars: Sequence[_Char]) -> _SuffixMatch:
        if len(chars) < 2:
            return None
        last, dot = chars[-1], chars[-2]
        if last.escaped or last.value.lower() != letter or not dot.is_(INDEX_MARKER):
            return None
        return spec, 2

    return _match


INDEX_SUFFIXES: Tuple[Callable[[Sequence[_Char]], _SuffixMatch], ...] = (
    _specific_suffix,
    _letter_suffix("n", INCREMENT),
    _letter_suffix("i", INCREMENT_NON_BLANK),
    _letter_suffix("x", RANDOM),
    _letter_suffix("r", RANDOM_NON_BLANK),
)


def _parse_index(chars: List[_Char]) -> Tuple[Optional[IndexSpecifier], List[_Char]]:
    for recognizer in INDEX_SUFFIXES:
        matched = recognizer(chars)
        if matched is not None:
            spec, length = matched
            return spec, chars[: len(chars) - length]
    return None, chars


def _parse_worksheet(chars: Sequence[_Char]) -> Optional[str]:
    for i in range(len(chars) - 1):
        if chars[i].is_(WORKSHEET_MARKER) and chars[i + 1].is_(WORKSHEET_MARKER):
            name, _ = _read_name(chars, i + 2)
            return name or None
    return None


def _parse_labels(chars: Sequence[_Char]) -> Tuple[str, ...]:
    labels: List[str] = []
    i = 0
    while i < len(chars):
        if chars[i].is_(LABEL_MARKER):
            label, end = _read_name(chars, i + 1)
            if label:
                labels.append(label)
            i = max(end, i + 1)
            continue
        i += 1
    return tuple(labels)


def _has_repeat_marker(chars: Sequence[_Char]) -> bool:
    return any(
        chars[i].is_(REPEAT_MARKER) and chars[i + 1].is_(LABEL_MARKER)
        for i in range(len(chars) - 1)
    )


def parse(name: str) -> Binding:
    """Parse a node display name into a :class:`Binding`.

    Never raises: text without markers yields a binding with
    ``has_binding=False``.

    >>> parse("Card // Sheet2 #Name.3").labels
    ('Name',)
    """

    if not name or not name.strip():
        return EMPTY_BINDING
    if name.startswith(IGNORE_PREFIX):
        return Binding(is_ignored=True)

    force_include = name.startswith(FORCE_PREFIX)
    working = name[1:] if force_include else name

    chars = _scan(working)
    is_repeat_frame = _has_repeat_marker(chars)
    index, chars = _parse_index(chars)
    worksheet = _parse_worksheet(chars)
    labels = _parse_labels(chars)

    return Binding(
        has_binding=bool(labels),
        labels=labels,
        worksheet=worksheet,
        index=index,
        is_ignored=False,
        force_include=force_include,
        is_repeat_frame=is_repeat_frame,
    )


def escape_label(text: str) -> str:
    """Escape marker characters so ``text`` survives as one literal label."""

    return "".join(ESCAPE + ch if ch in _SPECIAL_CHARS else ch for ch in text)


__all__ = ["INDEX_SUFFIXES", "escape_label", "parse"]
