"""Label normalization and matching against worksheet labels."""

from __future__ import annotations

import re
from typing import Dict, Iterable, List, Optional, Sequence

from sheetsync.core.models import Table, Worksheet

_STRIP_PATTERN = re.compile(r"[\s_-]+")


def normalize(label: str) -> str:
    """Drop whitespace, ``_`` and ``-`` and lowercase; idempotent."""

    return _STRIP_PATTERN.sub("", label).lower()


class LabelIndex:
    """Normalized -> original lookup over an ordered label sequence.

    Exact normalized matches are O(1). When nothing matches exactly, the
    first label (in worksheet order) whose normalized form *contains* the
    normalized request is returned. The fallback is permissive:
    ``#name`` matches ``First Name`` when no ``Name`` label exists, and a
    short request can match an unrelated longer label.
    """

    def __init__(self, labels: Iterable[str]) -> None:
        self._labels: List[str] = list(labels)
        self._normalized: List[str] = [normalize(label) for label in self._labels]
        self._exact: Dict[str, str] = {}
        for norm, original in zip(self._normalized, self._labels):
            self._exact.setdefault(norm, original)

    def __len__(self) -> int:
        return len(self._labels)

    def match(self, requested: str) -> Optional[str]:
        wanted = normalize(requested)
        if not wanted:
            return None
        exact = self._exact.get(wanted)
        if exact is not None:
            return exact
        for norm, original in zip(self._normalized, self._labels):
            if wanted in norm:
                return original
        return None


def match(requested: str, available: Sequence[str], index: LabelIndex | None = None) -> Optional[str]:
    """Return the member of ``available`` that ``requested`` refers to, if any."""

    return (index or LabelIndex(available)).match(requested)


def find_worksheet(table: Table, name: str | None) -> Optional[Worksheet]:
    """Resolve a worksheet by normalized name, defaulting to the active one."""

    if not table.worksheets:
        return None
    if name:
        wanted = normalize(name)
        for ws in table.worksheets:
            if normalize(ws.name) == wanted:
                return ws
        return None
    for ws in table.worksheets:
        if ws.name == table.active_worksheet:
            return ws
    return table.worksheets[0]


__all__ = ["LabelIndex", "find_worksheet", "match", "normalize"]
