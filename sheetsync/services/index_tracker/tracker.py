"""Per-run row selection for bound labels.

State lives in an arena keyed by ``(label, worksheet, mode)`` so two labels
(or the same label in two worksheets, or under two modes) never share a
cursor. ``-1`` means "no value available" and is not an error.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field, replace
from typing import Callable, Dict, List, Optional, Sequence, Set, Tuple

from sheetsync.core.models import IndexMode, IndexSpecifier, Worksheet

NO_VALUE = -1

StateKey = Tuple[str, str, IndexMode]


@dataclass(slots=True)
class KeyState:
    cursor: int = 0
    non_blank_cursor: int = 0
    history: Set[int] = field(default_factory=set)


def is_blank(value: str) -> bool:
    return not value or not value.strip()


class IndexTracker:
    """Stateful index assignment for one sync run."""

    def __init__(self, seed: Optional[int] = None, rng: Optional[random.Random] = None) -> None:
        self._rng = rng or random.Random(seed)
        self._states: Dict[StateKey, KeyState] = {}
        self._steps: Dict[IndexMode, Callable[[KeyState, IndexSpecifier, Sequence[str]], int]] = {
            IndexMode.SPECIFIC: self._specific,
            IndexMode.INCREMENT: self._increment,
            IndexMode.INCREMENT_NON_BLANK: self._increment_non_blank,
            IndexMode.RANDOM: self._random,
            IndexMode.RANDOM_NON_BLANK: self._random_non_blank,
        }

    def next_index(self, label: str, worksheet: str, spec: IndexSpecifier, values: Sequence[str]) -> int:
        if not values:
            return NO_VALUE
        if spec.mode is IndexMode.SPECIFIC:
            return self._specific(KeyState(), spec, values)
        state = self._states.setdefault((label, worksheet, spec.mode), KeyState())
        return self._steps[spec.mode](state, spec, values)

    def value_for(self, label: str, worksheet: Worksheet, spec: IndexSpecifier) -> Tuple[int, Optional[str]]:
        """Return ``(index, value)`` for ``label``; ``(-1, None)`` when nothing applies."""

        values = worksheet.values(label)
        index = self.next_index(label, worksheet.name, spec, values)
        if index == NO_VALUE:
            return NO_VALUE, None
        return index, values[index]

    def snapshot(self) -> Dict[StateKey, KeyState]:
        """Copy of the current per-key state, safe to inspect or compare."""

        return {key: replace(state, history=set(state.history)) for key, state in self._states.items()}

    def reset(self) -> None:
        self._states.clear()

    # ------------------------------------------------------------------
    @staticmethod
    def _specific(state: KeyState, spec: IndexSpecifier, values: Sequence[str]) -> int:
        return min(max((spec.value or 1) - 1, 0), len(values) - 1)

    @staticmethod
    def _increment(state: KeyState, spec: IndexSpecifier, values: Sequence[str]) -> int:
        index = state.cursor % len(values)
        state.cursor = (index + 1) % len(values)
        return index

    @staticmethod
    def _increment_non_blank(state: KeyState, spec: IndexSpecifier, values: Sequence[str]) -> int:
        count = len(values)
        start = state.non_blank_cursor % count
        for offset in range(count):
            index = (start + offset) % count
            if not is_blank(values[index]):
                state.non_blank_cursor = (index + 1) % count
                return index
        return NO_VALUE

    def _random(self, state: KeyState, spec: IndexSpecifier, values: Sequence[str]) -> int:
        return self._draw(state, list(range(len(values))))

    def _random_non_blank(self, state: KeyState, spec: IndexSpecifier, values: Sequence[str]) -> int:
        candidates = [i for i, value in enumerate(values) if not is_blank(value)]
        if not candidates:
            return NO_VALUE
        return self._draw(state, candidates)

    def _draw(self, state: KeyState, candidates: List[int]) -> int:
        eligible = [i for i in candidates if i not in state.history]
        if not eligible:
            state.history.clear()
            eligible = candidates
        index = self._rng.choice(eligible)
        state.history.add(index)
        return index


__all__ = ["IndexTracker", "KeyState", "NO_VALUE", "StateKey", "is_blank"]
