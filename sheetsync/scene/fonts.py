"""Font loading collaborators."""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Protocol

from sheetsync.core.errors import FontLoadError

from .nodes import FontName, SceneNode

LOGGER = logging.getLogger(__name__)


class FontLoader(Protocol):
    def load_font(self, font: FontName) -> None:
        """Make ``font`` available for text edits; raise :class:`FontLoadError` otherwise."""


class StaticFontLoader:
    """Loader backed by a fixed set of installed fonts.

    ``available=None`` accepts every font. Every call is recorded in
    ``calls`` so callers can assert how often fonts were requested.
    """

    def __init__(self, available: Optional[Iterable[FontName]] = None) -> None:
        self.available = None if available is None else set(available)
        self.calls: List[FontName] = []

    def load_font(self, font: FontName) -> None:
        self.calls.append(font)
        if self.available is not None and font not in self.available:
            raise FontLoadError(f"font unavailable: {font}")


class FontCache:
    """Run-scoped memo over a :class:`FontLoader`.

    Each distinct font is requested from the loader at most once per run; a
    failed font keeps failing without asking the loader again.
    """

    def __init__(self, loader: FontLoader) -> None:
        self._loader = loader
        self._state: Dict[FontName, Optional[FontLoadError]] = {}

    def ensure(self, font: FontName) -> None:
        if font not in self._state:
            try:
                self._loader.load_font(font)
                self._state[font] = None
            except FontLoadError as exc:
                LOGGER.warning("font load failed: %s", font)
                self._state[font] = exc
        error = self._state[font]
        if error is not None:
            raise error

    def ensure_node(self, node: SceneNode) -> None:
        """Load every font used by ``node``; raises on the first failure."""

        for font in node.fonts:
            self.ensure(font)

    @property
    def loaded(self) -> List[FontName]:
        return [font for font, error in self._state.items() if error is None]


__all__ = ["FontCache", "FontLoader", "StaticFontLoader"]
