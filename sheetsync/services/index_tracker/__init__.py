"""Row selection across the five index modes."""

from .tracker import NO_VALUE, IndexTracker, KeyState

__all__ = ["IndexTracker", "KeyState", "NO_VALUE"]
