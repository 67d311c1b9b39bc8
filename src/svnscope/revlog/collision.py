"""Detects project roots that would overlap an already known project."""

from __future__ import annotations

from collections.abc import Iterable


class PathCollisionDetector:
    """Set of known project roots.

    Roots must partition the path space: a candidate strictly above or below
    a known root is a collision. A candidate equal to a known root is that
    same project, not a collision.
    """

    def __init__(self) -> None:
        self._paths: set[str] = set()

    def add_paths(self, paths: Iterable[str]) -> None:
        self._paths.update(paths)

    def is_collision(self, path: str) -> bool:
        if path in self._paths:
            return False
        return any(path.startswith(known) or known.startswith(path) for known in self._paths)

    def clear(self) -> None:
        self._paths.clear()

    def __len__(self) -> int:
        return len(self._paths)
