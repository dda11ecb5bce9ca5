"""
Registry of the top-level directories currently known to the watcher.
"""

import os
from typing import FrozenSet, Iterable, Iterator


def normalize_path(path) -> str:
    """Return the absolute, normalized string form of a path."""
    return os.path.abspath(os.fspath(path))


class PathRegistry:
    """
    In-memory set of known top-level directory paths.

    The registry is not thread-safe; it is meant to be mutated only from the
    monitor's consumer loop.
    """

    def __init__(self, paths: Iterable[str] = ()):
        self._paths = set()
        for path in paths:
            self.insert(path)

    def insert(self, path) -> None:
        self._paths.add(normalize_path(path))

    def remove(self, path) -> bool:
        """
        Remove a path from the registry.

        Returns:
            bool: True if the path was present.
        """
        normalized = normalize_path(path)
        if normalized in self._paths:
            self._paths.remove(normalized)
            return True
        return False

    def contains(self, path) -> bool:
        return normalize_path(path) in self._paths

    def snapshot(self) -> FrozenSet[str]:
        return frozenset(self._paths)

    def __contains__(self, path) -> bool:
        return self.contains(path)

    def __len__(self) -> int:
        return len(self._paths)

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._paths))
