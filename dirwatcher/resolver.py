"""
Move resolution for DirWatcher.

A remove notification for a top-level directory does not say whether the
directory was deleted or moved. The resolver re-scans the watched tree for a
surviving directory with the same base name. Matching is by name only: if two
directories share a name, the first one in traversal order wins, and a
directory that was renamed while being moved cannot be found.
"""

import logging
import os
from typing import Iterator, Optional, Set, Tuple

from dirwatcher.registry import normalize_path

logger = logging.getLogger(__name__)


def iter_directories(
    search_root: str, follow_symlinks: bool = True, max_depth: Optional[int] = None
) -> Iterator[str]:
    """
    Yield every directory below search_root in pre-order.

    Entries of each directory are visited sorted by name, so the order is
    stable for an unchanged tree. The root itself is not yielded. Entries
    that cannot be read are skipped.

    Args:
        search_root: Directory to traverse.
        follow_symlinks: Whether symlinked directories are descended into.
        max_depth: Deepest level to yield (1 = immediate children). None
            means unbounded.

    Yields:
        str: Absolute path of each directory encountered.
    """
    root = normalize_path(search_root)
    visited: Set[Tuple[int, int]] = set()
    try:
        root_stat = os.stat(root)
        visited.add((root_stat.st_dev, root_stat.st_ino))
    except OSError as e:
        logger.debug("Cannot stat search root %s: %s", root, e)
        return
    yield from _walk(root, 1, follow_symlinks, max_depth, visited)


def _walk(
    path: str,
    depth: int,
    follow_symlinks: bool,
    max_depth: Optional[int],
    visited: Set[Tuple[int, int]],
) -> Iterator[str]:
    if max_depth is not None and depth > max_depth:
        return
    try:
        with os.scandir(path) as it:
            entries = sorted(it, key=lambda entry: entry.name)
    except OSError as e:
        logger.debug("Skipping unreadable directory %s: %s", path, e)
        return

    for entry in entries:
        try:
            if not entry.is_dir(follow_symlinks=follow_symlinks):
                continue
            # Symlinked directories may point back into the tree.
            stat = entry.stat(follow_symlinks=follow_symlinks)
        except OSError as e:
            logger.debug("Skipping entry %s: %s", entry.path, e)
            continue
        key = (stat.st_dev, stat.st_ino)
        if key in visited:
            continue
        visited.add(key)
        yield entry.path
        yield from _walk(entry.path, depth + 1, follow_symlinks, max_depth, visited)


def find_by_name(
    name: str,
    search_root: str,
    follow_symlinks: bool = True,
    max_depth: Optional[int] = None,
) -> Optional[str]:
    """
    Find the first directory named ``name`` anywhere under search_root.

    Args:
        name: Base name of the directory that disappeared.
        search_root: Root of the tree to search.
        follow_symlinks: Whether to follow symlinked directories.
        max_depth: Optional bound on traversal depth.

    Returns:
        The path of the first matching directory, or None.
    """
    for path in iter_directories(search_root, follow_symlinks, max_depth):
        if os.path.basename(path) == name:
            logger.debug("Resolved directory name %r to %s", name, path)
            return path
    return None
