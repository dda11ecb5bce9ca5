"""
Classifier module for DirWatcher.

Turns raw create/remove notifications into semantic events about the
top-level directories of the watch root:

- a created directory directly under the root is a TOP_LEVEL_CREATED event;
- a removed known directory is re-searched by name, and becomes either a
  TOP_LEVEL_MOVED event (a directory of that name still exists somewhere in
  the tree) or a TOP_LEVEL_REMOVED event;
- notifier failures become WATCH_ERROR events.

Correctness does not depend on the order in which notifications arrive, only
on the state of the tree at the moment a remove is processed.
"""

import logging
import os
from typing import Callable, Iterable, List, Optional

from dirwatcher import events
from dirwatcher.events import ClassifiedEvent, RawEvent, RawEventKind
from dirwatcher.registry import PathRegistry, normalize_path
from dirwatcher.resolver import find_by_name

DEFAULT_PLACEHOLDER = "New folder"

logger = logging.getLogger(__name__)

Resolver = Callable[[str, str], Optional[str]]


class EventClassifier:
    """
    State machine classifying raw notifications.

    Attributes:
        watch_root: Normalized path of the watched directory.
        registry: Known top-level directories.
        resolver: Callable ``(name, search_root) -> Optional[path]``.
        placeholder: Directory name whose creation and removal are not
            reported. Falsy disables squelching.
    """

    def __init__(
        self,
        watch_root: str,
        registry: Optional[PathRegistry] = None,
        resolver: Resolver = find_by_name,
        placeholder: Optional[str] = DEFAULT_PLACEHOLDER,
    ):
        self.watch_root = normalize_path(watch_root)
        self.registry = registry if registry is not None else PathRegistry()
        self.resolver = resolver
        self.placeholder = placeholder

    def seed(self, paths: Iterable[str]) -> None:
        """Insert the directories found by the startup scan."""
        for path in paths:
            self.registry.insert(path)

    def is_top_level(self, path: str) -> bool:
        return os.path.dirname(normalize_path(path)) == self.watch_root

    def is_placeholder(self, path: str) -> bool:
        return bool(self.placeholder) and os.path.basename(path) == self.placeholder

    def classify(self, raw: RawEvent) -> List[ClassifiedEvent]:
        """
        Classify one raw event.

        Each path of the event is handled independently, in delivery order.

        Returns:
            list: Classified events, possibly empty.
        """
        if raw.kind is RawEventKind.ERROR:
            return [events.watch_error(raw.error or "unknown watch error")]

        results: List[ClassifiedEvent] = []
        if raw.kind is RawEventKind.CREATE:
            handler = self._on_create
        elif raw.kind is RawEventKind.REMOVE:
            handler = self._on_remove
        else:
            return results

        for path in raw.paths:
            event = handler(normalize_path(path))
            if event is not None:
                results.append(event)
        return results

    def _on_create(self, path: str) -> Optional[ClassifiedEvent]:
        if not (os.path.isdir(path) and self.is_top_level(path)):
            return None
        self.registry.insert(path)
        if self.is_placeholder(path):
            logger.debug("Squelched creation of placeholder directory %s", path)
            return None
        return events.top_level_created(path)

    def _on_remove(self, path: str) -> Optional[ClassifiedEvent]:
        if not self.registry.contains(path):
            return None

        dir_name = os.path.basename(path)
        new_path = self.resolver(dir_name, self.watch_root)
        self.registry.remove(path)

        if new_path is not None:
            new_path = normalize_path(new_path)
            # Directories moved below the top level are no longer tracked.
            if self.is_top_level(new_path):
                self.registry.insert(new_path)
            return events.top_level_moved(dir_name, new_path)

        if self.is_placeholder(path):
            logger.debug("Squelched removal of placeholder directory %s", path)
            return None
        return events.top_level_removed(path)
