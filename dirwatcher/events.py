"""
Event models for DirWatcher.

Raw events are what a notifier delivers; classified events are what the
classifier produces and the reporter renders.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


class RawEventKind(str, Enum):
    """Kinds of notifications delivered by a notifier backend."""

    CREATE = "create"
    REMOVE = "remove"
    OTHER = "other"
    ERROR = "error"


class ClassifiedKind(str, Enum):
    """Semantic events about top-level directories."""

    TOP_LEVEL_CREATED = "top_level_created"
    TOP_LEVEL_MOVED = "top_level_moved"
    TOP_LEVEL_REMOVED = "top_level_removed"
    WATCH_ERROR = "watch_error"


@dataclass(frozen=True)
class RawEvent:
    """A single notification carrying one or more affected paths."""

    kind: RawEventKind
    paths: Tuple[str, ...] = ()
    error: Optional[str] = None

    @classmethod
    def create(cls, *paths: str) -> "RawEvent":
        return cls(RawEventKind.CREATE, tuple(paths))

    @classmethod
    def remove(cls, *paths: str) -> "RawEvent":
        return cls(RawEventKind.REMOVE, tuple(paths))

    @classmethod
    def other(cls, *paths: str) -> "RawEvent":
        return cls(RawEventKind.OTHER, tuple(paths))

    @classmethod
    def failure(cls, diagnostic: str) -> "RawEvent":
        return cls(RawEventKind.ERROR, error=diagnostic)


@dataclass(frozen=True)
class ClassifiedEvent:
    """
    A classified change to the watched tree.

    Only the fields relevant to ``kind`` are set:
      - TOP_LEVEL_CREATED / TOP_LEVEL_REMOVED: path
      - TOP_LEVEL_MOVED: old_name, new_path
      - WATCH_ERROR: diagnostic
    """

    kind: ClassifiedKind
    path: Optional[str] = None
    old_name: Optional[str] = None
    new_path: Optional[str] = None
    diagnostic: Optional[str] = None


def top_level_created(path: str) -> ClassifiedEvent:
    return ClassifiedEvent(ClassifiedKind.TOP_LEVEL_CREATED, path=path)


def top_level_moved(old_name: str, new_path: str) -> ClassifiedEvent:
    return ClassifiedEvent(
        ClassifiedKind.TOP_LEVEL_MOVED, old_name=old_name, new_path=new_path
    )


def top_level_removed(path: str) -> ClassifiedEvent:
    return ClassifiedEvent(ClassifiedKind.TOP_LEVEL_REMOVED, path=path)


def watch_error(diagnostic: str) -> ClassifiedEvent:
    return ClassifiedEvent(ClassifiedKind.WATCH_ERROR, diagnostic=diagnostic)
