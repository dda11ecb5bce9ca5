"""
Notifier backends for DirWatcher.

A notifier watches the tree under the watch root and puts RawEvent values on
a queue. Two backends are available:

- "poll": takes a snapshot of the tree every poll interval and reports the
  paths that appeared or disappeared since the previous snapshot.
- "watchdog": uses the platform's native file system notifications through
  the watchdog library.

Neither backend guarantees ordering across unrelated paths.
"""

import logging
import os
from typing import Dict, List, Tuple

from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from dirwatcher.events import RawEvent
from dirwatcher.registry import normalize_path
from dirwatcher.utils import spawn_periodic_worker

logger = logging.getLogger(__name__)

Snapshot = Dict[str, bool]


def take_snapshot(root: str) -> Snapshot:
    """
    Record every entry under root.

    Symbolic links are recorded but not descended into. Entries that vanish
    or cannot be read while the snapshot is taken are skipped.

    Args:
        root: Directory to snapshot.

    Returns:
        dict: Mapping of path to whether it is a directory.

    Raises:
        OSError: If root itself cannot be listed.
    """
    snapshot: Snapshot = {}
    with os.scandir(root) as it:
        entries = list(it)
    pending = [entries]
    while pending:
        for entry in pending.pop():
            try:
                is_dir = entry.is_dir(follow_symlinks=False)
            except OSError as e:
                logger.debug("Skipping %s: %s", entry.path, e)
                continue
            snapshot[entry.path] = is_dir
            if not is_dir:
                continue
            try:
                with os.scandir(entry.path) as it:
                    pending.append(list(it))
            except OSError as e:
                logger.debug("Skipping unreadable directory %s: %s", entry.path, e)
    return snapshot


def diff_snapshots(previous: Snapshot, current: Snapshot) -> Tuple[List[str], List[str]]:
    """
    Compare two snapshots.

    An entry that changed between file and directory counts as removed and
    created again.

    Returns:
        tuple: (created, removed), each sorted.
    """
    created = [path for path, is_dir in current.items() if previous.get(path) != is_dir]
    removed = [path for path, is_dir in previous.items() if current.get(path) != is_dir]
    return sorted(created), sorted(removed)


class PollingNotifier:
    """
    Polls the watched tree and emits CREATE/REMOVE events for the differences.

    Attributes:
        root: Normalized watch root.
        queue: Destination queue for RawEvent values.
        interval: Seconds between snapshots.
    """

    def __init__(self, root, queue, interval=1.0):
        self.root = normalize_path(root)
        self.queue = queue
        self.interval = interval
        self._snapshot: Snapshot = {}
        self._worker = None

    def prime(self):
        """Take the baseline snapshot that the first poll is compared with."""
        self._snapshot = take_snapshot(self.root)
        logger.debug("Baseline snapshot of %s has %d entries", self.root, len(self._snapshot))

    def poll_once(self):
        """
        Take a new snapshot and queue the differences.

        Returns:
            list: The RawEvents that were queued.
        """
        try:
            current = take_snapshot(self.root)
        except OSError as e:
            event = RawEvent.failure(f"Cannot scan {self.root}: {e}")
            self.queue.put(event)
            return [event]

        created, removed = diff_snapshots(self._snapshot, current)
        self._snapshot = current

        # Removals go first so a path that changed type is dropped before it
        # is re-added.
        queued = []
        if removed:
            queued.append(RawEvent.remove(*removed))
        if created:
            queued.append(RawEvent.create(*created))
        for event in queued:
            logger.debug("Queueing %s event for %d path(s)", event.kind.value, len(event.paths))
            self.queue.put(event)
        return queued

    def start(self):
        self.prime()
        self._worker = spawn_periodic_worker(
            self.poll_once, self.interval, name="DirWatcher-Poller"
        )
        logger.info(f"Polling {self.root} every {self.interval} seconds")

    def stop(self):
        if self._worker is not None:
            self._worker.stop()
            self._worker.join(timeout=self.interval + 5.0)
            self._worker = None


class QueueingEventHandler(FileSystemEventHandler):
    """Translates watchdog events into RawEvents on a queue."""

    def __init__(self, queue):
        super().__init__()
        self.queue = queue

    def on_any_event(self, event):
        src_path = os.fsdecode(event.src_path)
        if event.event_type == "created":
            self.queue.put(RawEvent.create(src_path))
        elif event.event_type == "deleted":
            self.queue.put(RawEvent.remove(src_path))
        elif event.event_type == "moved":
            # Reported as primitives; the classifier infers the move itself.
            self.queue.put(RawEvent.remove(src_path))
            self.queue.put(RawEvent.create(os.fsdecode(event.dest_path)))
        else:
            self.queue.put(RawEvent.other(src_path))


class WatchdogNotifier:
    """
    Watches the tree with watchdog's native observer.

    Attributes:
        root: Normalized watch root.
        queue: Destination queue for RawEvent values.
    """

    def __init__(self, root, queue):
        self.root = normalize_path(root)
        self.queue = queue
        self._observer = None

    def start(self):
        observer = Observer()
        observer.schedule(QueueingEventHandler(self.queue), self.root, recursive=True)
        observer.start()
        self._observer = observer
        logger.info(f"Watching {self.root} with {type(observer).__name__}")

    def stop(self):
        if self._observer is not None:
            self._observer.stop()
            self._observer.join(timeout=5.0)
            self._observer = None


def create_notifier(backend, root, queue, interval=1.0):
    """
    Build the notifier for a configured backend name.

    Raises:
        ValueError: If the backend is unknown.
    """
    if backend == "poll":
        return PollingNotifier(root, queue, interval)
    if backend == "watchdog":
        return WatchdogNotifier(root, queue)
    raise ValueError(f"Unknown notifier backend: {backend}")
