"""
Monitor module for DirWatcher.

Wires a notifier, the classifier and a reporter together:
- Starts the notifier, which fills a queue with raw events
- Seeds the known-directory registry from the watch root's children
- Drains the queue in a single consumer loop, classifying and reporting
  each event in delivery order
"""

import functools
import logging
import os
import queue
import threading
from typing import List, Optional

from dirwatcher import config as config_module
from dirwatcher.classifier import EventClassifier
from dirwatcher.events import ClassifiedEvent, RawEvent
from dirwatcher.exceptions import WatchRootError
from dirwatcher.notifier import create_notifier
from dirwatcher.registry import PathRegistry, normalize_path
from dirwatcher.reporter import Reporter
from dirwatcher.resolver import find_by_name

logger = logging.getLogger(__name__)

# Queued by stop() to end the consumer loop.
END_OF_STREAM = None

# Seconds the consumer loop waits on the queue before checking its stop signal.
QUEUE_POLL_INTERVAL = 0.5


def scan_top_level(root: str) -> List[str]:
    """
    List the directories directly under root.

    Entries that are not directories, or cannot be inspected, are skipped.

    Raises:
        WatchRootError: If root cannot be listed.
    """
    root = normalize_path(root)
    try:
        with os.scandir(root) as it:
            entries = list(it)
    except OSError as e:
        raise WatchRootError(f"Cannot read watch root {root}: {e}") from e

    directories = []
    for entry in entries:
        try:
            if entry.is_dir():
                directories.append(entry.path)
        except OSError as e:
            logger.warning(f"Error accessing {entry.path}: {e}")
    return sorted(directories)


class Monitor:
    """
    Watches one root and reports changes to its top-level directories.

    Attributes:
        config: Loaded configuration dictionary
        root: Absolute watch root
        reporter: Reporter receiving classified events
        queue: Queue of RawEvents filled by the notifier
        classifier: EventClassifier holding the known-directory registry
    """

    def __init__(
        self,
        config: dict,
        reporter: Reporter,
        event_queue: Optional[queue.Queue] = None,
        notifier_factory=create_notifier,
    ):
        self.config = config
        self.root = config_module.get_watch_root(config)
        self.reporter = reporter
        self.queue = event_queue if event_queue is not None else queue.Queue()
        self._notifier_factory = notifier_factory
        self.notifier = None
        self.stop_event = threading.Event()
        self._running = False

        watch = config["watch"]
        resolver = functools.partial(
            find_by_name,
            follow_symlinks=watch["follow_symlinks"],
            max_depth=watch["max_depth"],
        )
        self.classifier = EventClassifier(
            self.root,
            registry=PathRegistry(),
            resolver=resolver,
            placeholder=watch["placeholder"],
        )

    @property
    def registry(self) -> PathRegistry:
        return self.classifier.registry

    def start(self):
        """
        Start the notifier and seed the registry.

        The notifier starts first, so a directory created while the seed scan
        runs is still delivered as a CREATE event.

        Raises:
            WatchRootError: If the watch root is missing or unreadable.
        """
        if not os.path.isdir(self.root):
            raise WatchRootError(f"Watch root is not a directory: {self.root}")

        watch = self.config["watch"]
        self.notifier = self._notifier_factory(
            watch["backend"], self.root, self.queue, watch["poll_interval"]
        )
        try:
            self.notifier.start()
        except OSError as e:
            self.notifier = None
            raise WatchRootError(f"Cannot watch {self.root}: {e}") from e

        try:
            directories = scan_top_level(self.root)
        except WatchRootError:
            self.notifier.stop()
            self.notifier = None
            raise
        for path in directories:
            self.reporter.initially_found(path)
            self.classifier.seed([path])
        self._running = True
        self.reporter.monitoring_started()

    def process(self, raw: RawEvent) -> List[ClassifiedEvent]:
        """
        Classify one raw event and report the results.

        Returns:
            list: The classified events that were reported.
        """
        classified = self.classifier.classify(raw)
        for event in classified:
            self.reporter.report(event)
        return classified

    def run(self):
        """
        Drain the event queue until the end-of-stream marker arrives or a
        stop is requested.
        """
        while not self.stop_event.is_set():
            try:
                raw = self.queue.get(timeout=QUEUE_POLL_INTERVAL)
            except queue.Empty:
                continue
            try:
                if raw is END_OF_STREAM:
                    break
                self.process(raw)
            except Exception as e:
                logger.error(f"Error processing event {raw}: {e}", exc_info=True)
            finally:
                self.queue.task_done()
        logger.info("Monitor loop finished.")

    def request_stop(self):
        """
        Ask the consumer loop to finish.

        Only sets an event, so it is safe to call from a signal handler
        interrupting run().
        """
        self.stop_event.set()

    def stop(self):
        """Stop the notifier and end the consumer loop."""
        if self.notifier is not None:
            self.notifier.stop()
            self.notifier = None
        if self._running:
            self._running = False
            self.queue.put(END_OF_STREAM)
        logger.info("Monitor stopping.")
