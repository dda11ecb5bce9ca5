import queue

import pytest
from watchdog.events import (DirCreatedEvent, DirDeletedEvent, DirMovedEvent,
                             FileModifiedEvent)

from dirwatcher import events
from dirwatcher.classifier import EventClassifier
from dirwatcher.events import RawEvent, RawEventKind
from dirwatcher.notifier import (PollingNotifier, QueueingEventHandler,
                                 WatchdogNotifier, create_notifier,
                                 diff_snapshots, take_snapshot)


def drain(q):
    items = []
    while not q.empty():
        items.append(q.get_nowait())
    return items


@pytest.fixture
def temp_dir(tmp_path):
    """Fixture to create a small directory tree."""
    (tmp_path / "Alpha" / "inner").mkdir(parents=True)
    (tmp_path / "file1.txt").write_text("content")
    return tmp_path


def test_take_snapshot_records_entries(temp_dir):
    snapshot = take_snapshot(str(temp_dir))
    assert snapshot == {
        str(temp_dir / "Alpha"): True,
        str(temp_dir / "Alpha" / "inner"): True,
        str(temp_dir / "file1.txt"): False,
    }


def test_take_snapshot_missing_root(tmp_path):
    with pytest.raises(OSError):
        take_snapshot(str(tmp_path / "missing"))


def test_diff_snapshots():
    previous = {"/r/a": True, "/r/b": True, "/r/c": False}
    current = {"/r/a": True, "/r/c": True, "/r/d": True}
    created, removed = diff_snapshots(previous, current)
    assert created == ["/r/c", "/r/d"]
    assert removed == ["/r/b", "/r/c"]


def test_poll_once_reports_created_and_removed(temp_dir):
    q = queue.Queue()
    notifier = PollingNotifier(str(temp_dir), q, interval=60)
    notifier.prime()

    (temp_dir / "Beta").mkdir()
    (temp_dir / "Alpha" / "inner").rmdir()
    (temp_dir / "Alpha").rmdir()

    queued = notifier.poll_once()
    assert drain(q) == queued
    assert queued == [
        RawEvent.remove(str(temp_dir / "Alpha"), str(temp_dir / "Alpha" / "inner")),
        RawEvent.create(str(temp_dir / "Beta")),
    ]


def test_file_replaced_by_directory_is_a_creation(temp_dir):
    q = queue.Queue()
    notifier = PollingNotifier(str(temp_dir), q)
    notifier.prime()
    classifier = EventClassifier(str(temp_dir))

    (temp_dir / "file1.txt").unlink()
    (temp_dir / "file1.txt").mkdir()
    notifier.poll_once()

    results = [event for raw in drain(q) for event in classifier.classify(raw)]
    assert results == [events.top_level_created(str(temp_dir / "file1.txt"))]
    assert classifier.registry.snapshot() == {str(temp_dir / "file1.txt")}


def test_directory_replaced_by_file_is_a_removal(temp_dir):
    q = queue.Queue()
    notifier = PollingNotifier(str(temp_dir), q)
    notifier.prime()
    classifier = EventClassifier(str(temp_dir))
    classifier.seed([str(temp_dir / "Alpha")])

    (temp_dir / "Alpha" / "inner").rmdir()
    (temp_dir / "Alpha").rmdir()
    (temp_dir / "Alpha").write_text("now a file")
    notifier.poll_once()

    results = [event for raw in drain(q) for event in classifier.classify(raw)]
    assert results == [events.top_level_removed(str(temp_dir / "Alpha"))]
    assert len(classifier.registry) == 0


def test_poll_once_without_changes_queues_nothing(temp_dir):
    q = queue.Queue()
    notifier = PollingNotifier(str(temp_dir), q)
    notifier.prime()
    assert notifier.poll_once() == []
    assert q.empty()


def test_poll_once_reports_scan_failure(temp_dir):
    q = queue.Queue()
    notifier = PollingNotifier(str(temp_dir / "Alpha" / "inner"), q)
    notifier.prime()
    (temp_dir / "Alpha" / "inner").rmdir()

    queued = notifier.poll_once()
    assert len(queued) == 1
    assert queued[0].kind is RawEventKind.ERROR
    assert "Cannot scan" in queued[0].error


def test_polling_notifier_start_and_stop(temp_dir):
    q = queue.Queue()
    notifier = PollingNotifier(str(temp_dir), q, interval=0.05)
    notifier.start()
    try:
        (temp_dir / "Gamma").mkdir()
        event = q.get(timeout=5)
    finally:
        notifier.stop()
    assert event == RawEvent.create(str(temp_dir / "Gamma"))


def test_watchdog_handler_translates_events():
    q = queue.Queue()
    handler = QueueingEventHandler(q)

    handler.dispatch(DirCreatedEvent("/r/new"))
    handler.dispatch(DirDeletedEvent("/r/old"))
    handler.dispatch(DirMovedEvent("/r/a", "/r/sub/a"))
    handler.dispatch(FileModifiedEvent("/r/file.txt"))

    assert drain(q) == [
        RawEvent.create("/r/new"),
        RawEvent.remove("/r/old"),
        RawEvent.remove("/r/a"),
        RawEvent.create("/r/sub/a"),
        RawEvent.other("/r/file.txt"),
    ]


def test_create_notifier_backends(tmp_path):
    q = queue.Queue()
    assert isinstance(create_notifier("poll", str(tmp_path), q, 2.0), PollingNotifier)
    assert isinstance(create_notifier("watchdog", str(tmp_path), q), WatchdogNotifier)
    with pytest.raises(ValueError):
        create_notifier("inotify", str(tmp_path), q)
