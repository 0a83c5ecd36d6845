"""Tests for treebox.observability — event log and tree collector."""

import threading

import pytest

from treebox.observability.collector import TreeCollector
from treebox.observability.events import (
    FileProcessed,
    RenameDetected,
    ScanCompleted,
    WatchFailed,
    WatchStateChanged,
    now_ns,
)
from treebox.observability.log import EventLog


def _file_event(path: str, change_type: str = "create") -> FileProcessed:
    return FileProcessed(
        path=path, change_type=change_type, handlers=1,  # type: ignore[arg-type]
        duration_ms=0.1, timestamp_ns=now_ns(),
    )


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------


class TestEvents:
    """Events are frozen and timestamped."""

    def test_frozen(self) -> None:
        event = _file_event("a.txt")
        with pytest.raises(AttributeError):
            event.path = "b.txt"  # type: ignore[misc]

    def test_now_ns_monotonic(self) -> None:
        a = now_ns()
        b = now_ns()
        assert b >= a


# ---------------------------------------------------------------------------
# EventLog
# ---------------------------------------------------------------------------


class TestEventLog:
    """Tests for the event log store."""

    def test_append_and_len(self) -> None:
        log = EventLog()
        assert len(log) == 0
        log.append(_file_event("a.txt"))
        assert len(log) == 1

    def test_max_events_enforced(self) -> None:
        log = EventLog(max_events=5)
        for i in range(10):
            log.append(_file_event(f"{i}.txt"))
        assert len(log) == 5
        assert log.recent(1)[0].path == "9.txt"  # type: ignore[union-attr]

    def test_recent_oldest_first(self) -> None:
        log = EventLog()
        for i in range(5):
            log.append(_file_event(f"{i}.txt"))
        recent = log.recent(3)
        assert [e.path for e in recent] == ["2.txt", "3.txt", "4.txt"]  # type: ignore[union-attr]

    def test_query_by_type_most_recent_first(self) -> None:
        log = EventLog()
        log.append(_file_event("a.txt"))
        log.append(WatchStateChanged(state="running", timestamp_ns=now_ns()))
        log.append(_file_event("b.txt"))

        files = log.query(event_type=FileProcessed)
        assert [e.path for e in files] == ["b.txt", "a.txt"]  # type: ignore[union-attr]

    def test_query_by_path_checks_rename_fields(self) -> None:
        log = EventLog()
        log.append(RenameDetected(old_path="a/b.txt", new_path="c/b.txt", timestamp_ns=now_ns()))
        log.append(_file_event("other.txt"))

        assert len(log.query(path="a/b.txt")) == 1
        assert len(log.query(path="c")) == 1
        assert len(log.query(path="missing")) == 0

    def test_query_by_directory_matches_below_only(self) -> None:
        log = EventLog()
        log.append(_file_event("posts/hello.md"))
        log.append(_file_event("posts-archive/old.md"))
        log.append(_file_event("posts"))

        assert [e.path for e in log.query(path="posts/")] == ["posts", "posts/hello.md"]  # type: ignore[union-attr]

    def test_query_multiple_types(self) -> None:
        log = EventLog()
        log.append(_file_event("a.txt"))
        log.append(WatchStateChanged(state="running", timestamp_ns=now_ns()))
        log.append(WatchFailed(path="a.txt", error="E: x", timestamp_ns=now_ns()))

        assert len(log.query(event_type=(FileProcessed, WatchFailed))) == 2

    def test_query_since(self) -> None:
        log = EventLog()
        log.append(FileProcessed(
            path="old.txt", change_type="create", handlers=0, duration_ms=0.0, timestamp_ns=10,
        ))
        log.append(FileProcessed(
            path="new.txt", change_type="create", handlers=0, duration_ms=0.0, timestamp_ns=20,
        ))
        assert [e.path for e in log.query(since_ns=15)] == ["new.txt"]  # type: ignore[union-attr]

    def test_query_limit(self) -> None:
        log = EventLog()
        for i in range(10):
            log.append(_file_event(f"{i}.txt"))
        assert len(log.query(limit=3)) == 3

    def test_clear(self) -> None:
        log = EventLog()
        log.append(_file_event("a.txt"))
        assert log.clear() == 1
        assert len(log) == 0
        assert log.recorded == 0

    def test_stats(self) -> None:
        log = EventLog(max_events=50)
        log.append(_file_event("a.txt"))
        log.append(_file_event("b.txt", "delete"))
        log.append(WatchStateChanged(state="stopped", timestamp_ns=now_ns()))
        stats = log.stats()
        assert stats["total"] == 3
        assert stats["dropped"] == 0
        assert stats["max_events"] == 50
        assert stats["by_type"] == {"FileProcessed": 2, "WatchStateChanged": 1}
        assert stats["by_change"] == {"create": 1, "delete": 1}

    def test_dropped_events_counted(self) -> None:
        log = EventLog(max_events=2)
        for i in range(5):
            log.append(_file_event(f"{i}.txt"))
        assert log.recorded == 5
        assert log.stats()["dropped"] == 3

    def test_concurrent_appends(self) -> None:
        log = EventLog()

        def writer(n: int) -> None:
            for i in range(100):
                log.append(_file_event(f"{n}-{i}.txt"))

        threads = [threading.Thread(target=writer, args=(n,)) for n in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert len(log) == 400


# ---------------------------------------------------------------------------
# TreeCollector
# ---------------------------------------------------------------------------


class TestTreeCollector:
    """TreeCollector.record_* — one event per call."""

    def test_default_log(self) -> None:
        assert isinstance(TreeCollector().log, EventLog)

    def test_shared_log(self) -> None:
        log = EventLog()
        assert TreeCollector(log).log is log

    def test_record_file(self) -> None:
        collector = TreeCollector()
        collector.record_file("a.txt", "delete", handlers=2, duration_ms=1.5)
        (event,) = collector.log.query(event_type=FileProcessed)
        assert (event.path, event.change_type, event.handlers, event.duration_ms) == (
            "a.txt", "delete", 2, 1.5,
        )

    def test_record_scan(self) -> None:
        collector = TreeCollector()
        collector.record_scan("/tree", created=1, updated=2, deleted=3, skipped=4, duration_ms=9.0)
        (event,) = collector.log.query(event_type=ScanCompleted)
        assert (event.created, event.updated, event.deleted, event.skipped) == (1, 2, 3, 4)

    def test_record_rename(self) -> None:
        collector = TreeCollector()
        collector.record_rename("a.txt", "b.txt")
        (event,) = collector.log.query(event_type=RenameDetected)
        assert (event.old_path, event.new_path) == ("a.txt", "b.txt")

    def test_record_state(self) -> None:
        collector = TreeCollector()
        collector.record_state("running")
        (event,) = collector.log.query(event_type=WatchStateChanged)
        assert event.state == "running"

    def test_record_failure(self) -> None:
        collector = TreeCollector()
        collector.record_failure("bad.txt", ValueError("nope"))
        (event,) = collector.log.query(event_type=WatchFailed)
        assert event.path == "bad.txt"
        assert event.error == "ValueError: nope"
