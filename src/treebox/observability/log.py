"""Event log — bounded, queryable record of what a tree did.

Keeps the most recent ``TreeEvent`` objects in a ring buffer. Queries filter
by event type, timestamp and tree path; a path filter matches the path
itself and everything below it, so ``query(path="posts")`` finds
``posts/hello.md`` and renames into or out of ``posts/``.

Thread Safety:
    All methods are protected by a ``threading.Lock``. Scan workers and the
    live watcher may record concurrently.

"""

import threading
from collections import Counter, deque
from typing import Any

from treebox.observability.events import FileProcessed, TreeEvent

# Attributes that carry a tree path, in the order they are checked
_PATH_FIELDS = ("path", "new_path", "old_path", "root")


def _under(value: str, path: str) -> bool:
    base = path.rstrip("/")
    return value == base or value.startswith(base + "/")


def _touches(event: TreeEvent, path: str) -> bool:
    for name in _PATH_FIELDS:
        value = getattr(event, name, None)
        if value is not None and _under(value, path):
            return True
    return False


class EventLog:
    """Ring buffer of tree events.

    When the buffer is full the oldest events are discarded; ``recorded``
    keeps counting so callers can tell how much was dropped.

    Args:
        max_events: Maximum number of events to retain.

    """

    __slots__ = ("_events", "_lock", "_max_events", "_recorded")

    def __init__(self, max_events: int = 10_000) -> None:
        self._max_events = max_events
        self._events: deque[TreeEvent] = deque(maxlen=max_events)
        self._lock = threading.Lock()
        self._recorded = 0

    def append(self, event: TreeEvent) -> None:
        """Record an event."""
        with self._lock:
            self._events.append(event)
            self._recorded += 1

    @property
    def recorded(self) -> int:
        """Events appended since creation or the last ``clear()``."""
        with self._lock:
            return self._recorded

    def query(
        self,
        *,
        event_type: type | tuple[type, ...] | None = None,
        since_ns: int = 0,
        path: str | None = None,
        limit: int = 100,
    ) -> list[TreeEvent]:
        """Filter retained events, most recent first.

        Args:
            event_type: Only events of this type (or any of these types).
            since_ns: Only events stamped at or after this monotonic time.
            path: Only events whose path, rename source/target or root is
                this path or lies below it.
            limit: Maximum number of events to return.

        """
        with self._lock:
            snapshot = list(self._events)

        results: list[TreeEvent] = []
        for event in reversed(snapshot):
            if len(results) >= limit:
                break
            if event_type is not None and not isinstance(event, event_type):
                continue
            if since_ns and event.timestamp_ns < since_ns:
                continue
            if path is not None and not _touches(event, path):
                continue
            results.append(event)
        return results

    def recent(self, n: int = 20) -> list[TreeEvent]:
        """Return the N most recent events, oldest first."""
        with self._lock:
            items = list(self._events)
        return items[-n:]

    def clear(self) -> int:
        """Drop all events and return how many were retained."""
        with self._lock:
            count = len(self._events)
            self._events.clear()
            self._recorded = 0
            return count

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)

    def stats(self) -> dict[str, Any]:
        """Summarize retained events by type and processed files by change."""
        with self._lock:
            events = list(self._events)
            recorded = self._recorded

        by_type = Counter(type(event).__name__ for event in events)
        by_change = Counter(
            event.change_type for event in events if isinstance(event, FileProcessed)
        )
        return {
            "total": len(events),
            "recorded": recorded,
            "dropped": recorded - len(events),
            "max_events": self._max_events,
            "by_type": dict(by_type),
            "by_change": dict(by_change),
        }
