"""Observability — what a tree processed, and when.

All events are frozen dataclasses with nanosecond timestamps, safe for
concurrent production from scan workers and the live watcher.

Quick Start:
    >>> from treebox.observability import TreeCollector, EventLog
    >>> log = EventLog()
    >>> collector = TreeCollector(log)
    >>> # Pass collector to SourceTree(..., collector=collector)
    >>> # then inspect log.query(event_type=FileProcessed)

"""

from treebox.observability.collector import TreeCollector
from treebox.observability.events import (
    FileProcessed,
    RenameDetected,
    ScanCompleted,
    TreeEvent,
    WatchFailed,
    WatchStateChanged,
    now_ns,
)
from treebox.observability.log import EventLog

__all__ = [
    "EventLog",
    "FileProcessed",
    "RenameDetected",
    "ScanCompleted",
    "TreeCollector",
    "TreeEvent",
    "WatchFailed",
    "WatchStateChanged",
    "now_ns",
]
