"""Event model for tree observability.

Defines the events recorded while scanning and watching a tree.

All events are frozen dataclasses with:
- ``timestamp_ns``: Monotonic nanosecond timestamp
- Descriptive fields for the specific event type

Thread Safety:
    All events are frozen (immutable) and safe to share across threads.

"""

import time
from dataclasses import dataclass
from typing import Literal


# ---------------------------------------------------------------------------
# Processing events
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class FileProcessed:
    """A classified file went through the dispatch path.

    Attributes:
        path: Relative path of the file.
        change_type: ``create``, ``update`` or ``delete``.
        handlers: Number of processors that ran for it.
        duration_ms: Time from the before-hook to the after-hook.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    path: str
    change_type: Literal["create", "update", "delete"]
    handlers: int
    duration_ms: float
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class ScanCompleted:
    """A full reconciliation pass finished.

    Attributes:
        root: Absolute root of the tree.
        created: Number of files classified create.
        updated: Number of files classified update.
        deleted: Number of cached entries classified delete.
        skipped: Number of unchanged files.
        duration_ms: Wall time of the pass.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    root: str
    created: int
    updated: int
    deleted: int
    skipped: int
    duration_ms: float
    timestamp_ns: int


# ---------------------------------------------------------------------------
# Live watch events
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class RenameDetected:
    """An unlink/add pair with identical content was treated as a rename."""

    old_path: str
    new_path: str
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class WatchStateChanged:
    """The live watcher moved to a new lifecycle state."""

    state: Literal["stopped", "starting", "running"]
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class WatchFailed:
    """A live batch was aborted by a handler or I/O failure.

    Attributes:
        path: Relative path being processed when the failure happened.
        error: ``"ExceptionType: message"``.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    path: str
    error: str
    timestamp_ns: int


# ---------------------------------------------------------------------------
# Union type
# ---------------------------------------------------------------------------

type TreeEvent = (
    FileProcessed
    | ScanCompleted
    | RenameDetected
    | WatchStateChanged
    | WatchFailed
)


def now_ns() -> int:
    """Return the current monotonic clock value in nanoseconds."""
    return time.monotonic_ns()
