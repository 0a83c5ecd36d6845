"""Tree collector — records scan and watch activity into an event log.

The dispatch path, the scan differ and the live watcher call the
``record_*`` methods; everything lands in one ``EventLog``.

Thread Safety:
    The collector delegates to ``EventLog`` which is internally locked.

"""

from __future__ import annotations

from treebox.observability.events import (
    FileProcessed,
    RenameDetected,
    ScanCompleted,
    WatchFailed,
    WatchStateChanged,
    now_ns,
)
from treebox.observability.log import EventLog


class TreeCollector:
    """Event collector for one or more trees.

    Args:
        log: The EventLog to store events in.

    """

    __slots__ = ("_log",)

    def __init__(self, log: EventLog | None = None) -> None:
        self._log = log if log is not None else EventLog()

    @property
    def log(self) -> EventLog:
        """The underlying event log."""
        return self._log

    # ----- Processing -----

    def record_file(
        self,
        path: str,
        change_type: str,
        *,
        handlers: int = 0,
        duration_ms: float = 0.0,
    ) -> None:
        """Record a file that went through the dispatch path."""
        self._log.append(
            FileProcessed(
                path=path,
                change_type=change_type,  # type: ignore[arg-type]
                handlers=handlers,
                duration_ms=duration_ms,
                timestamp_ns=now_ns(),
            )
        )

    def record_scan(
        self,
        root: str,
        *,
        created: int = 0,
        updated: int = 0,
        deleted: int = 0,
        skipped: int = 0,
        duration_ms: float = 0.0,
    ) -> None:
        """Record a completed reconciliation pass."""
        self._log.append(
            ScanCompleted(
                root=root,
                created=created,
                updated=updated,
                deleted=deleted,
                skipped=skipped,
                duration_ms=duration_ms,
                timestamp_ns=now_ns(),
            )
        )

    # ----- Live watch -----

    def record_rename(self, old_path: str, new_path: str) -> None:
        """Record an unlink/add pair coalesced into a rename."""
        self._log.append(
            RenameDetected(old_path=old_path, new_path=new_path, timestamp_ns=now_ns())
        )

    def record_state(self, state: str) -> None:
        """Record a watcher lifecycle transition."""
        self._log.append(
            WatchStateChanged(state=state, timestamp_ns=now_ns())  # type: ignore[arg-type]
        )

    def record_failure(self, path: str, exc: BaseException) -> None:
        """Record a live batch aborted by ``exc``."""
        self._log.append(
            WatchFailed(
                path=path,
                error=f"{type(exc).__name__}: {exc}",
                timestamp_ns=now_ns(),
            )
        )
