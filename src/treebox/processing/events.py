"""Before/after hooks around each file's dispatch.

Observers are held in two explicit lists and called synchronously, in
subscription order. An observer that raises aborts the file like a failing
processor would.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from treebox._types import FileObserver
    from treebox.processing.file import SourceFile


class EventBus:
    """Observer lists for ``process_before`` and ``process_after``."""

    __slots__ = ("_after", "_before")

    def __init__(self) -> None:
        self._before: list[FileObserver] = []
        self._after: list[FileObserver] = []

    def on_before(self, observer: FileObserver) -> FileObserver:
        """Subscribe to the hook fired before a file is dispatched."""
        self._before.append(observer)
        return observer

    def on_after(self, observer: FileObserver) -> FileObserver:
        """Subscribe to the hook fired after a file's cache update."""
        self._after.append(observer)
        return observer

    def off_before(self, observer: FileObserver) -> None:
        if observer in self._before:
            self._before.remove(observer)

    def off_after(self, observer: FileObserver) -> None:
        if observer in self._after:
            self._after.remove(observer)

    def emit_before(self, file: SourceFile) -> None:
        for observer in tuple(self._before):
            observer(file)

    def emit_after(self, file: SourceFile) -> None:
        for observer in tuple(self._after):
            observer(file)
