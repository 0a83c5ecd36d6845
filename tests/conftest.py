"""Shared test fixtures for treebox."""

from __future__ import annotations

import asyncio
import threading
from pathlib import Path
from typing import TYPE_CHECKING

import pytest

from treebox.cache.store import MemoryStore
from treebox.watch.notifier import RawChange

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from treebox.processing.file import SourceFile


@pytest.fixture
def tmp_tree(tmp_path: Path) -> Path:
    """An empty source directory named ``source`` (the default tree id)."""
    root = tmp_path / "source"
    root.mkdir()
    return root


def write(root: Path, rel: str, content: str = "") -> Path:
    """Write ``content`` to ``root/rel``, creating parent directories."""
    path = root.joinpath(*rel.split("/"))
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    return path


class FakeClock:
    """Monotonic clock stepped by hand."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class ScriptedNotifier:
    """In-memory notifier driven by ``push()``.

    Yields an empty batch as soon as a subscription starts, then one batch
    per ``push()``. ``drain()`` waits until every pushed batch has been
    handled by the consumer.
    """

    def __init__(self, *, fail_on_start: BaseException | None = None) -> None:
        self.queue: asyncio.Queue[set[RawChange]] = asyncio.Queue()
        self.fail_on_start = fail_on_start
        self.subscriptions = 0
        self.closed = 0

    def push(self, root: Path, *changes: tuple[str, str]) -> None:
        """Queue one batch of ``(kind, relative path)`` changes under ``root``."""
        self.queue.put_nowait({
            RawChange(kind=kind, path=root.joinpath(*rel.split("/")))  # type: ignore[arg-type]
            for kind, rel in changes
        })

    def push_raw(self, *changes: RawChange) -> None:
        self.queue.put_nowait(set(changes))

    async def drain(self) -> None:
        await asyncio.wait_for(self.queue.join(), timeout=5)

    async def changes(
        self, root: Path, stop_event: asyncio.Event,
    ) -> AsyncIterator[set[RawChange]]:
        self.subscriptions += 1
        if self.fail_on_start is not None:
            raise self.fail_on_start
        try:
            yield set()
            while not stop_event.is_set():
                getter = asyncio.ensure_future(self.queue.get())
                stopper = asyncio.ensure_future(stop_event.wait())
                done, pending = await asyncio.wait(
                    {getter, stopper}, return_when=asyncio.FIRST_COMPLETED,
                )
                for task in pending:
                    task.cancel()
                if getter in done:
                    yield getter.result()
                    self.queue.task_done()
        finally:
            self.closed += 1


class Recorder:
    """Processor that records ``(type, path, params)`` for every call."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, str, dict[str, str]]] = []

    def __call__(self, file: SourceFile) -> None:
        self.calls.append((file.type.value, file.path, dict(file.params)))

    @property
    def events(self) -> list[tuple[str, str]]:
        return [(kind, path) for kind, path, _ in self.calls]


class ThreadRecordingStore(MemoryStore):
    """Memory store that remembers which thread each flush ran on."""

    __slots__ = ("flush_threads",)

    def __init__(self) -> None:
        super().__init__()
        self.flush_threads: list[int] = []

    def flush(self) -> None:
        self.flush_threads.append(threading.get_ident())


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()
