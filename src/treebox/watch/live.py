"""Live watcher — keeps a tree reconciled while it changes.

Lifecycle::

    stopped --watch()--> starting --subscription confirmed--> running
       ^                    |                                   |
       +----unwatch() / initial pass or notifier failure -------+

``watch()`` first runs a full scan (picking up anything changed while no one
was watching), then subscribes to the notifier. While running, each batch of
raw changes is handled in arrival order:

- Paths outside the root or matched by the ignore rules are dropped.
- add/change of a file: the hash is always recomputed (the event itself is
  proof of a change), then create if uncached, else update.
- add of a directory expands to every non-ignored file below it.
- unlink of a cached file (or of a directory holding cached files) is held
  by the rename coalescer. A matching add within the window becomes
  delete(old) then create(new); otherwise the hold turns into a delete.
- unlink of an unknown path is ignored.

A failing handler aborts the rest of its batch. The error is printed to
stderr and recorded, and the watcher keeps running.
"""

from __future__ import annotations

import asyncio
import sys
import time
from enum import StrEnum
from typing import TYPE_CHECKING

from treebox._errors import AlreadyWatchingError
from treebox.cache.hashing import hash_file, sha1_hex
from treebox.processing.differ import walk_tree
from treebox.processing.file import ChangeType, SourceFile, to_relative
from treebox.watch.coalescer import RenameCoalescer

if TYPE_CHECKING:
    from pathlib import Path

    from treebox._types import Clock, Hasher, RelativePath
    from treebox.cache.change_cache import ChangeCache
    from treebox.matching.ignore import IgnoreSet
    from treebox.observability.collector import TreeCollector
    from treebox.processing.differ import ScanDiffer
    from treebox.processing.dispatcher import FileDispatcher
    from treebox.watch.notifier import Notifier, RawChange

# Unlinks first so a rename's add can find its held unlink in the same batch
_KIND_ORDER = {"unlink": 0, "add": 1, "change": 1}

# Slack added to expiry timers so a hold is strictly past its deadline
_EXPIRY_SLACK = 0.01


class WatchState(StrEnum):
    """Lifecycle state of a live watcher."""

    STOPPED = "stopped"
    STARTING = "starting"
    RUNNING = "running"


class LiveWatcher:
    """Feeds live filesystem changes through the dispatch path.

    Args:
        root: Absolute tree root.
        ignore: Ignore rules for live events.
        cache: Change cache for this tree.
        dispatcher: Dispatch path shared with scans.
        scanner: Runs the reconciliation pass before subscribing.
        notifier: Source of raw change batches.
        hasher: Content hash function (the one scans use).
        rename_window: Seconds an unlink waits for a matching add.
        clock: Monotonic clock for the rename window.
        collector: Optional observability sink.

    """

    def __init__(
        self,
        root: Path,
        ignore: IgnoreSet,
        cache: ChangeCache,
        dispatcher: FileDispatcher,
        scanner: ScanDiffer,
        notifier: Notifier,
        *,
        hasher: Hasher = sha1_hex,
        rename_window: float = 0.3,
        clock: Clock = time.monotonic,
        collector: TreeCollector | None = None,
    ) -> None:
        self._root = root
        self._ignore = ignore
        self._cache = cache
        self._dispatcher = dispatcher
        self._scanner = scanner
        self._notifier = notifier
        self._hasher = hasher
        self._collector = collector
        self._coalescer = RenameCoalescer(rename_window, clock)
        # Serializes batch handling and hold expiry (one writer per path)
        self._lock = asyncio.Lock()
        self._state = WatchState.STOPPED
        self._stop_event: asyncio.Event | None = None
        self._task: asyncio.Task[None] | None = None
        self._expiry_timer: asyncio.TimerHandle | None = None
        self._expiry_task: asyncio.Future[None] | None = None

    @property
    def state(self) -> WatchState:
        return self._state

    @property
    def lock(self) -> asyncio.Lock:
        """Lock held while a batch or an expiry flush is being dispatched."""
        return self._lock

    @property
    def coalescer(self) -> RenameCoalescer:
        return self._coalescer

    def is_watching(self) -> bool:
        """True iff the subscription is confirmed and active."""
        return self._state is WatchState.RUNNING

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def watch(self) -> None:
        """Reconcile the tree, then subscribe to live changes.

        Resolves once the notifier has confirmed the subscription. If
        ``unwatch()`` is called meanwhile, resolves with the watcher stopped.

        Raises:
            AlreadyWatchingError: If not currently stopped.

        """
        if self._state is not WatchState.STOPPED:
            msg = "Watcher has already started."
            raise AlreadyWatchingError(msg)

        stop_event = asyncio.Event()
        self._stop_event = stop_event
        self._set_state(WatchState.STARTING)

        try:
            async with self._lock:
                await self._scanner.process()
        except BaseException:
            self._reset(stop_event)
            raise
        if stop_event.is_set():
            return

        ready: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        self._task = asyncio.create_task(
            self._run(stop_event, ready), name="treebox-watcher",
        )
        try:
            await ready
        except BaseException:
            self._reset(stop_event)
            raise

        if self._stop_event is stop_event and not stop_event.is_set():
            self._set_state(WatchState.RUNNING)

    def unwatch(self) -> None:
        """Stop watching. Idempotent; in-flight handlers are not cancelled.

        Held unlinks are dropped; the next ``process()`` reconciles them.
        """
        if self._state is WatchState.STOPPED or self._stop_event is None:
            return
        self._reset(self._stop_event)

    async def wait_closed(self) -> None:
        """Wait until the notifier task has finished."""
        task = self._task
        if task is not None:
            await asyncio.wait({task})

    def _reset(self, stop_event: asyncio.Event) -> None:
        stop_event.set()
        if self._stop_event is not stop_event:
            return
        self._stop_event = None
        if self._expiry_timer is not None:
            self._expiry_timer.cancel()
            self._expiry_timer = None
        self._coalescer.drain()
        self._set_state(WatchState.STOPPED)

    def _set_state(self, state: WatchState) -> None:
        self._state = state
        if self._collector is not None:
            self._collector.record_state(state.value)

    async def _run(self, stop_event: asyncio.Event, ready: asyncio.Future[None]) -> None:
        """Notifier loop: confirm readiness, then handle batches until stopped."""
        try:
            async for batch in self._notifier.changes(self._root, stop_event):
                if not ready.done():
                    ready.set_result(None)
                if stop_event.is_set():
                    break
                if batch:
                    await self.handle_batch(batch)
        except Exception as exc:
            if not ready.done():
                ready.set_exception(exc)
            else:
                self._report("", exc)
        finally:
            if not ready.done():
                ready.set_result(None)
            self._reset(stop_event)

    # ------------------------------------------------------------------
    # Batch handling
    # ------------------------------------------------------------------

    async def handle_batch(self, batch: set[RawChange] | list[RawChange]) -> None:
        """Reconcile one batch of raw changes.

        Holds that already expired are deleted first, then unlinks are handled
        before adds and changes. A failure aborts the remaining changes of the
        batch and is reported, not raised.
        """
        changes = sorted(batch, key=lambda c: (_KIND_ORDER.get(c.kind, 1), str(c.path)))
        async with self._lock:
            seen: set[RelativePath] = set()
            current = ""
            try:
                await self._flush_expired_locked()
                for change in changes:
                    rel = to_relative(self._root, change.path)
                    if rel is None:
                        continue
                    current = rel
                    if change.kind == "unlink":
                        self._on_unlink(rel)
                    else:
                        await self._on_upsert(rel, change.kind, seen)
            except Exception as exc:
                self._report(current, exc)
            finally:
                await asyncio.to_thread(self._cache.flush)
                self._schedule_expiry()

    def _on_unlink(self, rel: RelativePath) -> None:
        entry = self._cache.get(rel)
        if entry is not None:
            if not self._ignore.test(rel):
                self._coalescer.hold(rel, entry.hash)
            return

        # A removed directory reports only itself
        for path in sorted(self._cache.paths_under(rel)):
            if path in self._coalescer or self._ignore.test(path):
                continue
            held = self._cache.get(path)
            self._coalescer.hold(path, held.hash if held is not None else "")

    async def _on_upsert(self, rel: RelativePath, kind: str, seen: set[RelativePath]) -> None:
        source = self._root.joinpath(*rel.split("/"))
        if await asyncio.to_thread(source.is_dir):
            if kind != "add" or self._ignore.test(rel + "/"):
                return
            files = await asyncio.to_thread(walk_tree, self._root, self._ignore, rel)
            for path in files or ():
                await self._upsert_file(path, seen)
            return

        if not self._ignore.test(rel):
            await self._upsert_file(rel, seen)

    async def _upsert_file(self, rel: RelativePath, seen: set[RelativePath]) -> None:
        """Hash, pair with a held unlink if possible, then create or update."""
        if rel in seen:
            return
        seen.add(rel)

        source = self._root.joinpath(*rel.split("/"))
        try:
            stats = await asyncio.to_thread(source.stat)
            digest = await asyncio.to_thread(hash_file, source, self._hasher)
        except FileNotFoundError:
            return

        if not self._coalescer.cancel(rel):
            old = self._coalescer.claim(digest)
            # A pass may have deleted the old path while it was held
            if old is not None and self._cache.get(old) is not None:
                if self._collector is not None:
                    self._collector.record_rename(old, rel)
                await self._dispatcher.run(
                    SourceFile.in_tree(self._root, old, ChangeType.DELETE),
                )

        change = ChangeType.CREATE if self._cache.get(rel) is None else ChangeType.UPDATE
        await self._dispatcher.run(
            SourceFile(path=rel, source=source, type=change),
            modified=stats.st_mtime_ns,
            content_hash=digest,
        )

    # ------------------------------------------------------------------
    # Hold expiry
    # ------------------------------------------------------------------

    async def flush_expired(self) -> list[RelativePath]:
        """Dispatch deletes for holds whose rename window has elapsed."""
        async with self._lock:
            try:
                return await self._flush_expired_locked()
            finally:
                await asyncio.to_thread(self._cache.flush)
                self._schedule_expiry()

    async def _flush_expired_locked(self) -> list[RelativePath]:
        # Paths a pass already deleted while held are dropped
        expired = [
            path for path in self._coalescer.expired() if self._cache.get(path) is not None
        ]
        for path in expired:
            await self._dispatcher.run(SourceFile.in_tree(self._root, path, ChangeType.DELETE))
        return expired

    def _schedule_expiry(self) -> None:
        if self._expiry_timer is not None:
            self._expiry_timer.cancel()
            self._expiry_timer = None
        if self._stop_event is None:
            return
        delay = self._coalescer.seconds_until_next()
        if delay is None:
            return
        loop = asyncio.get_running_loop()
        self._expiry_timer = loop.call_later(delay + _EXPIRY_SLACK, self._on_expiry_timer)

    def _on_expiry_timer(self) -> None:
        self._expiry_timer = None
        if self._stop_event is not None:
            self._expiry_task = asyncio.ensure_future(self._expire())

    async def _expire(self) -> None:
        try:
            await self.flush_expired()
        except Exception as exc:
            self._report("", exc)

    def _report(self, path: RelativePath, exc: BaseException) -> None:
        """Print a live failure to stderr and record it."""
        where = path or self._root.name
        print(f"  Watch error ({where}): {type(exc).__name__}: {exc}", file=sys.stderr)
        if self._collector is not None:
            self._collector.record_failure(path, exc)
