"""SourceTree — the public facade over one source directory.

Wires the building blocks together for a single tree::

    IgnoreSet ──> ScanDiffer ──┐
                               ├──> FileDispatcher ──> ProcessorRegistry
    Notifier ──> LiveWatcher ──┘          │                  │
                                          ├── EventBus (before/after)
                                          └── ChangeCache ──> Store

``process()`` runs one reconciliation pass. ``watch()`` runs a pass and then
follows live changes until ``unwatch()``.
"""

from __future__ import annotations

import os
import time
from dataclasses import replace
from typing import TYPE_CHECKING

from treebox.cache.change_cache import ChangeCache
from treebox.cache.hashing import sha1_hex
from treebox.cache.store import JsonFileStore, MemoryStore
from treebox.config import TreeConfig
from treebox.matching.ignore import IgnoreSet, normalize_ignore
from treebox.processing.differ import ScanDiffer
from treebox.processing.dispatcher import FileDispatcher
from treebox.processing.events import EventBus
from treebox.processing.registry import ProcessorRegistry, split_registration
from treebox.watch.live import LiveWatcher
from treebox.watch.notifier import WatchfilesNotifier

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from pathlib import Path

    from treebox._types import Clock, FileObserver, Handler, Hasher
    from treebox.cache.store import Store
    from treebox.matching.pattern import PatternSpec
    from treebox.observability.collector import TreeCollector
    from treebox.processing.differ import ScanSummary
    from treebox.processing.registry import ProcessorEntry
    from treebox.watch.live import WatchState
    from treebox.watch.notifier import Notifier


class SourceTree:
    """Incremental processing for one directory tree.

    Args:
        root: Directory to process. Resolved to an absolute path.
        ignore: Gitignore-style pattern(s). ``None`` uses the config's.
        store: Backing store for the change cache. Defaults to a
            ``JsonFileStore`` when the config names a ``cache_path``,
            else an in-memory store.
        tree_id: Namespace for cache ids. Defaults to the root's name.
        hasher: Content hash function.
        notifier: Live change source. Defaults to ``WatchfilesNotifier``.
        clock: Monotonic clock used for rename pairing.
        config: Base configuration. ``root`` and ``ignore`` arguments win.
        collector: Optional observability sink.

    """

    def __init__(
        self,
        root: Path | str,
        ignore: str | Sequence[str | None] | None = None,
        *,
        store: Store | None = None,
        tree_id: str | None = None,
        hasher: Hasher = sha1_hex,
        notifier: Notifier | None = None,
        clock: Clock = time.monotonic,
        config: TreeConfig | None = None,
        collector: TreeCollector | None = None,
    ) -> None:
        overrides: dict[str, object] = {"root": root}
        if ignore is not None:
            overrides["ignore"] = normalize_ignore(ignore)
        if tree_id is not None:
            overrides["tree_id"] = tree_id
        config = replace(config if config is not None else TreeConfig(), **overrides)

        self._config = config
        self._ignore = IgnoreSet(config.ignore)
        if store is None:
            store = JsonFileStore(config.cache_path) if config.cache_path else MemoryStore()
        self._cache = ChangeCache(store, config.namespace)
        self._registry = ProcessorRegistry()
        self._bus = EventBus()
        self._collector = collector

        self._dispatcher = FileDispatcher(self._registry, self._bus, self._cache, collector)
        self._differ = ScanDiffer(
            config.root,
            self._ignore,
            self._cache,
            self._dispatcher,
            hasher=hasher,
            concurrency=config.concurrency,
            collector=collector,
        )
        self._watcher = LiveWatcher(
            config.root,
            self._ignore,
            self._cache,
            self._dispatcher,
            self._differ,
            notifier if notifier is not None else WatchfilesNotifier.from_config(config),
            hasher=hasher,
            rename_window=config.rename_window,
            clock=clock,
            collector=collector,
        )

    @classmethod
    def from_config(cls, config: TreeConfig, **kwargs: object) -> SourceTree:
        """Build a tree from ``config`` (see ``treebox.load_config``)."""
        return cls(config.root, config=config, **kwargs)  # type: ignore[arg-type]

    # -- Properties --------------------------------------------------------

    @property
    def root(self) -> Path:
        return self._config.root

    @property
    def base(self) -> str:
        """Root path with a trailing separator."""
        return str(self._config.root) + os.sep

    @property
    def config(self) -> TreeConfig:
        return self._config

    @property
    def ignore(self) -> IgnoreSet:
        return self._ignore

    @property
    def processors(self) -> tuple[ProcessorEntry, ...]:
        """Registered processors in registration order."""
        return self._registry.entries

    @property
    def cache(self) -> ChangeCache:
        return self._cache

    @property
    def state(self) -> WatchState:
        return self._watcher.state

    @property
    def collector(self) -> TreeCollector | None:
        return self._collector

    # -- Processors --------------------------------------------------------

    def add_processor(
        self,
        pattern_or_handler: PatternSpec | Handler,
        handler: Handler | None = None,
    ) -> ProcessorEntry:
        """Register a processor.

        ``add_processor(handler)`` matches every path;
        ``add_processor(pattern, handler)`` matches ``pattern``.

        Raises:
            InvalidArgumentError: If no callable handler is given.

        """
        pattern, resolved = split_registration(pattern_or_handler, handler)
        return self._registry.add(resolved, pattern)

    def processor(self, pattern: PatternSpec = None) -> Callable[[Handler], Handler]:
        """Decorator form of ``add_processor``.

        Example::

            @tree.processor("posts/:slug")
            def render(file): ...

        """
        return self._registry.decorator(pattern)

    # -- Hooks -------------------------------------------------------------

    def on_before(self, observer: FileObserver) -> FileObserver:
        """Call ``observer(file)`` before each file is dispatched."""
        return self._bus.on_before(observer)

    def on_after(self, observer: FileObserver) -> FileObserver:
        """Call ``observer(file)`` after each file's cache update."""
        return self._bus.on_after(observer)

    def off_before(self, observer: FileObserver) -> None:
        self._bus.off_before(observer)

    def off_after(self, observer: FileObserver) -> None:
        self._bus.off_after(observer)

    # -- Running -----------------------------------------------------------

    async def process(self) -> ScanSummary:
        """Run one full reconciliation pass over the tree."""
        async with self._watcher.lock:
            return await self._differ.process()

    async def watch(self) -> None:
        """Reconcile the tree, then follow live changes.

        Raises:
            AlreadyWatchingError: If the tree is already watching or starting.

        """
        await self._watcher.watch()

    def unwatch(self) -> None:
        """Stop watching. Safe to call when not watching."""
        self._watcher.unwatch()

    def is_watching(self) -> bool:
        return self._watcher.is_watching()

    async def wait_closed(self) -> None:
        """Wait for the live watcher's notifier task to finish."""
        await self._watcher.wait_closed()

    def __repr__(self) -> str:
        return f"SourceTree({str(self.root)!r}, state={self.state.value!r})"

