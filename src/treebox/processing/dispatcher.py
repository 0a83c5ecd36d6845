"""File dispatcher — the one path every classified file takes.

Orchestrates, strictly in order, for a single file:
    1. ``EventBus.emit_before``
    2. ``ProcessorRegistry.dispatch`` (all matching handlers, awaited)
    3. Change cache update (put on create/update, delete on delete)
    4. ``EventBus.emit_after``
    5. Observability record

Scans and the live watcher both go through here, so the cache only ever
reflects fully completed dispatches.
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING

from treebox.cache.change_cache import CacheEntry
from treebox.processing.file import ChangeType

if TYPE_CHECKING:
    from treebox.cache.change_cache import ChangeCache
    from treebox.observability.collector import TreeCollector
    from treebox.processing.events import EventBus
    from treebox.processing.file import SourceFile
    from treebox.processing.registry import ProcessorRegistry


class FileDispatcher:
    """Runs classified files through hooks, processors and the cache.

    Args:
        registry: Processors to dispatch to.
        bus: Before/after observers.
        cache: Change cache updated after a successful dispatch.
        collector: Optional observability sink.

    """

    __slots__ = ("_bus", "_cache", "_collector", "_registry")

    def __init__(
        self,
        registry: ProcessorRegistry,
        bus: EventBus,
        cache: ChangeCache,
        collector: TreeCollector | None = None,
    ) -> None:
        self._registry = registry
        self._bus = bus
        self._cache = cache
        self._collector = collector

    async def run(
        self,
        file: SourceFile,
        *,
        modified: int = 0,
        content_hash: str = "",
    ) -> int:
        """Dispatch ``file`` and record the result in the cache.

        Args:
            file: The classified file (create, update or delete).
            modified: ``st_mtime_ns`` to store on create/update.
            content_hash: Content digest to store on create/update.

        Returns:
            Number of handlers that ran.

        """
        t0 = time.perf_counter()
        self._bus.emit_before(file)
        handlers = await self._registry.dispatch(file)

        if file.type is ChangeType.DELETE:
            self._cache.delete(file.path)
        else:
            self._cache.put(CacheEntry(id=file.path, modified=modified, hash=content_hash))

        self._bus.emit_after(file)

        if self._collector is not None:
            self._collector.record_file(
                file.path,
                file.type.value,
                handlers=handlers,
                duration_ms=(time.perf_counter() - t0) * 1000,
            )
        return handlers
