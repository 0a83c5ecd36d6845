"""Scan differ — one cold reconciliation pass over a tree.

Walks the tree, compares every file against the change cache, and routes
the changed ones through the dispatcher:

    no cache entry                    -> create
    entry, same mtime                 -> skip (content is not re-read)
    entry, new mtime, same hash       -> skip (mtime refreshed)
    entry, new mtime, different hash  -> update
    entry, no file on disk            -> delete

Skips are never dispatched. Deletes run before creates and updates.

The same-mtime fast path trusts the mtime: a file rewritten with different
content but an unchanged mtime stays a skip until its mtime moves.
"""

from __future__ import annotations

import asyncio
import os
import time
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from treebox.cache.change_cache import CacheEntry
from treebox.cache.hashing import hash_file, sha1_hex
from treebox.processing.file import ChangeType, SourceFile

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Sequence

    from treebox._types import Hasher, RelativePath
    from treebox.cache.change_cache import ChangeCache
    from treebox.matching.ignore import IgnoreSet
    from treebox.observability.collector import TreeCollector
    from treebox.processing.dispatcher import FileDispatcher


@dataclass(frozen=True, slots=True)
class ScanSummary:
    """Outcome of one reconciliation pass.

    Attributes:
        created: Paths dispatched as create.
        updated: Paths dispatched as update.
        deleted: Paths dispatched as delete.
        skipped: Paths found unchanged.
        duration_ms: Wall time of the pass.

    """

    created: tuple[RelativePath, ...] = ()
    updated: tuple[RelativePath, ...] = ()
    deleted: tuple[RelativePath, ...] = ()
    skipped: tuple[RelativePath, ...] = ()
    duration_ms: float = 0.0

    @property
    def changed(self) -> int:
        """Number of files that were dispatched."""
        return len(self.created) + len(self.updated) + len(self.deleted)


def walk_tree(
    root: Path, ignore: IgnoreSet, subdir: RelativePath = "",
) -> list[RelativePath] | None:
    """List regular files under ``root`` as sorted relative POSIX paths.

    Ignored directories are not descended into and directory symlinks are
    not followed. Directories that vanish mid-walk are skipped. Blocking;
    run via ``asyncio.to_thread``.

    Args:
        root: Tree root; returned paths are relative to it.
        ignore: Ignore rules, tested against root-relative paths.
        subdir: Restrict the walk to this directory below ``root``.

    Returns:
        The file list, or ``None`` if the walked directory does not exist.

    """
    start = root.joinpath(*subdir.split("/")) if subdir else root
    if not start.is_dir():
        return None

    found: list[RelativePath] = []
    stack: list[tuple[str, str]] = [(str(start), f"{subdir}/" if subdir else "")]
    while stack:
        directory, prefix = stack.pop()
        try:
            with os.scandir(directory) as it:
                entries = list(it)
        except FileNotFoundError:
            continue

        for entry in entries:
            rel = prefix + entry.name
            if entry.is_dir(follow_symlinks=False):
                if not ignore.test(rel + "/"):
                    stack.append((entry.path, rel + "/"))
            elif entry.is_file() and not ignore.test(rel):
                found.append(rel)

    found.sort()
    return found


def first_error(group: BaseExceptionGroup) -> BaseException:
    """Return the first leaf exception of a (possibly nested) group."""
    exc: BaseException = group
    while isinstance(exc, BaseExceptionGroup):
        exc = exc.exceptions[0]
    return exc


class ScanDiffer:
    """Classifies and dispatches every file of a tree.

    Args:
        root: Absolute tree root.
        ignore: Ignore rules applied to directories and files.
        cache: Change cache for this tree.
        dispatcher: Dispatch path for classified files.
        hasher: Content hash function.
        concurrency: Maximum files in flight at once.
        collector: Optional observability sink.

    """

    __slots__ = (
        "_cache", "_collector", "_concurrency", "_dispatcher",
        "_hasher", "_ignore", "_root",
    )

    def __init__(
        self,
        root: Path,
        ignore: IgnoreSet,
        cache: ChangeCache,
        dispatcher: FileDispatcher,
        *,
        hasher: Hasher = sha1_hex,
        concurrency: int = 8,
        collector: TreeCollector | None = None,
    ) -> None:
        self._root = root
        self._ignore = ignore
        self._cache = cache
        self._dispatcher = dispatcher
        self._hasher = hasher
        self._concurrency = concurrency
        self._collector = collector

    async def process(self) -> ScanSummary:
        """Run one full reconciliation pass.

        A missing root is a successful pass over zero files. The first
        handler or I/O failure cancels the rest of the pass and is re-raised
        as-is; cache writes for files that completed are still flushed.

        """
        t0 = time.perf_counter()
        files = await asyncio.to_thread(walk_tree, self._root, self._ignore)
        if files is None:
            return ScanSummary()

        discovered = set(files)
        removed = sorted(p for p in self._cache.paths() if p not in discovered)

        outcome: dict[ChangeType, list[RelativePath]] = {t: [] for t in ChangeType}
        semaphore = asyncio.Semaphore(self._concurrency)
        try:
            await self._run_all(removed, self._delete, semaphore, outcome)
            await self._run_all(files, self._reconcile, semaphore, outcome)
        finally:
            await asyncio.to_thread(self._cache.flush)

        summary = ScanSummary(
            created=tuple(sorted(outcome[ChangeType.CREATE])),
            updated=tuple(sorted(outcome[ChangeType.UPDATE])),
            deleted=tuple(sorted(outcome[ChangeType.DELETE])),
            skipped=tuple(sorted(outcome[ChangeType.SKIP])),
            duration_ms=(time.perf_counter() - t0) * 1000,
        )
        if self._collector is not None:
            self._collector.record_scan(
                str(self._root),
                created=len(summary.created),
                updated=len(summary.updated),
                deleted=len(summary.deleted),
                skipped=len(summary.skipped),
                duration_ms=summary.duration_ms,
            )
        return summary

    async def _run_all(
        self,
        paths: Sequence[RelativePath],
        step: Callable[[RelativePath], Awaitable[ChangeType | None]],
        semaphore: asyncio.Semaphore,
        outcome: dict[ChangeType, list[RelativePath]],
    ) -> None:
        """Run ``step`` over ``paths`` with bounded parallelism, fail-fast."""
        if not paths:
            return

        async def bounded(path: RelativePath) -> None:
            async with semaphore:
                change = await step(path)
            if change is not None:
                outcome[change].append(path)

        try:
            async with asyncio.TaskGroup() as tg:
                for path in paths:
                    tg.create_task(bounded(path))
        except ExceptionGroup as group:
            raise first_error(group) from None

    async def _reconcile(self, path: RelativePath) -> ChangeType | None:
        """Classify one discovered file and dispatch it if it changed.

        Returns ``None`` when the file vanished before it could be read.
        """
        source = self._root.joinpath(*path.split("/"))
        try:
            stats = await asyncio.to_thread(source.stat)
        except FileNotFoundError:
            return None
        modified = stats.st_mtime_ns

        entry = self._cache.get(path)
        if entry is not None and entry.modified == modified:
            return ChangeType.SKIP

        try:
            digest = await asyncio.to_thread(hash_file, source, self._hasher)
        except FileNotFoundError:
            return None

        if entry is None:
            change = ChangeType.CREATE
        elif entry.hash == digest:
            self._cache.put(CacheEntry(id=path, modified=modified, hash=entry.hash))
            return ChangeType.SKIP
        else:
            change = ChangeType.UPDATE

        file = SourceFile(path=path, source=source, type=change)
        await self._dispatcher.run(file, modified=modified, content_hash=digest)
        return change

    async def _delete(self, path: RelativePath) -> ChangeType:
        file = SourceFile.in_tree(self._root, path, ChangeType.DELETE)
        await self._dispatcher.run(file)
        return ChangeType.DELETE
