"""Low-level filesystem notifications.

A notifier turns OS events for a directory subtree into batches of
``RawChange`` objects. The live watcher only depends on the ``Notifier``
protocol; ``WatchfilesNotifier`` is the production implementation.

Contract:
    The first batch yielded (possibly empty) confirms the subscription is
    active. Iteration ends once ``stop_event`` is set.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Literal, Protocol

from watchfiles import Change

if TYPE_CHECKING:
    import asyncio
    from collections.abc import AsyncIterator

    from treebox.config import TreeConfig

type ChangeKind = Literal["add", "change", "unlink"]


@dataclass(frozen=True, slots=True)
class RawChange:
    """A single low-level filesystem notification.

    Attributes:
        kind: ``add``, ``change`` or ``unlink``.
        path: Absolute path reported by the OS.

    """

    kind: ChangeKind
    path: Path


# Mapping from watchfiles Change enum to our kind literals.
_CHANGE_KIND_MAP: dict[Change, ChangeKind] = {
    Change.added: "add",
    Change.modified: "change",
    Change.deleted: "unlink",
}


class Notifier(Protocol):
    """Source of raw change batches for one directory subtree."""

    def changes(
        self, root: Path, stop_event: asyncio.Event,
    ) -> AsyncIterator[set[RawChange]]: ...


class WatchfilesNotifier:
    """Notifier backed by ``watchfiles.awatch``.

    Runs with ``yield_on_timeout`` so that an idle tree still produces an
    (empty) first batch once the native watcher is set up.

    Args:
        debounce_ms: Maximum time to group raw events into one batch.
        step_ms: Quiet period that closes a batch early.
        rust_timeout_ms: Idle wake-up interval.
        force_polling: Poll instead of using native notifications.

    """

    __slots__ = ("_debounce_ms", "_force_polling", "_rust_timeout_ms", "_step_ms")

    def __init__(
        self,
        *,
        debounce_ms: int = 200,
        step_ms: int = 50,
        rust_timeout_ms: int = 250,
        force_polling: bool = False,
    ) -> None:
        self._debounce_ms = debounce_ms
        self._step_ms = step_ms
        self._rust_timeout_ms = max(1, rust_timeout_ms)
        self._force_polling = force_polling

    @classmethod
    def from_config(cls, config: TreeConfig) -> WatchfilesNotifier:
        return cls(
            debounce_ms=config.debounce_ms,
            step_ms=config.step_ms,
            rust_timeout_ms=config.rust_timeout_ms,
            force_polling=config.force_polling,
        )

    async def changes(
        self, root: Path, stop_event: asyncio.Event,
    ) -> AsyncIterator[set[RawChange]]:
        """Yield batches of changes under ``root`` until ``stop_event`` is set."""
        from watchfiles import awatch

        async for raw_changes in awatch(
            root,
            watch_filter=None,
            debounce=self._debounce_ms,
            step=self._step_ms,
            stop_event=stop_event,
            rust_timeout=self._rust_timeout_ms,
            yield_on_timeout=True,
            force_polling=self._force_polling,
        ):
            yield {
                RawChange(kind=_CHANGE_KIND_MAP.get(change_type, "change"), path=Path(path_str))
                for change_type, path_str in raw_changes
            }
