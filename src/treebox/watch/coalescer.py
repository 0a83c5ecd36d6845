"""Rename coalescing — pair an unlink with a later add of identical content.

An unlink is not dispatched straight away. It is held for ``window``
seconds; if an add with the same content hash arrives in that time, the two
are emitted together as ``delete(old)`` then ``create(new)``. Holds that
outlive the window become plain deletes.

Time comes from an injectable clock so tests can step it by hand.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from treebox._types import Clock, RelativePath


@dataclass(slots=True)
class _Hold:
    path: RelativePath
    hash: str
    deadline: float


class RenameCoalescer:
    """Held unlinks waiting for a matching add.

    Args:
        window: Seconds an unlink stays eligible for pairing.
        clock: Monotonic clock in seconds.

    """

    __slots__ = ("_clock", "_holds", "window")

    def __init__(self, window: float = 0.3, clock: Clock = time.monotonic) -> None:
        self.window = window
        self._clock = clock
        # Insertion order is unlink order
        self._holds: dict[RelativePath, _Hold] = {}

    def hold(self, path: RelativePath, content_hash: str) -> None:
        """Hold an unlink of ``path`` whose last known hash is ``content_hash``."""
        self._holds.pop(path, None)
        self._holds[path] = _Hold(path, content_hash, self._clock() + self.window)

    def cancel(self, path: RelativePath) -> bool:
        """Drop the hold for ``path`` (it was re-added). Returns True if held."""
        return self._holds.pop(path, None) is not None

    def claim(self, content_hash: str) -> RelativePath | None:
        """Take the oldest in-window hold with ``content_hash``, if any.

        Holds with an unknown (empty) hash never pair.
        """
        if not content_hash:
            return None
        now = self._clock()
        for path, held in self._holds.items():
            if held.hash == content_hash and now <= held.deadline:
                del self._holds[path]
                return path
        return None

    def expired(self) -> list[RelativePath]:
        """Remove and return holds whose window has elapsed, oldest first."""
        now = self._clock()
        paths = [p for p, held in self._holds.items() if now > held.deadline]
        for path in paths:
            del self._holds[path]
        return paths

    def drain(self) -> list[RelativePath]:
        """Remove and return every hold, oldest first."""
        paths = list(self._holds)
        self._holds.clear()
        return paths

    def next_deadline(self) -> float | None:
        """Earliest deadline among current holds."""
        if not self._holds:
            return None
        return min(held.deadline for held in self._holds.values())

    def seconds_until_next(self) -> float | None:
        deadline = self.next_deadline()
        if deadline is None:
            return None
        return max(0.0, deadline - self._clock())

    def __contains__(self, path: object) -> bool:
        return path in self._holds

    def __len__(self) -> int:
        return len(self._holds)
