"""Classified files — the object every processor receives."""

from __future__ import annotations

import asyncio
import os
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from treebox._types import Params, RelativePath


class ChangeType(StrEnum):
    """How a file changed since the last pass."""

    CREATE = "create"
    UPDATE = "update"
    SKIP = "skip"
    DELETE = "delete"


def to_relative(root: Path, path: Path) -> RelativePath | None:
    """Return ``path`` relative to ``root`` in POSIX form, or None if outside."""
    try:
        rel = path.relative_to(root)
    except ValueError:
        return None
    if not rel.parts:
        return None
    return rel.as_posix()


@dataclass(slots=True)
class SourceFile:
    """One file as seen by a processing event.

    A fresh instance is created per event, so ``params`` (set by the
    registry before each matching handler runs) is private to it.

    Attributes:
        path: Relative POSIX path within the tree (unique key).
        source: Absolute path on disk. For deletes the file no longer exists.
        type: Classification for this event.
        params: Captures from the matching processor's pattern.

    """

    path: RelativePath
    source: Path
    type: ChangeType
    params: Params = field(default_factory=dict)

    @classmethod
    def in_tree(cls, root: Path, path: RelativePath, type: ChangeType) -> SourceFile:  # noqa: A002
        """Build a file for ``path`` under ``root``."""
        return cls(path=path, source=root.joinpath(*path.split("/")), type=type)

    async def read_bytes(self) -> bytes:
        """Read the file's content in a worker thread."""
        return await asyncio.to_thread(self.source.read_bytes)

    async def read_text(self, encoding: str = "utf-8") -> str:
        """Read the file's content as text in a worker thread."""
        return await asyncio.to_thread(self.source.read_text, encoding)

    async def stat(self) -> os.stat_result:
        """Stat the file in a worker thread."""
        return await asyncio.to_thread(self.source.stat)
