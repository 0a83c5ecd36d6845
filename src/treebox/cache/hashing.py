"""Content hashing shared by scans and the live watcher."""

from __future__ import annotations

import hashlib
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path

    from treebox._types import Hasher


def sha1_hex(data: bytes) -> str:
    """Default content hash: SHA-1 hex digest."""
    return hashlib.sha1(data).hexdigest()  # noqa: S324


def hash_file(path: Path, hasher: Hasher = sha1_hex) -> str:
    """Read ``path`` and return its content digest.

    Blocking; callers on the event loop run it via ``asyncio.to_thread``.

    Raises:
        FileNotFoundError: If the file vanished before it could be read.

    """
    return hasher(path.read_bytes())
