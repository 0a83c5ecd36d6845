"""Persistent key/value stores backing the change cache.

A store maps string keys to small JSON-compatible dicts. ``MemoryStore`` is
process-local; ``JsonFileStore`` survives restarts by writing one JSON
document atomically on ``flush()``.

Thread Safety:
    Stores are owned by a single tree and touched only from its event loop.
    ``JsonFileStore.flush()`` guards the write with a ``threading.Lock`` so a
    flush from a worker thread cannot interleave with another.

"""

from __future__ import annotations

import json
import os
import threading
from collections.abc import Iterator
from pathlib import Path
from typing import Any, Protocol

from treebox._errors import StoreError


class Store(Protocol):
    """Durable key/value persistence used by ``ChangeCache``."""

    def get(self, key: str) -> dict[str, Any] | None: ...

    def put(self, key: str, value: dict[str, Any]) -> None: ...

    def delete(self, key: str) -> None: ...

    def keys(self, prefix: str = "") -> Iterator[str]: ...

    def flush(self) -> None: ...


class MemoryStore:
    """Dict-backed store. Nothing is persisted."""

    __slots__ = ("_data",)

    def __init__(self, data: dict[str, dict[str, Any]] | None = None) -> None:
        self._data: dict[str, dict[str, Any]] = dict(data) if data else {}

    def get(self, key: str) -> dict[str, Any] | None:
        value = self._data.get(key)
        return dict(value) if value is not None else None

    def put(self, key: str, value: dict[str, Any]) -> None:
        self._data[key] = dict(value)

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self, prefix: str = "") -> Iterator[str]:
        # Snapshot so callers may mutate while iterating
        return iter([k for k in self._data if k.startswith(prefix)])

    def flush(self) -> None:
        pass

    def __len__(self) -> int:
        return len(self._data)


class JsonFileStore(MemoryStore):
    """Store persisted as a single JSON document.

    The file is read once on construction. Writes stay in memory until
    ``flush()``, which writes to a temp file next to the target and swaps it
    in with ``os.replace``.

    Args:
        path: Location of the JSON document. Parent directories are created
            on first flush.

    Raises:
        StoreError: If an existing file is not a JSON object.

    """

    __slots__ = ("_dirty", "_lock", "path")

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()
        self._dirty = False
        super().__init__(self._load())

    def _load(self) -> dict[str, dict[str, Any]]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            msg = f"Corrupt cache file {self.path}: {exc}"
            raise StoreError(msg) from exc
        if not isinstance(data, dict):
            msg = f"Cache file {self.path} must contain a JSON object"
            raise StoreError(msg)
        return {k: v for k, v in data.items() if isinstance(v, dict)}

    def put(self, key: str, value: dict[str, Any]) -> None:
        super().put(key, value)
        self._dirty = True

    def delete(self, key: str) -> None:
        if key in self._data:
            super().delete(key)
            self._dirty = True

    def flush(self) -> None:
        """Write pending changes to disk. No-op when nothing changed."""
        with self._lock:
            if not self._dirty:
                return
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp = self.path.with_name(f".{self.path.name}.tmp")
            tmp.write_text(
                json.dumps(self._data, indent=2, sort_keys=True) + "\n",
                encoding="utf-8",
            )
            os.replace(tmp, self.path)
            self._dirty = False
