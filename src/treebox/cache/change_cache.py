"""Change cache — what each file looked like after its last dispatch.

Entries are keyed by tree-qualified ids (``"<namespace>/<relative path>"``)
so several trees can share one store without colliding.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from treebox._types import RelativePath
    from treebox.cache.store import Store


@dataclass(frozen=True, slots=True)
class CacheEntry:
    """Last known state of a file.

    Attributes:
        id: Relative POSIX path within the tree.
        modified: ``st_mtime_ns`` recorded at the last create/update/skip.
        hash: Hex content digest recorded at the last create/update.

    """

    id: RelativePath
    modified: int = 0
    hash: str = ""


class ChangeCache:
    """Tree-scoped view over a ``Store``.

    Args:
        store: Backing key/value store.
        namespace: Prefix qualifying every id written by this tree. An empty
            namespace stores bare relative paths.

    """

    __slots__ = ("_prefix", "namespace", "store")

    def __init__(self, store: Store, namespace: str = "") -> None:
        self.store = store
        self.namespace = namespace.strip("/")
        self._prefix = f"{self.namespace}/" if self.namespace else ""

    def key(self, path: RelativePath) -> str:
        """Return the tree-qualified id for ``path``."""
        return self._prefix + path

    def get(self, path: RelativePath) -> CacheEntry | None:
        raw = self.store.get(self.key(path))
        if raw is None:
            return None
        return CacheEntry(
            id=path,
            modified=int(raw.get("modified") or 0),
            hash=str(raw.get("hash") or ""),
        )

    def put(self, entry: CacheEntry) -> None:
        data = asdict(entry)
        del data["id"]
        self.store.put(self.key(entry.id), data)

    def delete(self, path: RelativePath) -> None:
        self.store.delete(self.key(path))

    def paths(self) -> list[RelativePath]:
        """Relative paths of every entry owned by this tree."""
        cut = len(self._prefix)
        return [k[cut:] for k in self.store.keys(self._prefix)]

    def paths_under(self, directory: RelativePath) -> list[RelativePath]:
        """Relative paths of cached entries below ``directory``."""
        prefix = directory.rstrip("/") + "/"
        return [p for p in self.paths() if p.startswith(prefix)]

    def flush(self) -> None:
        """Persist pending writes in the backing store."""
        self.store.flush()

    def __contains__(self, path: object) -> bool:
        return isinstance(path, str) and self.store.get(self.key(path)) is not None
