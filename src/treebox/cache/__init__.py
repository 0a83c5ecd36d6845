"""Cache layer — change cache, persistent stores, and content hashing."""

from treebox.cache.change_cache import CacheEntry, ChangeCache
from treebox.cache.hashing import hash_file, sha1_hex
from treebox.cache.store import JsonFileStore, MemoryStore, Store

__all__ = [
    "CacheEntry",
    "ChangeCache",
    "JsonFileStore",
    "MemoryStore",
    "Store",
    "hash_file",
    "sha1_hex",
]
