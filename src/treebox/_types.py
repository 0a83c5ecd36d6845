"""Shared type definitions for treebox."""

from collections.abc import Callable
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from treebox.processing.file import SourceFile

# POSIX-style path relative to the tree root (e.g. "posts/hello.md")
type RelativePath = str

# Named captures produced by a pattern match
type Params = dict[str, str]

# A processor: sync or async callable receiving the classified file
type Handler = Callable[[SourceFile], Any]

# Observer fired around each file's dispatch
type FileObserver = Callable[[SourceFile], None]

# Content hash function: bytes -> fixed-width hex digest
type Hasher = Callable[[bytes], str]

# Monotonic clock in seconds (injectable for deterministic tests)
type Clock = Callable[[], float]
