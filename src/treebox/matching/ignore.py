"""Ignore rules — one predicate over relative paths.

Uses pathspec for gitignore-compliant pattern matching. A leading ``**/``
matches the following component at any depth, and a pattern that matches a
directory also matches everything below it, so the same predicate prunes
directory descent during scans and filters individual live events.
"""

from __future__ import annotations

from collections.abc import Iterable

from pathspec import GitIgnoreSpec


def normalize_ignore(spec: str | Iterable[str | None] | None) -> tuple[str, ...]:
    """Normalize an ignore spec to a tuple of non-empty pattern strings.

    Accepts a single pattern, an iterable of patterns, or ``None``. ``None``
    and empty entries are dropped silently.
    """
    if spec is None:
        return ()
    if isinstance(spec, str):
        return (spec,) if spec else ()
    return tuple(p for p in spec if isinstance(p, str) and p)


class IgnoreSet:
    """Compiled ignore patterns for one tree.

    Args:
        spec: A single pattern, an iterable of patterns, or ``None``.

    """

    __slots__ = ("_spec", "patterns")

    def __init__(self, spec: str | Iterable[str | None] | None = None) -> None:
        self.patterns = normalize_ignore(spec)
        self._spec = GitIgnoreSpec.from_lines(self.patterns)

    def test(self, path: str) -> bool:
        """Return True if the relative POSIX path is ignored.

        Directories should be passed with a trailing ``/`` so that
        directory-only patterns (``build/``) apply.
        """
        if not self.patterns or not path:
            return False
        return self._spec.match_file(path)

    def __bool__(self) -> bool:
        return bool(self.patterns)

    def __repr__(self) -> str:
        return f"IgnoreSet({list(self.patterns)!r})"
