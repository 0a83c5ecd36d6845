"""Processor registry — ordered (pattern, handler) pairs.

Every processor whose pattern matches a file runs, in registration order.
Handlers may be plain functions or coroutine functions; awaitable results
are awaited before the next handler starts.
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from treebox._errors import InvalidArgumentError
from treebox.matching.pattern import Pattern

if TYPE_CHECKING:
    from collections.abc import Callable

    from treebox._types import Handler
    from treebox.matching.pattern import PatternSpec
    from treebox.processing.file import SourceFile


@dataclass(frozen=True, slots=True)
class ProcessorEntry:
    """A registered processor.

    Attributes:
        pattern: Compiled matcher for relative paths.
        handler: Callable invoked with the matching ``SourceFile``.

    """

    pattern: Pattern
    handler: Handler

    def process(self, file: SourceFile) -> Any:
        return self.handler(file)


def split_registration(
    pattern_or_handler: PatternSpec | Handler,
    handler: Handler | None = None,
) -> tuple[PatternSpec, Handler]:
    """Resolve the overloaded ``(pattern?, handler)`` registration form.

    A lone callable is the handler with a universal pattern. With two
    arguments the first is always the pattern (a callable there is a
    predicate).

    Raises:
        InvalidArgumentError: If no callable handler results.

    """
    if handler is None:
        if callable(pattern_or_handler) and not isinstance(pattern_or_handler, Pattern):
            return None, pattern_or_handler
        msg = "handler must be callable"
        raise InvalidArgumentError(msg)
    return pattern_or_handler, handler  # type: ignore[return-value]


class ProcessorRegistry:
    """Ordered list of processors with all-match dispatch."""

    __slots__ = ("_entries",)

    def __init__(self) -> None:
        self._entries: list[ProcessorEntry] = []

    @property
    def entries(self) -> tuple[ProcessorEntry, ...]:
        return tuple(self._entries)

    def add(self, handler: Handler, pattern: PatternSpec = None) -> ProcessorEntry:
        """Register ``handler`` for paths matching ``pattern``.

        Raises:
            InvalidArgumentError: If ``handler`` is not callable or the
                pattern spec is unsupported.

        """
        if not callable(handler):
            msg = "handler must be callable"
            raise InvalidArgumentError(msg)
        entry = ProcessorEntry(pattern=Pattern(pattern), handler=handler)
        self._entries.append(entry)
        return entry

    def decorator(self, pattern: PatternSpec = None) -> Callable[[Handler], Handler]:
        """Return a decorator registering the decorated function."""

        def register(handler: Handler) -> Handler:
            self.add(handler, pattern)
            return handler

        return register

    async def dispatch(self, file: SourceFile) -> int:
        """Run every processor matching ``file.path``.

        ``file.params`` is replaced with each match's captures before its
        handler runs. A handler failure propagates immediately and the
        remaining processors do not run.

        Returns:
            Number of handlers invoked.

        """
        count = 0
        for entry in tuple(self._entries):
            params = entry.pattern.match(file.path)
            if params is None:
                continue
            file.params = params
            result = entry.handler(file)
            if inspect.isawaitable(result):
                await result
            count += 1
        return count

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self):
        return iter(tuple(self._entries))
