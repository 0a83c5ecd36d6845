"""Path patterns — compile a processor's pattern spec into a matcher.

Four spec forms are accepted:

- ``None``: matches every path with no params.
- ``re.Pattern``: searched against the relative path; the regex's own
  anchors decide how much must match. Named groups become params.
- ``str``: ``:name`` captures one path component, ``*name`` captures the
  rest of the path (any depth). Everything else is literal and the whole
  path must match, e.g. ``"posts/:year/*slug"``.
- callable: a predicate over the relative path. A truthy result matches;
  a ``dict`` result is used as the params.

``Pattern.match()`` returns the params dict on a match and ``None`` otherwise.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from treebox._errors import InvalidArgumentError

if TYPE_CHECKING:
    from treebox._types import Params

type PatternSpec = Pattern | re.Pattern[str] | str | Callable[[str], Any] | None

# ":name" -> one component, "*name" -> splat
_PARAM_RE = re.compile(r"([:*])([A-Za-z_]\w*)")


def compile_path_pattern(spec: str) -> re.Pattern[str]:
    """Compile a ``:name``/``*name`` string into an anchored regex.

    Raises:
        InvalidArgumentError: If a param name is used twice.

    """
    parts: list[str] = []
    pos = 0
    for m in _PARAM_RE.finditer(spec):
        parts.append(re.escape(spec[pos:m.start()]))
        operator, name = m.groups()
        if operator == ":":
            parts.append(f"(?P<{name}>[^/]+)")
        else:
            parts.append(f"(?P<{name}>.*)")
        pos = m.end()
    parts.append(re.escape(spec[pos:]))

    try:
        return re.compile("^" + "".join(parts) + "$")
    except re.error as exc:
        msg = f"Invalid path pattern {spec!r}: {exc}"
        raise InvalidArgumentError(msg) from exc


def _match_all(path: str) -> Params:
    return {}


class Pattern:
    """A compiled path matcher.

    Args:
        spec: The pattern spec (see module docstring). Passing an existing
            Pattern reuses its matcher.

    Raises:
        InvalidArgumentError: If the spec is not one of the accepted forms.

    """

    __slots__ = ("_matcher", "spec")

    def __init__(self, spec: PatternSpec = None) -> None:
        if isinstance(spec, Pattern):
            self.spec = spec.spec
            self._matcher = spec._matcher
            return

        self.spec = spec
        if spec is None:
            self._matcher: Callable[[str], Params | None] = _match_all
        elif isinstance(spec, re.Pattern):
            self._matcher = self._regex_matcher(spec, full=False)
        elif isinstance(spec, str):
            self._matcher = self._regex_matcher(compile_path_pattern(spec), full=True)
        elif callable(spec):
            self._matcher = self._predicate_matcher(spec)
        else:
            msg = f"Unsupported pattern type: {type(spec).__name__}"
            raise InvalidArgumentError(msg)

    @staticmethod
    def _regex_matcher(
        regex: re.Pattern[str], *, full: bool,
    ) -> Callable[[str], Params | None]:
        finder = regex.fullmatch if full else regex.search

        def matcher(path: str) -> Params | None:
            m = finder(path)
            if m is None:
                return None
            return {k: v for k, v in m.groupdict().items() if v is not None}

        return matcher

    @staticmethod
    def _predicate_matcher(
        predicate: Callable[[str], Any],
    ) -> Callable[[str], Params | None]:
        def matcher(path: str) -> Params | None:
            result = predicate(path)
            if not result:
                return None
            if isinstance(result, dict):
                return dict(result)
            return {}

        return matcher

    def match(self, path: str) -> Params | None:
        """Match a relative POSIX path, returning params or ``None``."""
        return self._matcher(path)

    def test(self, path: str) -> bool:
        """Return True if ``path`` matches."""
        return self._matcher(path) is not None

    def __repr__(self) -> str:
        return f"Pattern({self.spec!r})"
