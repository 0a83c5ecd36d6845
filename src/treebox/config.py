"""Treebox configuration.

TreeConfig is the central configuration object, frozen after creation.
"""

from dataclasses import dataclass, field
from pathlib import Path

from treebox._errors import ConfigError


@dataclass(frozen=True, slots=True)
class TreeConfig:
    """Configuration for a source tree.

    Attributes:
        root: Directory to process. Always resolved to an absolute path on
              construction.
        ignore: Gitignore-style patterns excluded from scans and live events.
        tree_id: Namespace for cache ids. ``None`` means the root's name.
        cache_path: JSON file backing the change cache. ``None`` keeps the
            cache in memory. Relative paths resolve against ``root``.
        concurrency: Maximum number of files classified/dispatched at once
            during a scan.
        rename_window: Seconds an unlink is held while waiting for a matching
            add (rename pairing).
        debounce_ms: Notifier debounce: maximum time to group raw events.
        step_ms: Notifier step: quiet period that closes a group early.
        rust_timeout_ms: Notifier idle wake-up. The first wake-up confirms
            the subscription is live.
        force_polling: Poll the filesystem instead of using native events.

    """

    root: Path = field(default_factory=Path.cwd)
    ignore: tuple[str, ...] = ()
    tree_id: str | None = None
    cache_path: Path | None = None
    concurrency: int = 8
    rename_window: float = 0.3
    debounce_ms: int = 200
    step_ms: int = 50
    rust_timeout_ms: int = 250
    force_polling: bool = False

    def __post_init__(self) -> None:
        # Notifiers report real paths, so symlinked roots are resolved too
        root = Path(self.root).resolve()
        object.__setattr__(self, "root", root)

        if isinstance(self.ignore, str):
            object.__setattr__(self, "ignore", (self.ignore,))
        else:
            object.__setattr__(self, "ignore", tuple(p for p in self.ignore if p))

        if self.cache_path is not None:
            cache_path = Path(self.cache_path)
            if not cache_path.is_absolute():
                cache_path = root / cache_path
            object.__setattr__(self, "cache_path", cache_path)

        if self.concurrency < 1:
            msg = f"concurrency must be at least 1, got {self.concurrency}"
            raise ConfigError(msg)
        for name in ("rename_window", "debounce_ms", "step_ms", "rust_timeout_ms"):
            if getattr(self, name) < 0:
                msg = f"{name} must not be negative"
                raise ConfigError(msg)

    @property
    def namespace(self) -> str:
        """Cache namespace used to qualify ids for this tree."""
        return self.tree_id if self.tree_id is not None else self.root.name
