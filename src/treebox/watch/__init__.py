"""Watch layer — live notifications, rename pairing, and the watcher loop."""

from treebox.watch.coalescer import RenameCoalescer
from treebox.watch.live import LiveWatcher, WatchState
from treebox.watch.notifier import Notifier, RawChange, WatchfilesNotifier

__all__ = [
    "LiveWatcher",
    "Notifier",
    "RawChange",
    "RenameCoalescer",
    "WatchState",
    "WatchfilesNotifier",
]
