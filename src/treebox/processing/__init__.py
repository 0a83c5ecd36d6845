"""Processing layer — classified files and the path they take.

Handles file classification (scan differ), processor dispatch, and the
before/after hooks shared by scans and the live watcher.
"""

from treebox.processing.differ import ScanDiffer, ScanSummary, walk_tree
from treebox.processing.dispatcher import FileDispatcher
from treebox.processing.events import EventBus
from treebox.processing.file import ChangeType, SourceFile
from treebox.processing.registry import ProcessorEntry, ProcessorRegistry

__all__ = [
    "ChangeType",
    "EventBus",
    "FileDispatcher",
    "ProcessorEntry",
    "ProcessorRegistry",
    "ScanDiffer",
    "ScanSummary",
    "SourceFile",
    "walk_tree",
]
