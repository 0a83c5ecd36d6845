"""Treebox — incremental file-tree processing for Python.

Given a source directory, treebox works out which files are new, changed,
unchanged or removed since the last pass and routes every changed file to
pattern-matched processors. The same dispatch path serves one-shot runs and
a live watch mode.

Quick start::

    import treebox

    tree = treebox.SourceTree("source/", ignore="**/drafts")

    @tree.processor("posts/:slug")
    async def render_post(file):
        print(file.type, file.path, file.params["slug"])

    await tree.process()        # One reconciliation pass
    await tree.watch()          # Reconcile, then follow live changes
    tree.unwatch()

Building blocks::

    treebox.matching      Pattern + IgnoreSet
    treebox.cache         ChangeCache over a pluggable Store
    treebox.processing    SourceFile, registry, event bus, scan differ
    treebox.watch         Notifier, rename coalescer, live watcher
    treebox.observability Event log of processed files and watch state

"""

# PEP 703: Declare this module as free-threading safe
_Py_mod_gil = 0

__version__ = "0.1.0-dev"
__all__ = [
    "ChangeType",
    "SourceFile",
    "SourceTree",
    "TreeConfig",
    "__version__",
    "load_config",
]


def __getattr__(name: str) -> object:
    """Lazy imports for the public API.

    Keeps ``import treebox`` fast; ``watchfiles`` and ``pathspec`` load only
    once a tree is actually built.
    """
    if name == "SourceTree":
        from treebox.tree import SourceTree

        return SourceTree

    if name == "TreeConfig":
        from treebox.config import TreeConfig

        return TreeConfig

    if name == "load_config":
        from treebox.config_loader import load_config

        return load_config

    if name == "SourceFile":
        from treebox.processing.file import SourceFile

        return SourceFile

    if name == "ChangeType":
        from treebox.processing.file import ChangeType

        return ChangeType

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
