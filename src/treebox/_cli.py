"""Treebox CLI — treebox scan / treebox watch.

Entry point for the ``treebox`` command-line interface.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from treebox.processing.file import SourceFile
    from treebox.tree import SourceTree


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the treebox CLI."""
    parser = argparse.ArgumentParser(
        prog="treebox",
        description="Incremental file-tree processing.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {_get_version()}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # treebox scan
    scan_parser = subparsers.add_parser(
        "scan",
        help="Run one reconciliation pass and print a summary",
    )
    _add_tree_arguments(scan_parser)

    # treebox watch
    watch_parser = subparsers.add_parser(
        "watch",
        help="Reconcile, then follow live changes until interrupted",
    )
    _add_tree_arguments(watch_parser)
    watch_parser.add_argument(
        "--poll", action="store_true", help="Poll instead of using native notifications",
    )

    return parser


def _add_tree_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("root", nargs="?", default=".", help="Tree root directory")
    parser.add_argument(
        "--ignore",
        action="append",
        default=None,
        metavar="PATTERN",
        help="Gitignore-style pattern to skip (repeatable)",
    )
    parser.add_argument(
        "--cache", default=None, metavar="FILE", help="JSON file persisting the change cache",
    )


def _get_version() -> str:
    """Get the package version."""
    from treebox import __version__

    return __version__


def _print_file(file: SourceFile) -> None:
    print(f"  {file.type.value:<7} {file.path}", file=sys.stderr)


def _open_tree(args: argparse.Namespace) -> SourceTree:
    from treebox.config_loader import load_config
    from treebox.tree import SourceTree

    config = load_config(
        args.root,
        ignore=args.ignore,
        cache_path=args.cache,
        force_polling=getattr(args, "poll", False) or None,
    )
    tree = SourceTree.from_config(config)
    tree.on_after(_print_file)
    return tree


async def _scan(tree: SourceTree) -> None:
    summary = await tree.process()
    print(
        f"  {tree.root}: {len(summary.created)} created, {len(summary.updated)} updated, "
        f"{len(summary.deleted)} deleted, {len(summary.skipped)} unchanged "
        f"({summary.duration_ms:.0f}ms)",
        file=sys.stderr,
    )


async def _watch(tree: SourceTree) -> None:
    await tree.watch()
    print(f"  Watching {tree.root} (Ctrl-C to stop)", file=sys.stderr)
    try:
        await tree.wait_closed()
    finally:
        tree.unwatch()


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    from treebox._errors import TreeboxError

    try:
        tree = _open_tree(args)
        if args.command == "scan":
            asyncio.run(_scan(tree))
        elif args.command == "watch":
            asyncio.run(_watch(tree))
    except KeyboardInterrupt:
        print("\n  Stopped.", file=sys.stderr)
    except TreeboxError as exc:
        print(f"  Error: {exc}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
