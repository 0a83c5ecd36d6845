"""Matching layer — processor patterns and ignore rules."""

from treebox.matching.ignore import IgnoreSet, normalize_ignore
from treebox.matching.pattern import Pattern, compile_path_pattern

__all__ = [
    "IgnoreSet",
    "Pattern",
    "compile_path_pattern",
    "normalize_ignore",
]
