"""Treebox error hierarchy.

All treebox-specific errors inherit from TreeboxError for easy catching.
I/O failures and handler failures are not wrapped; they propagate as raised.
"""


class TreeboxError(Exception):
    """Base error for all treebox operations."""


class InvalidArgumentError(TreeboxError, TypeError):
    """Bad processor registration or pattern specification."""


class AlreadyWatchingError(TreeboxError, RuntimeError):
    """``watch()`` called while the tree is already starting or running."""


class ConfigError(TreeboxError):
    """Invalid configuration value."""


class StoreError(TreeboxError):
    """Persistent store could not be read or decoded."""
