"""Tests for treebox._errors."""

import pytest

from treebox._errors import (
    AlreadyWatchingError,
    ConfigError,
    InvalidArgumentError,
    StoreError,
    TreeboxError,
)


class TestErrorHierarchy:
    """All treebox errors inherit from TreeboxError."""

    def test_treebox_error_is_exception(self) -> None:
        assert issubclass(TreeboxError, Exception)

    def test_invalid_argument_is_type_error(self) -> None:
        assert issubclass(InvalidArgumentError, TreeboxError)
        assert issubclass(InvalidArgumentError, TypeError)

    def test_already_watching_is_runtime_error(self) -> None:
        assert issubclass(AlreadyWatchingError, TreeboxError)
        assert issubclass(AlreadyWatchingError, RuntimeError)

    def test_config_error_inherits(self) -> None:
        assert issubclass(ConfigError, TreeboxError)

    def test_store_error_inherits(self) -> None:
        assert issubclass(StoreError, TreeboxError)

    @pytest.mark.parametrize(
        "error_cls",
        [AlreadyWatchingError, ConfigError, InvalidArgumentError, StoreError],
    )
    def test_catch_all_treebox_errors(self, error_cls: type[TreeboxError]) -> None:
        with pytest.raises(TreeboxError, match="boom"):
            raise error_cls("boom")
