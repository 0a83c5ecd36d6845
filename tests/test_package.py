"""Tests for treebox package exports and metadata."""

import treebox


class TestPackageMetadata:
    """Package-level exports and metadata."""

    def test_version_string(self) -> None:
        assert isinstance(treebox.__version__, str)
        assert "0.1.0" in treebox.__version__

    def test_free_threading_declaration(self) -> None:
        assert treebox._Py_mod_gil == 0

    def test_all_exports_resolvable(self) -> None:
        for name in treebox.__all__:
            assert getattr(treebox, name) is not None

    def test_lazy_exports_are_the_real_objects(self) -> None:
        from treebox.processing.file import ChangeType
        from treebox.tree import SourceTree

        assert treebox.SourceTree is SourceTree
        assert treebox.ChangeType is ChangeType

    def test_invalid_attribute_raises(self) -> None:
        import pytest

        with pytest.raises(AttributeError, match="no attribute"):
            treebox.nonexistent_thing  # type: ignore[attr-defined]  # noqa: B018
