"""Tests for treebox.watch.notifier — watchfiles-backed change batches."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any

import pytest
from watchfiles import Change

from treebox.config import TreeConfig
from treebox.watch.notifier import RawChange, WatchfilesNotifier


# ---------------------------------------------------------------------------
# RawChange dataclass tests
# ---------------------------------------------------------------------------


class TestRawChange:
    """Verify RawChange is frozen and well-behaved."""

    def test_frozen(self) -> None:
        change = RawChange(kind="add", path=Path("/tmp/a.txt"))
        with pytest.raises(AttributeError):
            change.kind = "unlink"  # type: ignore[misc]

    def test_equality_and_hash(self) -> None:
        a = RawChange(kind="change", path=Path("/a.txt"))
        b = RawChange(kind="change", path=Path("/a.txt"))
        assert a == b
        assert len({a, b}) == 1


# ---------------------------------------------------------------------------
# WatchfilesNotifier
# ---------------------------------------------------------------------------


class TestWatchfilesNotifier:
    """WatchfilesNotifier.changes — awatch batches mapped to RawChange sets."""

    @pytest.mark.asyncio
    async def test_maps_change_kinds(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        calls: list[dict[str, Any]] = []

        async def fake_awatch(*paths: Path, **kwargs: Any):
            calls.append({"paths": paths, **kwargs})
            yield set()
            yield {
                (Change.added, str(tmp_path / "a.txt")),
                (Change.modified, str(tmp_path / "b.txt")),
                (Change.deleted, str(tmp_path / "c.txt")),
            }

        monkeypatch.setattr("watchfiles.awatch", fake_awatch)
        notifier = WatchfilesNotifier(debounce_ms=100, step_ms=10, rust_timeout_ms=50)

        batches = [b async for b in notifier.changes(tmp_path, asyncio.Event())]

        assert batches[0] == set()
        assert batches[1] == {
            RawChange(kind="add", path=tmp_path / "a.txt"),
            RawChange(kind="change", path=tmp_path / "b.txt"),
            RawChange(kind="unlink", path=tmp_path / "c.txt"),
        }
        (call,) = calls
        assert call["paths"] == (tmp_path,)
        assert call["debounce"] == 100
        assert call["step"] == 10
        assert call["rust_timeout"] == 50
        assert call["yield_on_timeout"] is True
        assert call["watch_filter"] is None
        assert call["force_polling"] is False

    @pytest.mark.asyncio
    async def test_passes_stop_event(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        seen: list[asyncio.Event] = []

        async def fake_awatch(*paths: Path, stop_event: asyncio.Event, **kwargs: Any):
            seen.append(stop_event)
            yield set()

        monkeypatch.setattr("watchfiles.awatch", fake_awatch)
        stop_event = asyncio.Event()
        async for _ in WatchfilesNotifier().changes(tmp_path, stop_event):
            pass
        assert seen == [stop_event]

    def test_from_config(self, tmp_path: Path) -> None:
        config = TreeConfig(
            root=tmp_path, debounce_ms=500, step_ms=20, rust_timeout_ms=0, force_polling=True,
        )
        notifier = WatchfilesNotifier.from_config(config)
        assert notifier._debounce_ms == 500
        assert notifier._step_ms == 20
        assert notifier._rust_timeout_ms == 1
        assert notifier._force_polling is True
