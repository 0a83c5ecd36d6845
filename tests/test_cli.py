"""Tests for treebox._cli — argument parsing and command dispatch."""

from __future__ import annotations

from pathlib import Path

import pytest

from treebox._cli import _build_parser, main


class TestBuildParser:
    """_build_parser — CLI argument parsing."""

    def test_scan_default_args(self) -> None:
        parser = _build_parser()
        args = parser.parse_args(["scan"])
        assert args.command == "scan"
        assert args.root == "."
        assert args.ignore is None
        assert args.cache is None

    def test_scan_repeatable_ignore(self) -> None:
        parser = _build_parser()
        args = parser.parse_args(["scan", "--ignore", "*.tmp", "--ignore", "drafts/"])
        assert args.ignore == ["*.tmp", "drafts/"]

    def test_scan_with_cache_and_root(self) -> None:
        parser = _build_parser()
        args = parser.parse_args(["scan", "content/", "--cache", "cache.json"])
        assert args.root == "content/"
        assert args.cache == "cache.json"

    def test_watch_default_args(self) -> None:
        parser = _build_parser()
        args = parser.parse_args(["watch"])
        assert args.command == "watch"
        assert args.root == "."
        assert args.poll is False

    def test_watch_poll(self) -> None:
        parser = _build_parser()
        args = parser.parse_args(["watch", "--poll"])
        assert args.poll is True

    def test_no_command(self) -> None:
        parser = _build_parser()
        args = parser.parse_args([])
        assert args.command is None

    def test_version(self, capsys: pytest.CaptureFixture[str]) -> None:
        parser = _build_parser()
        with pytest.raises(SystemExit, match="0"):
            parser.parse_args(["--version"])
        assert "treebox" in capsys.readouterr().out


class TestMain:
    """main — command dispatch."""

    def test_no_command_prints_help(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit, match="0"):
            main([])
        assert "scan" in capsys.readouterr().out

    def test_scan_prints_files_and_summary(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str],
    ) -> None:
        (tmp_path / "a.txt").write_text("a")
        (tmp_path / "b.tmp").write_text("b")

        main(["scan", str(tmp_path), "--ignore", "*.tmp"])

        err = capsys.readouterr().err
        assert "create  a.txt" in err
        assert "b.tmp" not in err
        assert "1 created" in err

    def test_scan_with_cache_persists(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        (tmp_path / "a.txt").write_text("a")
        cache = tmp_path.parent / f"{tmp_path.name}-cache.json"

        main(["scan", str(tmp_path), "--cache", str(cache)])
        assert cache.is_file()
        capsys.readouterr()

        main(["scan", str(tmp_path), "--cache", str(cache)])
        err = capsys.readouterr().err
        assert "0 created" in err
        assert "1 unchanged" in err

    def test_corrupt_cache_exits_with_error(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str],
    ) -> None:
        cache = tmp_path / "cache.json"
        cache.write_text("{not json")

        with pytest.raises(SystemExit, match="1"):
            main(["scan", str(tmp_path), "--cache", str(cache)])
        assert "Corrupt cache file" in capsys.readouterr().err
