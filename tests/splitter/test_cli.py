"""Tests for the filesplitter command line."""

import argparse
import os
from pathlib import Path

import pytest

from filesplitter.common import ConfigLoader
from filesplitter.splitter import cli, coordinator
from filesplitter.splitter.cli import build_parser, main, parse_size, split_command
from filesplitter.splitter.config import FileSplitterConfig


@pytest.fixture
def isolated_cli(tmp_path, monkeypatch):
    """Run main() without touching real config files or the root logger."""
    for key in list(os.environ):
        if key.startswith("FILESPLITTER_"):
            monkeypatch.delenv(key)

    monkeypatch.setattr(ConfigLoader, "_system_config_path", lambda self: tmp_path / "system.toml")
    monkeypatch.setattr(ConfigLoader, "_user_config_path", lambda self: tmp_path / "user.toml")
    monkeypatch.chdir(tmp_path)

    calls = []
    monkeypatch.setattr(cli, "setup_logging", lambda **kwargs: calls.append(kwargs))
    return calls


class TestParseSize:
    """Tests for parse_size function."""

    @pytest.mark.parametrize("value,expected", [
        ("524288", 524288),
        ("512K", 512 * 1024),
        ("512kb", 512 * 1024),
        ("512KiB", 512 * 1024),
        ("5M", 5 * 1024 ** 2),
        ("2GB", 2 * 1024 ** 3),
        (" 10 B ", 10),
    ])
    def test_valid(self, value, expected):
        assert parse_size(value) == expected

    @pytest.mark.parametrize("value", ["", "abc", "1.5M", "-1", "0", "10TB"])
    def test_invalid(self, value):
        with pytest.raises(argparse.ArgumentTypeError):
            parse_size(value)


class TestParser:
    def test_defaults(self):
        args = build_parser().parse_args(["movie.mkv"])

        assert args.block_size is None
        assert args.workers is None
        assert args.no_check is False
        assert args.no_manifest is False

    def test_options(self):
        args = build_parser().parse_args(
            ["movie.mkv", "--block-size", "1M", "--workers", "4", "--no-check", "--folder", "out"]
        )

        assert args.block_size == 1024 ** 2
        assert args.workers == 4
        assert args.no_check is True
        assert str(args.folder) == "out"


class TestSplitCommand:
    def test_prints_original_name_and_parts(self, make_source, output_dir, capsys):
        source, _ = make_source(250, name="notes.txt")

        exit_code = split_command(
            FileSplitterConfig(), source, block_size_override=100, output_dir_override=output_dir
        )

        lines = capsys.readouterr().out.splitlines()
        assert exit_code == 0
        assert lines[0] == "notes.txt"
        assert len(lines) == 4
        assert all(line.startswith("  notes.txt.0.") for line in lines[1:])

    def test_failure_returns_one(self, tmp_path, capsys):
        exit_code = split_command(FileSplitterConfig(), tmp_path / "missing.bin")

        assert exit_code == 1
        assert capsys.readouterr().out == ""


class TestMain:
    """Tests for main entry point."""

    def test_split_with_options(self, isolated_cli, make_source, tmp_path):
        source, content = make_source(1000)
        out = tmp_path / "out"

        exit_code = main([str(source), "--block-size", "300", "--workers", "2", "--folder", str(out)])

        assert exit_code == 0
        parts = sorted(out.glob("*.part"))
        assert len(parts) == 4
        assert sum(p.stat().st_size for p in parts) == len(content)
        assert len(list(out.glob("*.manifest.json"))) == 1

    def test_no_manifest_flag(self, isolated_cli, make_source, tmp_path):
        source, _ = make_source(100)
        out = tmp_path / "out"

        assert main([str(source), "--folder", str(out), "--no-manifest", "--no-check"]) == 0
        assert list(out.glob("*.manifest.json")) == []

    def test_config_file_applies(self, isolated_cli, make_source, tmp_path):
        source, _ = make_source(100)
        config_file = tmp_path / "defaults.toml"
        config_file.write_text(
            '[logging]\nlevel = "warning"\n\n[splitter]\nblock_size = 25\noutput_dir = "cfg-out"\n',
            encoding="utf-8",
        )

        assert main([str(source), "--config", str(config_file)]) == 0
        assert len(list((tmp_path / "cfg-out").glob("*.part"))) == 4
        assert isolated_cli[0]["level"] == "WARNING"

    def test_log_level_override(self, isolated_cli, make_source, tmp_path):
        source, _ = make_source(10)

        main([str(source), "--folder", str(tmp_path / "out"), "--log-level", "DEBUG"])

        assert isolated_cli[0]["level"] == "DEBUG"
        assert isolated_cli[0]["log_file"] is None

    def test_log_rotation_from_config(self, isolated_cli, make_source, tmp_path):
        source, _ = make_source(10)
        config_file = tmp_path / "defaults.toml"
        config_file.write_text(
            '[logging]\nfile = "logs/split.log"\nmax_file_size_mb = 2\nbackup_count = 1\n',
            encoding="utf-8",
        )

        main([str(source), "--folder", str(tmp_path / "out"), "--config", str(config_file)])

        assert isolated_cli[0]["log_file"] == Path("logs/split.log")
        assert isolated_cli[0]["max_file_size_mb"] == 2
        assert isolated_cli[0]["backup_count"] == 1

    def test_manifest_write_failure_exit_code(self, isolated_cli, make_source, tmp_path, monkeypatch):
        source, _ = make_source(10)

        def disk_full(manifest, directory, algorithm):
            raise OSError("No space left on device")

        monkeypatch.setattr(coordinator, "write_manifest", disk_full)

        assert main([str(source), "--folder", str(tmp_path / "out")]) == 1

    def test_missing_file_exit_code(self, isolated_cli, tmp_path):
        assert main([str(tmp_path / "nope.bin")]) == 1
