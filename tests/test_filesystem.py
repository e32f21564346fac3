"""Tests for the local-disk file operations."""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from pathlib import Path

import pytest
from bearbackup.filesystem import LocalFileSystem


def test_ensure_dir_is_recursive_and_idempotent(tmp_path: Path) -> None:
    fs = LocalFileSystem()
    target = tmp_path / "a" / "b"

    asyncio.run(fs.ensure_dir(target))
    asyncio.run(fs.ensure_dir(target))

    assert target.is_dir()


def test_write_text_uses_utf8_without_bom(tmp_path: Path) -> None:
    fs = LocalFileSystem()
    target = tmp_path / "note.md"

    asyncio.run(fs.write_text(target, "héllo"))

    assert target.read_bytes() == "héllo".encode("utf-8")


def test_unlink_missing_file_raises_not_found(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        asyncio.run(LocalFileSystem().unlink(tmp_path / "missing.md"))


def test_copy_missing_source_raises_not_found(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        asyncio.run(
            LocalFileSystem().copy_file(tmp_path / "missing.png", tmp_path / "out.png")
        )


def test_copy_file_and_set_times(tmp_path: Path) -> None:
    fs = LocalFileSystem()
    source = tmp_path / "source.png"
    source.write_bytes(b"\x89PNG")
    destination = tmp_path / "dest.png"
    moment = datetime(2001, 1, 1, tzinfo=timezone.utc)

    asyncio.run(fs.copy_file(source, destination))
    asyncio.run(fs.set_times(destination, moment, moment))

    assert destination.read_bytes() == b"\x89PNG"
    assert destination.stat().st_mtime == pytest.approx(moment.timestamp())
