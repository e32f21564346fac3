"""Local-disk implementation of the file operations a backup run needs."""

from __future__ import annotations

import asyncio
import os
import shutil
from datetime import datetime
from pathlib import Path


def _write_text(path: Path, content: str) -> None:
    path.write_text(content, encoding="utf-8")


def _set_times(path: Path, atime: datetime, mtime: datetime) -> None:
    os.utime(path, (atime.timestamp(), mtime.timestamp()))


class LocalFileSystem:
    """Runs blocking file operations on worker threads."""

    async def ensure_dir(self, path: Path) -> None:
        await asyncio.to_thread(Path(path).mkdir, parents=True, exist_ok=True)

    async def write_text(self, path: Path, content: str) -> None:
        await asyncio.to_thread(_write_text, Path(path), content)

    async def unlink(self, path: Path) -> None:
        await asyncio.to_thread(Path(path).unlink)

    async def copy_file(self, source: Path, destination: Path) -> None:
        await asyncio.to_thread(shutil.copyfile, source, destination)

    async def set_times(self, path: Path, atime: datetime, mtime: datetime) -> None:
        await asyncio.to_thread(_set_times, Path(path), atime, mtime)


__all__ = ["LocalFileSystem"]
