"""Backup orchestration: database rows in, Markdown files and assets out."""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from contextlib import AbstractAsyncContextManager, nullcontext
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Awaitable, Callable, Iterable, Mapping, Protocol, Sequence

from .assets import (
    ASSETS_DIRNAME,
    asset_prefix_for,
    build_asset_filename,
    rewrite_asset_references,
    source_path_for,
)
from .filenames import UNTAGGED_DIRNAME, deduplicate_filenames
from .models import AttachmentRecord, NoteRecord, ProcessedNote
from .utils.datetime_fmt import from_core_data_timestamp

logger = logging.getLogger(__name__)

NOTES_QUERY = """
    SELECT
      ZSFNOTE.Z_PK AS id,
      ZSFNOTE.ZTITLE AS title,
      ZSFNOTE.ZTEXT AS text,
      ZSFNOTETAG.ZTITLE AS tag,
      ZSFNOTE.ZTRASHED AS trashed,
      ZSFNOTE.ZMODIFICATIONDATE AS modificationDate
    FROM
      ZSFNOTE
    LEFT JOIN Z_5TAGS ON ZSFNOTE.Z_PK = Z_5TAGS.Z_5NOTES
    LEFT JOIN ZSFNOTETAG ON Z_5TAGS.Z_13TAGS = ZSFNOTETAG.Z_PK
    ORDER BY LENGTH(tag)"""

ATTACHMENTS_QUERY = """
    SELECT
      ZSFNOTEFILE.ZNOTE AS noteId,
      ZSFNOTEFILE.ZUNIQUEIDENTIFIER AS uuid,
      ZSFNOTEFILE.ZFILENAME AS filename,
      ZSFNOTEFILE.ZNORMALIZEDFILEEXTENSION AS extension
    FROM ZSFNOTEFILE
    WHERE ZSFNOTEFILE.ZNOTE IS NOT NULL"""


class BackupError(RuntimeError):
    """Raised when a backup run cannot proceed."""


class BackupConfigurationError(BackupError):
    """Raised when required capabilities are missing from ``BackupOptions``."""


class RowSource(Protocol):
    async def query(self, sql: str) -> Sequence[Mapping[str, Any]]:
        """Run ``sql`` and return every row as a mapping."""


class DatabaseDriver(Protocol):
    async def open(self, path: Path) -> RowSource:
        """Open the database at ``path`` for reading."""


class FileSystem(Protocol):
    """File operations used by a backup run.

    ``unlink`` and ``copy_file`` raise ``FileNotFoundError`` when the target
    (respectively the source) does not exist.
    """

    async def write_text(self, path: Path, content: str) -> None: ...

    async def unlink(self, path: Path) -> None: ...

    async def copy_file(self, source: Path, destination: Path) -> None: ...

    async def set_times(self, path: Path, atime: datetime, mtime: datetime) -> None: ...


DirectoryMaker = Callable[[Path], Awaitable[None]]


@dataclass(slots=True)
class BackupOptions:
    """Capabilities and settings for one backup run."""

    driver: DatabaseDriver | None
    make_dir: DirectoryMaker | None
    filesystem: FileSystem | None
    database_path: Path | None
    local_files_path: Path | None = None
    use_tags_as_directories: bool = False
    max_concurrency: int | None = None


def _validate(options: BackupOptions) -> None:
    required = {
        "driver": options.driver,
        "make_dir": options.make_dir,
        "filesystem": options.filesystem,
        "database_path": options.database_path,
    }
    missing = [name for name, value in required.items() if not value]
    if missing:
        raise BackupConfigurationError(
            f"Missing required dependencies: {', '.join(missing)}"
        )
    if options.max_concurrency is not None and options.max_concurrency < 1:
        raise BackupConfigurationError("max_concurrency must be a positive integer")


def order_by_tag_length(rows: Iterable[NoteRecord]) -> list[NoteRecord]:
    """Stable sort placing untagged rows first, then shorter tags."""

    return sorted(rows, key=lambda row: -1 if row.tag is None else len(row.tag))


def group_attachments(
    attachments: Iterable[AttachmentRecord],
) -> dict[int, list[AttachmentRecord]]:
    grouped: dict[int, list[AttachmentRecord]] = defaultdict(list)
    for attachment in attachments:
        grouped[attachment.note_id].append(attachment)
    return dict(grouped)


class _BackupRun:
    """State owned by a single invocation of :func:`backup`."""

    def __init__(self, output_directory: Path, options: BackupOptions) -> None:
        self.output_directory = output_directory
        self.options = options
        self.make_dir: DirectoryMaker = options.make_dir  # type: ignore[assignment]
        self.fs: FileSystem = options.filesystem  # type: ignore[assignment]
        self.assets_directory = output_directory / ASSETS_DIRNAME
        self.copied_uuids: set[str] = set()
        self._semaphore = (
            asyncio.Semaphore(options.max_concurrency)
            if options.max_concurrency
            else None
        )

    def _slot(self) -> AbstractAsyncContextManager[Any]:
        return self._semaphore if self._semaphore is not None else nullcontext()

    async def execute(self) -> list[ProcessedNote]:
        options = self.options
        logger.info(
            "Backing up %s into %s", options.database_path, self.output_directory
        )

        await self.make_dir(self.output_directory)
        if options.local_files_path:
            await self.make_dir(self.assets_directory)

        source = await options.driver.open(options.database_path)  # type: ignore[union-attr]
        rows = order_by_tag_length(
            NoteRecord.from_row(row) for row in await source.query(NOTES_QUERY)
        )

        attachments_by_note: dict[int, list[AttachmentRecord]] = {}
        if options.local_files_path:
            attachment_rows = await source.query(ATTACHMENTS_QUERY)
            attachments_by_note = group_attachments(
                AttachmentRecord.from_row(row) for row in attachment_rows
            )

        if options.use_tags_as_directories:
            await self._create_tag_directories(rows)

        processed = deduplicate_filenames(
            rows, self.output_directory, options.use_tags_as_directories
        )
        asset_prefix = asset_prefix_for(options.use_tags_as_directories)

        tasks: list[Awaitable[None]] = []
        for note in processed:
            if note.trashed:
                tasks.append(self._delete(note.path))
                continue

            file_map: dict[str, str] = {}
            for attachment in attachments_by_note.get(note.id, ()):
                if not attachment.is_exportable:
                    continue
                asset_filename = build_asset_filename(
                    attachment.uuid, attachment.filename  # type: ignore[arg-type]
                )
                file_map[attachment.filename] = asset_filename  # type: ignore[index]

                if attachment.uuid not in self.copied_uuids:
                    self.copied_uuids.add(attachment.uuid)  # type: ignore[arg-type]
                    tasks.append(self._copy(attachment, asset_filename))

            text = rewrite_asset_references(note.text, file_map, asset_prefix)
            tasks.append(self._write(note, text))

        await asyncio.gather(*tasks)

        logger.info(
            "Processed %d notes (%d attachments copied)",
            len(processed),
            len(self.copied_uuids),
        )
        return processed

    async def _create_tag_directories(self, rows: Sequence[NoteRecord]) -> None:
        tags = dict.fromkeys(row.tag for row in rows)
        await asyncio.gather(
            *(
                self.make_dir(self.output_directory / (tag or UNTAGGED_DIRNAME))
                for tag in tags
            )
        )

    async def _delete(self, path: Path) -> None:
        async with self._slot():
            try:
                await self.fs.unlink(path)
            except FileNotFoundError:
                logger.debug("Trashed note %s was not present on disk", path)

    async def _copy(self, attachment: AttachmentRecord, asset_filename: str) -> None:
        source = source_path_for(self.options.local_files_path, attachment)  # type: ignore[arg-type]
        destination = self.assets_directory / asset_filename
        async with self._slot():
            try:
                await self.fs.copy_file(source, destination)
            except FileNotFoundError:
                logger.debug("Attachment source %s is missing, skipping", source)

    async def _write(self, note: ProcessedNote, text: str | None) -> None:
        path = note.path
        async with self._slot():
            await self.fs.write_text(path, text or "")
            if note.modification_date is not None:
                modified = from_core_data_timestamp(note.modification_date)
                await self.fs.set_times(path, modified, modified)


def backup(
    output_directory: Path | str, options: BackupOptions
) -> Awaitable[list[ProcessedNote]]:
    """Export every note into ``output_directory``.

    Options are validated immediately, before any I/O, and a
    :class:`BackupConfigurationError` is raised when a capability is missing.
    The returned awaitable performs the run and resolves to the processed
    notes, trashed ones included.
    """

    _validate(options)
    return _BackupRun(Path(output_directory), options).execute()


def run_backup(
    output_directory: Path | str, options: BackupOptions
) -> list[ProcessedNote]:
    """Blocking wrapper around :func:`backup`."""

    return asyncio.run(backup(output_directory, options))


__all__ = [
    "ATTACHMENTS_QUERY",
    "BackupConfigurationError",
    "BackupError",
    "BackupOptions",
    "DatabaseDriver",
    "DirectoryMaker",
    "FileSystem",
    "NOTES_QUERY",
    "RowSource",
    "backup",
    "run_backup",
]
