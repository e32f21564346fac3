"""Row types flowing through a backup run."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping


@dataclass(slots=True)
class NoteRecord:
    """One row per (note, tag) pairing read from the Bear database."""

    id: int
    title: str
    text: str | None = None
    tag: str | None = None
    trashed: bool = False
    modification_date: float | None = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> NoteRecord:
        return cls(
            id=row["id"],
            title=row.get("title"),
            text=row.get("text"),
            tag=row.get("tag"),
            trashed=bool(row.get("trashed")),
            modification_date=row.get("modificationDate"),
        )


@dataclass(slots=True)
class AttachmentRecord:
    """A file or image attached to a note."""

    note_id: int
    uuid: str | None = None
    filename: str | None = None
    extension: str | None = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> AttachmentRecord:
        return cls(
            note_id=row["noteId"],
            uuid=row.get("uuid"),
            filename=row.get("filename"),
            extension=row.get("extension"),
        )

    @property
    def is_exportable(self) -> bool:
        return bool(self.uuid) and bool(self.filename)


@dataclass(slots=True, kw_only=True)
class ProcessedNote(NoteRecord):
    """A note row with its final on-disk name and destination directory."""

    filename: str
    destination_directory: Path

    @property
    def path(self) -> Path:
        return self.destination_directory / self.filename
