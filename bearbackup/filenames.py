"""Safe, length-bounded and collision-free Markdown filenames."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable

from .models import NoteRecord, ProcessedNote

MAX_FILENAME_BYTES = 255
# One byte below the 254 byte ceiling is kept free for a deduplication suffix.
MAX_TITLE_BYTES = 251
MARKDOWN_EXTENSION = ".md"
UNTAGGED_DIRNAME = "untagged"

# Whitespace and line terminators as ECMAScript's String.prototype.trim sees them.
_BLANK_CHARACTERS = (
    " \t\n\v\f\r\u00a0\u1680\u2028\u2029\u202f\u205f\u3000\ufeff"
    + "".join(chr(code) for code in range(0x2000, 0x200B))
)


def utf8_length(value: str) -> int:
    return len(value.encode("utf-8"))


def truncate_utf8(value: str, max_bytes: int) -> str:
    """Drop trailing characters until ``value`` encodes to ``max_bytes`` or less.

    Characters are removed whole, so a multi-byte sequence is never split.
    """

    truncated = value
    while utf8_length(truncated) > max_bytes:
        truncated = truncated[:-1]
    return truncated


def build_filename(title: str, fallback_id: int | str | None = None) -> str:
    """Turn a note title into a ``.md`` filename.

    Path separators become hyphens; nothing else is sanitized. A blank title
    falls back to ``untitled-<fallback_id>`` when an identifier is given.
    """

    if not isinstance(title, str):
        raise TypeError(f"Note title must be a string, got {type(title).__name__}")

    sanitized = title.replace("/", "-")
    base = sanitized
    if not sanitized.strip(_BLANK_CHARACTERS) and fallback_id is not None:
        base = f"untitled-{fallback_id}"

    return truncate_utf8(base, MAX_TITLE_BYTES) + MARKDOWN_EXTENSION


def insert_suffix(filename: str, count: int) -> str:
    """Return ``filename`` with ``-<count>`` placed before its ``.md`` extension."""

    suffix = f"-{count}"
    base = filename[: -len(MARKDOWN_EXTENSION)]
    max_base_bytes = MAX_FILENAME_BYTES - utf8_length(suffix) - len(MARKDOWN_EXTENSION)
    return truncate_utf8(base, max_base_bytes) + suffix + MARKDOWN_EXTENSION


def destination_for(
    row: NoteRecord, output_directory: Path, use_tags_as_directories: bool
) -> Path:
    if not use_tags_as_directories:
        return output_directory
    return output_directory / (row.tag or UNTAGGED_DIRNAME)


def deduplicate_filenames(
    rows: Iterable[NoteRecord],
    output_directory: Path,
    use_tags_as_directories: bool,
) -> list[ProcessedNote]:
    """Assign every row a filename that is unique within its directory.

    Input order is preserved. The second occurrence of a name in a directory
    gets ``-1``, the third ``-2`` and so on.
    """

    counters: dict[Path, dict[str, int]] = {}
    processed: list[ProcessedNote] = []

    for row in rows:
        directory = destination_for(row, output_directory, use_tags_as_directories)
        base_filename = build_filename(row.title, row.id)

        seen = counters.setdefault(directory, {})
        if base_filename not in seen:
            seen[base_filename] = 1
            filename = base_filename
        else:
            filename = insert_suffix(base_filename, seen[base_filename])
            seen[base_filename] += 1

        processed.append(
            ProcessedNote(
                id=row.id,
                title=row.title,
                text=row.text,
                tag=row.tag,
                trashed=row.trashed,
                modification_date=row.modification_date,
                filename=filename,
                destination_directory=directory,
            )
        )

    return processed


__all__ = [
    "MAX_FILENAME_BYTES",
    "MAX_TITLE_BYTES",
    "build_filename",
    "deduplicate_filenames",
    "insert_suffix",
    "truncate_utf8",
]
