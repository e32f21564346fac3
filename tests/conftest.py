"""Shared fixtures: a minimal Bear database built with sqlite3."""

from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Any, Callable

import pytest

BEAR_SCHEMA = """
CREATE TABLE ZSFNOTE (
    Z_PK INTEGER PRIMARY KEY,
    ZTITLE VARCHAR,
    ZTEXT VARCHAR,
    ZTRASHED INTEGER,
    ZMODIFICATIONDATE TIMESTAMP
);
CREATE TABLE ZSFNOTETAG (Z_PK INTEGER PRIMARY KEY, ZTITLE VARCHAR);
CREATE TABLE Z_5TAGS (Z_5NOTES INTEGER, Z_13TAGS INTEGER);
CREATE TABLE ZSFNOTEFILE (
    Z_PK INTEGER PRIMARY KEY,
    ZNOTE INTEGER,
    ZUNIQUEIDENTIFIER VARCHAR,
    ZFILENAME VARCHAR,
    ZNORMALIZEDFILEEXTENSION VARCHAR
);
"""


def build_bear_database(
    path: Path,
    notes: list[dict[str, Any]],
    *,
    tags: dict[str, list[int]] | None = None,
    files: list[dict[str, Any]] | None = None,
) -> Path:
    conn = sqlite3.connect(path)
    conn.executescript(BEAR_SCHEMA)
    for note in notes:
        conn.execute(
            "INSERT INTO ZSFNOTE (Z_PK, ZTITLE, ZTEXT, ZTRASHED, ZMODIFICATIONDATE)"
            " VALUES (?, ?, ?, ?, ?)",
            (
                note["id"],
                note["title"],
                note.get("text"),
                note.get("trashed", 0),
                note.get("modified"),
            ),
        )
    for tag_pk, (tag, note_ids) in enumerate((tags or {}).items(), start=1):
        conn.execute("INSERT INTO ZSFNOTETAG (Z_PK, ZTITLE) VALUES (?, ?)", (tag_pk, tag))
        for note_id in note_ids:
            conn.execute(
                "INSERT INTO Z_5TAGS (Z_5NOTES, Z_13TAGS) VALUES (?, ?)",
                (note_id, tag_pk),
            )
    for attachment in files or []:
        conn.execute(
            "INSERT INTO ZSFNOTEFILE"
            " (ZNOTE, ZUNIQUEIDENTIFIER, ZFILENAME, ZNORMALIZEDFILEEXTENSION)"
            " VALUES (?, ?, ?, ?)",
            (
                attachment["note"],
                attachment.get("uuid"),
                attachment.get("filename"),
                attachment.get("extension"),
            ),
        )
    conn.commit()
    conn.close()
    return path


@pytest.fixture
def bear_database(tmp_path: Path) -> Callable[..., Path]:
    def _build(notes: list[dict[str, Any]], **kwargs: Any) -> Path:
        return build_bear_database(tmp_path / "database.sqlite", notes, **kwargs)

    return _build
