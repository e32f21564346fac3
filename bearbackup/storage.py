"""Peewee-backed read-only access to the Bear database."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any

from peewee import PeeweeException, SqliteDatabase


class StorageError(RuntimeError):
    """Raised when reading the Bear database fails."""


class BearDatabase(SqliteDatabase):
    """SqliteDatabase opened read-only, with per-call connection lifetimes."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        super().__init__(
            f"{self.path.expanduser().resolve().as_uri()}?mode=ro",
            uri=True,
            check_same_thread=False,
        )

    def fetch_all(self, sql: str) -> list[dict[str, Any]]:
        try:
            with self.connection_context():
                cursor = self.execute_sql(sql)
                columns = [column[0] for column in cursor.description or ()]
                return [dict(zip(columns, row)) for row in cursor.fetchall()]
        except PeeweeException as exc:
            raise StorageError(f"Failed to query {self.path}: {exc}") from exc

    async def query(self, sql: str) -> list[dict[str, Any]]:
        return await asyncio.to_thread(self.fetch_all, sql)


class BearDatabaseDriver:
    """Opens Bear databases for a backup run."""

    async def open(self, path: Path) -> BearDatabase:
        database = BearDatabase(path)
        await asyncio.to_thread(_check_connection, database)
        return database


def _check_connection(database: BearDatabase) -> None:
    try:
        with database.connection_context():
            database.execute_sql("SELECT 1")
    except PeeweeException as exc:
        raise StorageError(f"Failed to open database {database.path}: {exc}") from exc


__all__ = ["BearDatabase", "BearDatabaseDriver", "StorageError"]
