"""Database connection utilities."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from contextlib import asynccontextmanager
from pathlib import Path

import aiosqlite

from procache.exceptions import PersistenceError


class Database:
    """Async SQLite database wrapper."""

    def __init__(self, db_path: Path):
        self.db_path = db_path
        self._connection: aiosqlite.Connection | None = None

    @property
    def is_connected(self) -> bool:
        return self._connection is not None

    async def connect(self) -> None:
        self._connection = await aiosqlite.connect(self.db_path)
        # routing_rows/tracking_rows cascade from workorders
        await self._connection.execute("PRAGMA foreign_keys = ON")
        await self._init_schema()

    async def _init_schema(self) -> None:
        schema_path = Path(__file__).parent / "schema.sql"
        schema = schema_path.read_text(encoding="utf-8")
        await self._connection.executescript(schema)
        await self._connection.commit()

    def _require_connection(self) -> aiosqlite.Connection:
        if self._connection is None:
            raise PersistenceError(f"Database {self.db_path} is not connected")
        return self._connection

    async def execute_read(self, query: str, params=None):
        """Execute a read query and return all results."""
        async with self._require_connection().execute(query, params or []) as cursor:
            return await cursor.fetchall()

    async def execute_write(self, query: str, params=None) -> None:
        connection = self._require_connection()
        await connection.execute(query, params or [])
        await connection.commit()

    # =========================================================================
    # Transaction support for atomic batch operations
    # =========================================================================

    @asynccontextmanager
    async def transaction(self):
        """Context manager for explicit transaction control.

        Usage:
            async with db.transaction():
                await db.execute_write_no_commit(...)
                await db.executemany_no_commit(...)
            # Commits on exit, rolls back on exception
        """
        connection = self._require_connection()
        try:
            yield
            await connection.commit()
        except Exception:
            await connection.rollback()
            raise

    async def execute_write_no_commit(self, query: str, params=None):
        """Execute write without immediate commit (use within transaction)."""
        cursor = await self._require_connection().execute(query, params or [])
        return cursor.lastrowid

    async def executemany_no_commit(self, query: str, params: Iterable[Sequence]) -> None:
        """Execute many without immediate commit (use within transaction)."""
        await self._require_connection().executemany(query, params)

    async def close(self) -> None:
        if self._connection:
            await self._connection.close()
            self._connection = None
