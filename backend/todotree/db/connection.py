"""Async SQLite connection holding the todo record table."""

import logging

import aiosqlite

from todotree.db.schema import SCHEMA_SQL

logger = logging.getLogger(__name__)


class Database:
    """One shared aiosqlite connection.

    Statements run one at a time and every write commits on its own: a tree
    save is a sequence of independent inserts, never one transaction.
    """

    def __init__(self, connection: aiosqlite.Connection) -> None:
        self._conn = connection

    @classmethod
    async def connect(cls, path: str = "todotree.db") -> "Database":
        """Open ``path`` in WAL mode, check JSON support, then create tables.

        Child lists are stored as JSON arrays and queried with ``json_each``,
        so an SQLite build without the JSON functions is refused up front.
        """
        conn = await aiosqlite.connect(path)
        conn.row_factory = aiosqlite.Row
        try:
            await conn.execute("PRAGMA journal_mode=WAL")
            await conn.execute("PRAGMA busy_timeout=5000")
            await _require_json_functions(conn)
            db = cls(conn)
            await db._ensure_schema()
        except Exception:
            await conn.close()
            raise
        logger.info("Opened todo database at %s", path)
        return db

    async def _ensure_schema(self) -> None:
        """Create tables if they don't exist. Idempotent."""
        await self._conn.executescript(SCHEMA_SQL)
        await self._conn.commit()

    async def execute(self, sql: str, params: tuple | None = None) -> aiosqlite.Cursor:
        """Run one statement and commit it."""
        cursor = await self._conn.execute(sql, params or ())
        await self._conn.commit()
        return cursor

    async def fetchone(self, sql: str, params: tuple | None = None) -> aiosqlite.Row | None:
        async with self._conn.execute(sql, params or ()) as cursor:
            return await cursor.fetchone()

    async def fetchall(self, sql: str, params: tuple | None = None) -> list[aiosqlite.Row]:
        async with self._conn.execute(sql, params or ()) as cursor:
            return list(await cursor.fetchall())

    async def close(self) -> None:
        await self._conn.close()


async def _require_json_functions(conn: aiosqlite.Connection) -> None:
    try:
        await conn.execute("SELECT json_array_length('[]')")
    except aiosqlite.OperationalError as e:
        raise RuntimeError(f"SQLite is missing the JSON functions: {e}") from e
