"""SQLite-backed record store for todos."""

import logging
from datetime import UTC, datetime
from uuid import uuid4

import aiosqlite

from todotree.db.connection import Database
from todotree.errors import StoreError, StoreReadError, StoreWriteError
from todotree.models import CHILD_FIELD, TodoNode
from todotree.store.base import RecordStore
from todotree.utils.json import id_list_str, parse_id_list

logger = logging.getLogger(__name__)


class TodoStore(RecordStore):
    """Todo records in the ``todos`` table, one row per record."""

    def __init__(self, db: Database) -> None:
        self._db = db

    async def insert(self, record: TodoNode) -> str:
        child_ids = record.child_ids()
        if None in child_ids:
            raise StoreWriteError(record.description, "children must be stored first")

        todo_id = str(uuid4())
        try:
            await self._db.execute(
                """
                INSERT INTO todos
                    (todo_id, description, done, is_root, sub_todos, created_at)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    todo_id,
                    record.description,
                    int(record.done),
                    int(record.is_root),
                    id_list_str(child_ids),
                    datetime.now(UTC).isoformat(),
                ),
            )
        except aiosqlite.Error as e:
            logger.warning("Insert of todo %r failed: %s", record.description, e)
            raise StoreWriteError(record.description, str(e)) from e
        return todo_id

    async def fetch(self, todo_id: str) -> TodoNode:
        try:
            row = await self._db.fetchone(
                "SELECT * FROM todos WHERE todo_id = ?", (todo_id,)
            )
        except aiosqlite.Error as e:
            logger.warning("Fetch of todo %s failed: %s", todo_id, e)
            raise StoreReadError(todo_id, str(e)) from e
        if row is None:
            raise StoreReadError(todo_id)
        return self._row_to_todo(row)

    async def resolve_level(
        self, node_or_id: TodoNode | str, field: str = CHILD_FIELD
    ) -> TodoNode:
        if field != CHILD_FIELD:
            raise ValueError(f"Unknown reference field: {field!r}")
        node = (
            await self.fetch(node_or_id) if isinstance(node_or_id, str) else node_or_id
        )

        wanted = [child for child in node.sub_todos if isinstance(child, str)]
        if not wanted:
            return node

        fetched = await self._fetch_many(wanted)
        for child_id in wanted:
            if child_id not in fetched:
                logger.warning(
                    "Todo %s references missing child %s", node.todo_id, child_id
                )
                raise StoreReadError(child_id, "referenced child does not exist")

        node.sub_todos = [
            fetched[child] if isinstance(child, str) else child
            for child in node.sub_todos
        ]
        return node

    async def exists(self, todo_id: str) -> bool:
        try:
            row = await self._db.fetchone(
                "SELECT 1 FROM todos WHERE todo_id = ?", (todo_id,)
            )
        except aiosqlite.Error as e:
            logger.warning("Lookup of todo %s failed: %s", todo_id, e)
            raise StoreReadError(todo_id, str(e)) from e
        return row is not None

    async def list_root_ids(self) -> list[str]:
        """Identifiers of root todos, oldest first."""
        try:
            rows = await self._db.fetchall(
                "SELECT todo_id FROM todos WHERE is_root = 1 ORDER BY created_at, rowid"
            )
        except aiosqlite.Error as e:
            logger.warning("Listing root todos failed: %s", e)
            raise StoreError(f"Failed to list root todos: {e}") from e
        return [row["todo_id"] for row in rows]

    async def list_references(self, todo_ids: list[str]) -> list[tuple[str, str]]:
        """(parent_id, child_id) pairs for every stored parent of the given todos.

        A parent listing the same child twice yields the pair twice.
        """
        if not todo_ids:
            return []
        placeholders = ", ".join("?" for _ in todo_ids)
        try:
            rows = await self._db.fetchall(
                f"""
                SELECT t.todo_id AS parent_id, j.value AS child_id
                FROM todos AS t, json_each(t.sub_todos) AS j
                WHERE j.value IN ({placeholders})
                """,
                tuple(todo_ids),
            )
        except aiosqlite.Error as e:
            logger.warning("Reference lookup of %d todos failed: %s", len(todo_ids), e)
            raise StoreReadError(todo_ids[0], str(e)) from e
        return [(row["parent_id"], row["child_id"]) for row in rows]

    async def delete_many(self, todo_ids: list[str]) -> int:
        """Delete the given records. Returns how many rows were removed."""
        if not todo_ids:
            return 0
        placeholders = ", ".join("?" for _ in todo_ids)
        try:
            cursor = await self._db.execute(
                f"DELETE FROM todos WHERE todo_id IN ({placeholders})",
                tuple(todo_ids),
            )
        except aiosqlite.Error as e:
            logger.warning("Delete of %d todos failed: %s", len(todo_ids), e)
            raise StoreWriteError(todo_ids[0], f"delete failed: {e}") from e
        return cursor.rowcount

    async def _fetch_many(self, todo_ids: list[str]) -> dict[str, TodoNode]:
        """One read for a batch of identifiers; duplicates map to one record."""
        unique = list(dict.fromkeys(todo_ids))
        placeholders = ", ".join("?" for _ in unique)
        try:
            rows = await self._db.fetchall(
                f"SELECT * FROM todos WHERE todo_id IN ({placeholders})",
                tuple(unique),
            )
        except aiosqlite.Error as e:
            logger.warning("Batch fetch of %d todos failed: %s", len(unique), e)
            raise StoreReadError(unique[0], str(e)) from e
        return {row["todo_id"]: self._row_to_todo(row) for row in rows}

    @staticmethod
    def _row_to_todo(row) -> TodoNode:
        """Convert a database row to a TodoNode with identifier children."""
        return TodoNode(
            todo_id=row["todo_id"],
            description=row["description"],
            done=bool(row["done"]),
            is_root=bool(row["is_root"]),
            sub_todos=parse_id_list(row["sub_todos"]),
        )
