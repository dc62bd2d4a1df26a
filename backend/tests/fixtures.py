"""Shared test helpers: todo builders and an in-memory recording store."""

from typing import Any
from uuid import uuid4

from httpx import AsyncClient

from todotree.errors import StoreReadError, StoreWriteError
from todotree.models import CHILD_FIELD, TodoNode
from todotree.store.base import RecordStore


def todo(description: str, *sub_todos: TodoNode | str, **fields: Any) -> TodoNode:
    """Build an unsaved TodoNode; children keep their object identity."""
    node = TodoNode(description=description, **fields)
    node.sub_todos = list(sub_todos)
    return node


def sample_tree() -> TodoNode:
    """root -> (a -> (a1, a2), b)"""
    return todo(
        "root",
        todo("a", todo("a1"), todo("a2", done=True)),
        todo("b"),
    )


def sample_payload() -> dict:
    """The JSON shape of a small todo list, as posted by clients."""
    return {
        "description": "plan the trip",
        "sub_todos": [
            {"description": "book flights", "done": True},
            {
                "description": "pack",
                "sub_todos": [
                    {"description": "clothes"},
                    {"description": "charger"},
                ],
            },
        ],
    }


class RecordingStore(RecordStore):
    """Dict-backed RecordStore that records the order of every call.

    ``fail_on`` makes the insert of the todo with that description raise
    StoreWriteError, after the earlier inserts have landed.
    """

    def __init__(self, fail_on: str | None = None) -> None:
        self.records: dict[str, TodoNode] = {}
        self.inserted: list[tuple[str, TodoNode]] = []
        self.resolved: list[str] = []
        self.fail_on = fail_on

    async def insert(self, record: TodoNode) -> str:
        assert all(isinstance(child, str) for child in record.sub_todos)
        if record.description == self.fail_on:
            raise StoreWriteError(record.description, "injected failure")
        todo_id = str(uuid4())
        stored = record.model_copy(update={"todo_id": todo_id})
        self.records[todo_id] = stored
        self.inserted.append((todo_id, stored))
        return todo_id

    async def fetch(self, todo_id: str) -> TodoNode:
        if todo_id not in self.records:
            raise StoreReadError(todo_id)
        stored = self.records[todo_id]
        return stored.model_copy(update={"sub_todos": list(stored.sub_todos)})

    async def resolve_level(
        self, node_or_id: TodoNode | str, field: str = CHILD_FIELD
    ) -> TodoNode:
        node = (
            await self.fetch(node_or_id) if isinstance(node_or_id, str) else node_or_id
        )
        self.resolved.append(node.todo_id)
        node.sub_todos = [
            await self.fetch(child) if isinstance(child, str) else child
            for child in node.sub_todos
        ]
        return node

    def insert_order(self) -> list[str]:
        """Descriptions in the order they were inserted."""
        return [record.description for _, record in self.inserted]

    def by_description(self, description: str) -> TodoNode:
        return next(r for _, r in self.inserted if r.description == description)


# -- API-level helpers --


async def create_test_todo(client: AsyncClient, payload: dict | None = None) -> dict:
    """POST a todo tree and return the response JSON."""
    resp = await client.post("/api/todos", json=payload or sample_payload())
    assert resp.status_code == 200
    return resp.json()
