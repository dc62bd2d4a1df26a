"""Todo service: CRUD over whole todo trees, built on save/populate."""

import logging
from typing import Any
from uuid import UUID

from todotree.errors import MalformedNodeError
from todotree.graph.traversal import level_order, traverse
from todotree.models import CHILD_FIELD, UNBOUNDED, TodoNode
from todotree.persistence.populate import populate_tree
from todotree.persistence.save import coerce_todo, save_tree
from todotree.store.sqlite import TodoStore

logger = logging.getLogger(__name__)


class TodoService:
    """Saves, reads, replaces and deletes complete todo trees.

    Incoming trees may mix new todos with identifiers of todos that are
    already stored; those references are kept as they are.
    """

    def __init__(self, store: TodoStore, populate_depth: int = UNBOUNDED) -> None:
        self._store = store
        self._populate_depth = populate_depth

    async def list_roots(self) -> list[TodoNode]:
        """All root todos, oldest first, populated."""
        return [
            await populate_tree(self._store, todo_id, self._populate_depth)
            for todo_id in await self._store.list_root_ids()
        ]

    async def get_todo(self, todo_id: str) -> TodoNode:
        await self._require_existing(todo_id)
        return await populate_tree(self._store, todo_id, self._populate_depth)

    async def create_todo(self, payload: Any) -> TodoNode:
        """Save ``payload`` as a new root tree and return it populated."""
        root = coerce_todo(payload).model_copy(update={"is_root": True})
        await self._check_references(root)
        return await self._save_and_populate(root)

    async def replace_todo(self, todo_id: str, payload: Any) -> TodoNode:
        """Replace the tree stored under ``todo_id``, or create it as a new root.

        The replacement gets a new identifier; the old records are deleted,
        except those the replacement or another stored todo still references.
        """
        _check_id(todo_id)
        root = coerce_todo(payload).model_copy(update={"is_root": True})
        references = await self._check_references(root)
        if await self._store.exists(todo_id):
            await self._require_unreferenced(todo_id)
            await self._delete_subtree(todo_id, keep=references)
        return await self._save_and_populate(root)

    async def update_todo(self, todo_id: str, payload: Any) -> TodoNode:
        """Replace an existing tree, keeping its root flag."""
        _check_id(todo_id)
        root = coerce_todo(payload)
        if not await self._store.exists(todo_id):
            raise TodoNotFoundError(todo_id)
        references = await self._check_references(root)
        await self._require_unreferenced(todo_id)
        existing = await self._store.fetch(todo_id)
        root = root.model_copy(update={"is_root": existing.is_root})
        await self._delete_subtree(todo_id, keep=references)
        return await self._save_and_populate(root)

    async def delete_todo(self, todo_id: str) -> int:
        """Delete a todo and everything below it that nothing else references.

        Returns the record count. A todo that is itself some other todo's
        child cannot be deleted.
        """
        await self._require_existing(todo_id)
        await self._require_unreferenced(todo_id)
        return await self._delete_subtree(todo_id)

    async def _save_and_populate(self, root: TodoNode) -> TodoNode:
        todo_id = await save_tree(self._store, root)
        return await populate_tree(self._store, todo_id, self._populate_depth)

    async def _check_references(self, root: TodoNode) -> list[str]:
        """Identifier children anywhere in ``root``; each must name a stored todo."""
        references = [
            child
            for node in level_order(root)
            for child in getattr(node, CHILD_FIELD, ())
            if isinstance(child, str)
        ]
        for reference in dict.fromkeys(references):
            if not await self._store.exists(reference):
                raise MalformedNodeError(f"unknown todo reference {reference!r}")
        return references

    async def _require_unreferenced(self, todo_id: str) -> None:
        references = await self._store.list_references([todo_id])
        parents = list(dict.fromkeys(parent for parent, _ in references))
        if parents:
            raise TodoReferencedError(todo_id, parents)

    async def _subtree_ids(self, todo_id: str) -> set[str]:
        tree = await populate_tree(self._store, todo_id)
        return {node.todo_id for node, _ in traverse(tree)}

    async def _delete_subtree(self, todo_id: str, keep: list[str] | None = None) -> int:
        doomed = await self._subtree_ids(todo_id)
        for reference in keep or ():
            if reference in doomed:
                doomed -= await self._subtree_ids(reference)
        # Spare whatever a surviving record still points at, with its subtree.
        while True:
            shared = {
                child
                for parent, child in await self._store.list_references(sorted(doomed))
                if parent not in doomed
            }
            if not shared:
                break
            for child in shared:
                doomed -= await self._subtree_ids(child)
        deleted = await self._store.delete_many(sorted(doomed))
        logger.info("Deleted %d todo(s) under %s", deleted, todo_id)
        return deleted

    async def _require_existing(self, todo_id: str) -> None:
        _check_id(todo_id)
        if not await self._store.exists(todo_id):
            raise TodoNotFoundError(todo_id)


def _check_id(todo_id: str) -> None:
    try:
        UUID(todo_id)
    except ValueError:
        raise InvalidTodoIdError(todo_id) from None


class TodoNotFoundError(Exception):
    def __init__(self, todo_id: str) -> None:
        self.todo_id = todo_id
        super().__init__(f"Todo not found: {todo_id}")


class InvalidTodoIdError(Exception):
    def __init__(self, todo_id: str) -> None:
        self.todo_id = todo_id
        super().__init__(f"Invalid todo id: {todo_id}")


class TodoReferencedError(Exception):
    def __init__(self, todo_id: str, parent_ids: list[str]) -> None:
        self.todo_id = todo_id
        self.parent_ids = parent_ids
        super().__init__(f"Todo {todo_id} is referenced by {', '.join(parent_ids)}")
