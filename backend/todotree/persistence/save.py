"""Leaf-first persistence of an in-memory todo graph.

The store can only reference children that already have identifiers, so
nodes are inserted in reverse level order: a node is discovered no later than
any of its children, hence reversing the walk puts every child ahead of every
parent. As each node is inserted its new identifier is handed to the parents
that are still waiting for it.
"""

import logging
from collections import defaultdict
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from todotree.errors import CycleDetectedError, MalformedNodeError
from todotree.graph.adjacency import Adjacency, build_adjacency
from todotree.graph.traversal import level_order
from todotree.models import CHILD_FIELD, TodoNode
from todotree.store.base import RecordStore

logger = logging.getLogger(__name__)


def coerce_todo(value: Any) -> TodoNode:
    """Accept a TodoNode or a mapping that validates into one."""
    if isinstance(value, TodoNode):
        return value
    if isinstance(value, Mapping):
        try:
            return TodoNode.model_validate(value)
        except ValidationError as e:
            raise MalformedNodeError(f"invalid todo: {e.error_count()} error(s)") from e
    raise MalformedNodeError(f"expected a todo, got {type(value).__name__}")


def leaves_first_order(adjacency: Adjacency, order: list[Any]) -> list[int]:
    """Indices in reversed level order, children always ahead of their parents.

    For graphs whose edges never point back to an earlier node of the same
    level this is exactly the reversed walk. Otherwise a node is held back
    until all of its children have been placed.
    """
    placed: set[int] = set()
    result: list[int] = []
    pending = [adjacency.index(node) for node in reversed(order)]

    while pending:
        deferred = []
        for index in pending:
            if all(child in placed for child in adjacency.out_vertices[index]):
                placed.add(index)
                result.append(index)
            else:
                deferred.append(index)
        if len(deferred) == len(pending):
            raise CycleDetectedError(deferred[0])
        pending = deferred

    return result


def _to_record(
    node: TodoNode, adjacency: Adjacency, saved_children: dict[int, str]
) -> TodoNode:
    """The flat record for ``node``: own fields plus child identifiers in child order."""
    sub_todos = [
        child if isinstance(child, str) else saved_children[adjacency.index(child)]
        for child in node.sub_todos
    ]
    return TodoNode(
        description=node.description,
        done=node.done,
        is_root=node.is_root,
        sub_todos=sub_todos,
    )


async def save_tree(store: RecordStore, root: TodoNode | Mapping) -> str:
    """Persist every node reachable from ``root``; return the root's identifier.

    One insert per node, children strictly before parents, no reads. A node
    shared by several parents is inserted once and all of them reference it.
    The caller's nodes are not modified.

    All validation happens before the first insert. After that the first
    failing insert aborts the save with the store's error; records already
    inserted stay in the store. Saving the same tree twice creates two
    independent sets of records.
    """
    root = coerce_todo(root)
    adjacency = build_adjacency(root, CHILD_FIELD)
    for index, node in enumerate(adjacency.node_of):
        if not isinstance(node, TodoNode):
            raise MalformedNodeError(
                f"expected a todo, got {type(node).__name__}", index=index
            )

    order = leaves_first_order(adjacency, level_order(root, CHILD_FIELD))

    # parent index -> {child index: child todo_id}, filled as children land
    pending_child_ids: dict[int, dict[int, str]] = defaultdict(dict)
    todo_id = ""

    for index in order:
        record = _to_record(adjacency.node_of[index], adjacency, pending_child_ids[index])
        todo_id = await store.insert(record)
        logger.debug("Inserted todo %s (node %d)", todo_id, index)
        for parent in adjacency.in_vertices[index]:
            pending_child_ids[parent][index] = todo_id

    logger.info("Saved %d todos under root %s", len(order), todo_id)
    return todo_id
