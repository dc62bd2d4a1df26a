"""Bounded breadth-first population of a stored todo tree."""

import logging

from todotree.graph.traversal import traverse
from todotree.models import CHILD_FIELD, UNBOUNDED, TodoNode
from todotree.store.base import RecordStore

logger = logging.getLogger(__name__)


async def populate_tree(
    store: RecordStore,
    root: TodoNode | str,
    max_depth: int = UNBOUNDED,
) -> TodoNode:
    """Materialize the children of ``root`` level by level, down to ``max_depth``.

    Nodes above the limit (depth < max_depth) get their identifier children
    replaced by fetched records; nodes at the limit keep bare identifiers.
    ``max_depth=0`` therefore resolves nothing. ``root`` may be a record or an
    identifier. The first failed read aborts with the store's error.
    """
    if max_depth < 0:
        raise ValueError(f"max_depth must be >= 0, got {max_depth}")
    if isinstance(root, str):
        root = await store.fetch(root)

    resolved = 0
    # The walk reads a node's children only after we have resolved them.
    for node, depth in traverse(root, CHILD_FIELD, max_depth):
        if depth < max_depth:
            await store.resolve_level(node, CHILD_FIELD)
            resolved += 1

    logger.debug("Populated %s: resolved %d node(s)", root.todo_id, resolved)
    return root
