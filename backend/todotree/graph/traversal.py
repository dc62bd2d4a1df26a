"""Breadth-first (level-order) walks over a node graph."""

from collections import deque
from collections.abc import Iterator
from typing import Any

from todotree.models import CHILD_FIELD, UNBOUNDED


class BreadthFirst:
    """A restartable level-order walk yielding ``(node, depth)`` pairs.

    Every call to ``iter()`` starts a fresh walk from the root. All nodes at
    depth d come out before any node at depth d + 1; within a level, nodes
    come out in the order their first-discovered parent lists them. A node
    reachable along several paths is produced once. Nodes at or beyond
    ``max_depth`` are produced but not expanded.

    A node's children are read only when the walk resumes past that node, so
    a consumer may materialize them in between (this is how population drives
    the walk).
    """

    def __init__(
        self,
        root: Any,
        child_field: str = CHILD_FIELD,
        max_depth: int = UNBOUNDED,
    ) -> None:
        self.root = root
        self.child_field = child_field
        self.max_depth = max_depth

    def __iter__(self) -> Iterator[tuple[Any, int]]:
        seen = {id(self.root)}
        queue: deque[tuple[Any, int]] = deque([(self.root, 0)])

        while queue:
            node, depth = queue.popleft()
            yield node, depth
            if depth >= self.max_depth:
                continue
            for child in getattr(node, self.child_field, None) or ():
                if isinstance(child, str) or id(child) in seen:
                    continue
                seen.add(id(child))
                queue.append((child, depth + 1))


def traverse(
    root: Any,
    child_field: str = CHILD_FIELD,
    max_depth: int = UNBOUNDED,
) -> BreadthFirst:
    """Lazy level-order sequence of ``(node, depth)`` starting at ``root``."""
    return BreadthFirst(root, child_field, max_depth)


def level_order(root: Any, child_field: str = CHILD_FIELD) -> list[Any]:
    """All reachable nodes, materialized in level order."""
    return [node for node, _ in traverse(root, child_field)]
