"""Index-addressable adjacency lists over an in-memory node graph.

Nodes are indexed by identity (``id(node)``), never by value: two todos with
identical fields are distinct vertices, and a node shared by two parents is a
single vertex with two incoming edges. The adjacency keeps every indexed node
alive in ``node_of`` for as long as it exists, so the identity keys stay valid.
"""

from collections import deque
from dataclasses import dataclass, field
from typing import Any

from todotree.errors import CycleDetectedError, MalformedNodeError
from todotree.models import CHILD_FIELD


@dataclass
class Adjacency:
    """Dense integer indexing plus forward/backward edge lists."""

    index_of: dict[int, int] = field(default_factory=dict)
    """id(node) -> index"""

    node_of: list[Any] = field(default_factory=list)
    """index -> node"""

    out_vertices: list[list[int]] = field(default_factory=list)
    """index -> child indices, in child-list order"""

    in_vertices: list[list[int]] = field(default_factory=list)
    """index -> parent indices, in parent-discovery order"""

    def __len__(self) -> int:
        return len(self.node_of)

    def __contains__(self, node: object) -> bool:
        return id(node) in self.index_of

    def index(self, node: Any) -> int:
        """Index of ``node``. Raises KeyError for nodes outside this graph."""
        return self.index_of[id(node)]

    def _add(self, node: Any) -> int:
        index = len(self.node_of)
        self.index_of[id(node)] = index
        self.node_of.append(node)
        self.out_vertices.append([])
        self.in_vertices.append([])
        return index


def child_slots(node: Any, child_field: str) -> list[Any]:
    """The raw child slots of ``node``: nodes and identifier references."""
    return list(getattr(node, child_field, None) or ())


def build_adjacency(root: Any, child_field: str = CHILD_FIELD) -> Adjacency:
    """Index every node reachable from ``root`` and record its edges.

    Walks breadth-first; a node gets the next free index the first time it is
    discovered. String child slots are references to already persisted
    records and are not vertices.

    Raises MalformedNodeError when the root or a child slot is neither a node
    carrying ``child_field`` nor a string reference, and CycleDetectedError
    when the child links loop back on themselves.
    """
    if not hasattr(root, child_field):
        raise MalformedNodeError(f"root has no {child_field!r} field")

    adjacency = Adjacency()
    adjacency._add(root)
    queue: deque[Any] = deque([root])

    while queue:
        node = queue.popleft()
        parent = adjacency.index(node)
        for position, child in enumerate(child_slots(node, child_field)):
            if isinstance(child, str):
                continue
            if not hasattr(child, child_field):
                raise MalformedNodeError(
                    f"child is a {type(child).__name__}, not a node or reference",
                    index=parent,
                    position=position,
                )
            if child not in adjacency:
                adjacency._add(child)
                queue.append(child)
            index = adjacency.index(child)
            adjacency.out_vertices[parent].append(index)
            adjacency.in_vertices[index].append(parent)

    _check_acyclic(adjacency)
    return adjacency


def _check_acyclic(adjacency: Adjacency) -> None:
    """Peel leaves off until nothing is left; anything that remains sits on or above a cycle.

    The reported index is on the cycle itself: every remaining node still has a
    remaining child, so following those children must come back around.
    """
    remaining = [len(children) for children in adjacency.out_vertices]
    ready = deque(i for i, count in enumerate(remaining) if count == 0)
    peeled = 0

    while ready:
        index = ready.popleft()
        peeled += 1
        for parent in adjacency.in_vertices[index]:
            remaining[parent] -= 1
            if remaining[parent] == 0:
                ready.append(parent)

    if peeled == len(adjacency):
        return

    stuck = {i for i, count in enumerate(remaining) if count > 0}
    index = min(stuck)
    visited: set[int] = set()
    while index not in visited:
        visited.add(index)
        index = next(c for c in adjacency.out_vertices[index] if c in stuck)
    raise CycleDetectedError(index)
