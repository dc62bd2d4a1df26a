"""Graph indexing and traversal over in-memory todo trees."""

from todotree.graph.adjacency import Adjacency, build_adjacency
from todotree.graph.traversal import BreadthFirst, level_order, traverse

__all__ = ["Adjacency", "BreadthFirst", "build_adjacency", "level_order", "traverse"]
