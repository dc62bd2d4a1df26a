"""Saving in-memory todo graphs to a record store and reading them back."""

from todotree.persistence.populate import populate_tree
from todotree.persistence.save import coerce_todo, leaves_first_order, save_tree

__all__ = ["coerce_todo", "leaves_first_order", "populate_tree", "save_tree"]
