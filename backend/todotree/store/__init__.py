"""Record stores: the abstract interface and the SQLite implementation."""

from todotree.store.base import RecordStore
from todotree.store.sqlite import TodoStore

__all__ = ["RecordStore", "TodoStore"]
