"""Abstract record store interface consumed by the persistence core."""

from abc import ABC, abstractmethod

from todotree.models import CHILD_FIELD, TodoNode


class RecordStore(ABC):
    """A flat store of todo records addressed by generated identifiers.

    Records only reference children by identifier, so a parent can be stored
    only after all of its children have been.
    """

    @abstractmethod
    async def insert(self, record: TodoNode) -> str:
        """Store ``record`` and return its freshly generated identifier.

        Every child slot of ``record`` must already be an identifier.
        Raises StoreWriteError on any backing failure.
        """
        ...

    @abstractmethod
    async def fetch(self, todo_id: str) -> TodoNode:
        """Read one record, children as identifiers. Raises StoreReadError if absent."""
        ...

    @abstractmethod
    async def resolve_level(
        self, node_or_id: TodoNode | str, field: str = CHILD_FIELD
    ) -> TodoNode:
        """Replace the identifier children of one record with fetched records.

        Accepts a record (resolved in place and returned) or an identifier
        (fetched first). Children that are already records are left alone.
        Raises StoreReadError if the record or any referenced child is missing.
        """
        ...
