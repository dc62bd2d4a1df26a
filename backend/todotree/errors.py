"""Domain-level errors for graph indexing, persistence and the record store."""


class TodoTreeError(Exception):
    """Base exception for todotree operations."""


class CycleDetectedError(TodoTreeError):
    def __init__(self, index: int) -> None:
        self.index = index
        super().__init__(f"Cycle detected through node index {index}")


class MalformedNodeError(TodoTreeError):
    """Raised before any store call when a value cannot be persisted as a node."""

    def __init__(
        self,
        reason: str,
        index: int | None = None,
        position: int | None = None,
    ) -> None:
        self.reason = reason
        self.index = index
        self.position = position
        where = ""
        if index is not None:
            where = f" (node {index}" + (
                f", child {position})" if position is not None else ")"
            )
        super().__init__(f"Malformed node{where}: {reason}")


class StoreError(TodoTreeError):
    def __init__(self, message: str, todo_id: str | None = None) -> None:
        self.todo_id = todo_id
        super().__init__(message)


class StoreWriteError(StoreError):
    def __init__(self, description: str, cause: str) -> None:
        self.description = description
        super().__init__(f"Failed to write todo {description!r}: {cause}")


class StoreReadError(StoreError):
    def __init__(self, todo_id: str, cause: str = "no such todo") -> None:
        super().__init__(f"Failed to read todo {todo_id}: {cause}", todo_id=todo_id)
