"""Canonical data structures for todotree.

A TodoNode is used both for unsaved in-memory trees and for records read
back from the store. Each child slot holds either another TodoNode or the
identifier of an already persisted record.
"""

import sys

from pydantic import BaseModel, ConfigDict, Field

# "No depth limit". Depth bounds are always compared against an int.
UNBOUNDED = sys.maxsize

CHILD_FIELD = "sub_todos"


class TodoNode(BaseModel):
    model_config = ConfigDict(extra="forbid")

    todo_id: str | None = None
    description: str
    done: bool = False
    is_root: bool = False
    sub_todos: list["TodoNode | str"] = Field(default_factory=list)

    def child_ids(self) -> list[str]:
        """Identifiers of the children, resolved or not. None for unsaved children."""
        return [
            child if isinstance(child, str) else child.todo_id
            for child in self.sub_todos
        ]

    def is_resolved(self) -> bool:
        """True when no child slot is a bare identifier."""
        return not any(isinstance(child, str) for child in self.sub_todos)


TodoNode.model_rebuild()
