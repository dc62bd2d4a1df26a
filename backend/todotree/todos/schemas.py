"""Response schemas for todo endpoints."""

from pydantic import BaseModel

from todotree.models import TodoNode


class TodoListResponse(BaseModel):
    todos: list[TodoNode]


class TodoResponse(BaseModel):
    todo: TodoNode


class DeleteResponse(BaseModel):
    message: str
    deleted_count: int
