"""FastAPI routes for todo tree CRUD."""

from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException

from todotree.errors import MalformedNodeError, StoreError
from todotree.models import TodoNode
from todotree.todos.schemas import DeleteResponse, TodoListResponse, TodoResponse
from todotree.todos.service import (
    InvalidTodoIdError,
    TodoNotFoundError,
    TodoReferencedError,
    TodoService,
)

router = APIRouter(prefix="/api/todos", tags=["todos"])


def get_todo_service() -> TodoService:
    """Dependency placeholder, replaced at app startup."""
    raise RuntimeError("TodoService not initialized")


def _invalid_id(todo_id: str) -> HTTPException:
    return HTTPException(status_code=404, detail=f"invalid id: {todo_id}")


def _invalid_todo() -> HTTPException:
    return HTTPException(status_code=400, detail="invalid todo")


def _store_failure(e: StoreError) -> HTTPException:
    return HTTPException(status_code=500, detail=str(e))


def _still_referenced(todo_id: str) -> HTTPException:
    return HTTPException(
        status_code=409, detail=f"todo {todo_id} is a child of another todo"
    )


@router.get("")
async def list_todos(
    service: TodoService = Depends(get_todo_service),
) -> TodoListResponse:
    try:
        todos = await service.list_roots()
    except StoreError as e:
        raise _store_failure(e)
    if not todos:
        raise HTTPException(status_code=404, detail="there are no todos")
    return TodoListResponse(todos=todos)


@router.get("/{todo_id}")
async def get_todo(
    todo_id: str,
    service: TodoService = Depends(get_todo_service),
) -> TodoResponse:
    try:
        return TodoResponse(todo=await service.get_todo(todo_id))
    except InvalidTodoIdError:
        raise _invalid_id(todo_id)
    except TodoNotFoundError:
        raise HTTPException(
            status_code=404, detail=f"there is no todo with id {todo_id}"
        )
    except StoreError as e:
        raise _store_failure(e)


@router.post("")
async def create_todo(
    payload: Any = Body(...),
    service: TodoService = Depends(get_todo_service),
) -> TodoNode:
    try:
        return await service.create_todo(payload)
    except MalformedNodeError:
        raise _invalid_todo()
    except StoreError as e:
        raise _store_failure(e)


@router.put("/{todo_id}")
async def replace_todo(
    todo_id: str,
    payload: Any = Body(...),
    service: TodoService = Depends(get_todo_service),
) -> TodoNode:
    try:
        return await service.replace_todo(todo_id, payload)
    except InvalidTodoIdError:
        raise _invalid_id(todo_id)
    except MalformedNodeError:
        raise _invalid_todo()
    except TodoReferencedError:
        raise _still_referenced(todo_id)
    except StoreError as e:
        raise _store_failure(e)


@router.patch("/{todo_id}")
async def update_todo(
    todo_id: str,
    payload: Any = Body(...),
    service: TodoService = Depends(get_todo_service),
) -> TodoNode:
    try:
        return await service.update_todo(todo_id, payload)
    except InvalidTodoIdError:
        raise _invalid_id(todo_id)
    except TodoNotFoundError:
        raise HTTPException(status_code=404, detail=f"not existing id: {todo_id}")
    except MalformedNodeError:
        raise _invalid_todo()
    except TodoReferencedError:
        raise _still_referenced(todo_id)
    except StoreError as e:
        raise _store_failure(e)


@router.delete("/{todo_id}")
async def delete_todo(
    todo_id: str,
    service: TodoService = Depends(get_todo_service),
) -> DeleteResponse:
    try:
        deleted = await service.delete_todo(todo_id)
    except (InvalidTodoIdError, TodoNotFoundError):
        raise _invalid_todo()
    except TodoReferencedError:
        raise _still_referenced(todo_id)
    except StoreError as e:
        raise _store_failure(e)
    return DeleteResponse(message="todo deleted", deleted_count=deleted)
