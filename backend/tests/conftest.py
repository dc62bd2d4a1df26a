"""Shared pytest fixtures for todotree tests."""

import pytest
from httpx import ASGITransport, AsyncClient

from todotree.db.connection import Database
from todotree.main import app
from todotree.store.sqlite import TodoStore
from todotree.todos.router import get_todo_service
from todotree.todos.service import TodoService
from tests.fixtures import RecordingStore


@pytest.fixture
async def db():
    """In-memory database for tests."""
    database = await Database.connect(":memory:")
    yield database
    await database.close()


@pytest.fixture
async def todo_store(db):
    """TodoStore backed by in-memory database."""
    return TodoStore(db)


@pytest.fixture
def recording_store():
    """In-memory store that logs every call."""
    return RecordingStore()


@pytest.fixture
async def client(todo_store):
    """Async test client with in-memory DB wired into the app."""
    service = TodoService(todo_store)
    app.dependency_overrides[get_todo_service] = lambda: service
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client
    app.dependency_overrides.clear()
