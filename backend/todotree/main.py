"""todotree FastAPI application entry point."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from todotree.config import Settings
from todotree.db.connection import Database
from todotree.store.sqlite import TodoStore
from todotree.todos.router import get_todo_service
from todotree.todos.router import router as todos_router
from todotree.todos.service import TodoService

# Load .env from backend/ before settings are read
load_dotenv(Path(__file__).resolve().parent.parent / ".env")
settings = Settings.from_env()
logging.basicConfig(level=settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage database lifecycle and service wiring."""
    db = await Database.connect(settings.db_path)

    service = TodoService(TodoStore(db), populate_depth=settings.populate_depth)
    app.dependency_overrides[get_todo_service] = lambda: service

    app.state.db = db
    yield

    await db.close()


app = FastAPI(
    title="todotree",
    description="Stores nested todo lists as flat records, children before parents",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(todos_router)


@app.get("/api/health")
async def health() -> dict:
    return {"status": "ok", "version": "0.1.0"}
