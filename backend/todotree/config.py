"""Runtime settings, read from the environment at startup."""

import os

from pydantic import BaseModel, Field

from todotree.models import UNBOUNDED


class Settings(BaseModel):
    db_path: str = "todotree.db"
    populate_depth: int = Field(default=UNBOUNDED, ge=0)
    cors_origins: list[str] = Field(default_factory=lambda: ["http://localhost:5173"])
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from TODOTREE_* variables, falling back to defaults."""
        values: dict = {}
        if db_path := os.environ.get("TODOTREE_DB_PATH"):
            values["db_path"] = db_path
        if depth := os.environ.get("TODOTREE_POPULATE_DEPTH"):
            values["populate_depth"] = int(depth)
        if origins := os.environ.get("TODOTREE_CORS_ORIGINS"):
            values["cors_origins"] = [o.strip() for o in origins.split(",") if o.strip()]
        if log_level := os.environ.get("TODOTREE_LOG_LEVEL"):
            values["log_level"] = log_level.upper()
        return cls(**values)
