"""Database schema DDL. All statements use IF NOT EXISTS for idempotency."""

# sub_todos is a JSON array of child todo_ids, in child order.
SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS todos (
    todo_id TEXT PRIMARY KEY,
    description TEXT NOT NULL,
    done INTEGER NOT NULL DEFAULT 0,
    is_root INTEGER NOT NULL DEFAULT 0,
    sub_todos TEXT NOT NULL DEFAULT '[]' CHECK (json_valid(sub_todos)),
    created_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_todos_is_root ON todos(is_root);
"""
