"""SQLite schema for the pipeline key-value store."""
from __future__ import annotations

import os
import sqlite3
from typing import Iterable

# One row per pipeline; ``value`` is the JSON document, replaced whole on every write.
SCHEMA: Iterable[str] = [
    """
CREATE TABLE IF NOT EXISTS pipelines (
  key TEXT PRIMARY KEY,
  value TEXT NOT NULL,
  updated_at TEXT NOT NULL
);
""",
    "CREATE INDEX IF NOT EXISTS idx_pipelines_updated_at ON pipelines (updated_at);",
]


def migrate(db_path: str) -> None:
    """Create the pipelines table (idempotent), making the parent directory if needed."""

    directory = os.path.dirname(db_path) or "."
    os.makedirs(directory, exist_ok=True)
    conn = sqlite3.connect(db_path)
    try:
        for stmt in SCHEMA:
            conn.execute(stmt)
        conn.commit()
    finally:
        conn.close()


if __name__ == "__main__":
    from config.settings import settings

    migrate(settings.DB_PATH)
