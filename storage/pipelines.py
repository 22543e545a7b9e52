"""SQLite-backed durable store for pipeline snapshots."""
from __future__ import annotations

import datetime as dt
import logging
import sqlite3
from typing import Optional

import pydantic

from pipeline.errors import StoreError
from pipeline.models import Pipeline

from .migrate import migrate
from .sqlite import get_conn

logger = logging.getLogger(__name__)


class SqliteStore:
    """One row per pipeline id; every ``put`` replaces the row in a single transaction."""

    def __init__(self, db_path: Optional[str] = None, *, ensure_schema: bool = True) -> None:
        self._db_path = db_path
        if ensure_schema and db_path:
            migrate(db_path)

    def get(self, key: str) -> Optional[Pipeline]:
        try:
            with get_conn(self._db_path) as conn:
                row = conn.execute("SELECT value FROM pipelines WHERE key = ?", (key,)).fetchone()
        except (sqlite3.Error, OSError) as exc:
            logger.error("Pipeline load failed key=%s: %s", key, exc)
            raise StoreError("durable store read failed", key=key) from exc
        if row is None:
            return None
        try:
            return Pipeline.model_validate_json(row[0])
        except pydantic.ValidationError as exc:
            logger.error("Stored pipeline is corrupt key=%s: %s", key, exc)
            raise StoreError("stored pipeline is unreadable", key=key) from exc

    def put(self, key: str, value: Pipeline) -> None:
        payload = value.model_dump_json()
        timestamp = dt.datetime.now(dt.timezone.utc).isoformat()
        try:
            with get_conn(self._db_path) as conn:
                conn.execute(
                    """INSERT OR REPLACE INTO pipelines (key, value, updated_at)
                       VALUES (?, ?, ?)""",
                    (key, payload, timestamp),
                )
        except (sqlite3.Error, OSError) as exc:
            logger.error("Pipeline save failed key=%s: %s", key, exc)
            raise StoreError("durable store write failed", key=key) from exc


__all__ = ["SqliteStore"]
