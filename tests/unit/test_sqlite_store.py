"""Tests for the SQLite durable store and migrations."""
from __future__ import annotations

import os
import sqlite3

import pytest

from pipeline import Pipeline, PipelineNote, StoreError
from storage import SqliteStore, migrate


def _pipeline(pipeline_id: str = "p1") -> Pipeline:
    return Pipeline(id=pipeline_id, jobTitle="Engineer", company="Acme", jd="Build systems.")


def test_migrate_creates_pipelines_table(tmp_db: str):
    assert os.path.exists(tmp_db)
    with sqlite3.connect(tmp_db) as conn:
        tables = {row[0] for row in conn.execute("SELECT name FROM sqlite_master WHERE type='table'")}
    assert "pipelines" in tables
    migrate(tmp_db)


def test_get_missing_key_returns_none(tmp_db: str):
    assert SqliteStore(tmp_db).get("missing") is None


def test_put_then_get_round_trips_notes(tmp_db: str):
    store = SqliteStore(tmp_db)
    pipeline = _pipeline()
    pipeline.notes.append(PipelineNote(kind="evaluation", body={"result": {"scores": {"a": 4.0}}}))
    store.put(pipeline.id, pipeline)

    loaded = store.get(pipeline.id)
    assert loaded == pipeline


def test_put_replaces_the_row(tmp_db: str):
    store = SqliteStore(tmp_db)
    pipeline = _pipeline()
    store.put(pipeline.id, pipeline)
    pipeline.currentPhase = "scoring"
    store.put(pipeline.id, pipeline)

    with sqlite3.connect(tmp_db) as conn:
        count = conn.execute("SELECT COUNT(*) FROM pipelines WHERE key = ?", (pipeline.id,)).fetchone()[0]
    assert count == 1
    assert store.get(pipeline.id).currentPhase == "scoring"


def test_store_without_path_follows_settings(tmp_db: str):
    store = SqliteStore()
    store.put("p2", _pipeline("p2"))
    assert SqliteStore(tmp_db).get("p2") is not None


def test_corrupt_row_raises_store_error(tmp_db: str):
    with sqlite3.connect(tmp_db) as conn:
        conn.execute(
            "INSERT INTO pipelines (key, value, updated_at) VALUES (?, ?, ?)",
            ("bad", '{"id": "bad"}', "now"),
        )
    with pytest.raises(StoreError):
        SqliteStore(tmp_db).get("bad")


def test_missing_table_raises_store_error(tmp_path):
    store = SqliteStore(str(tmp_path / "empty.db"), ensure_schema=False)
    with pytest.raises(StoreError):
        store.get("p1")
    with pytest.raises(StoreError):
        store.put("p1", _pipeline())
