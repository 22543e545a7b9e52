"""Lightweight CLI helpers for inspecting persisted pipelines."""
from __future__ import annotations

import argparse
import json
import sqlite3
from typing import Optional

from config.settings import settings


def _summary(value: str) -> str:
    try:
        data = json.loads(value)
    except json.JSONDecodeError:
        return "unreadable"
    notes = data.get("notes") or []
    return (
        f"{data.get('jobTitle', '?')} status={data.get('status', '?')} "
        f"phase={data.get('currentPhase', '?')} notes={len(notes)}"
    )


def tail_pipelines(limit: int = 20, db_path: Optional[str] = None) -> None:
    conn = sqlite3.connect(db_path or settings.DB_PATH)
    try:
        cursor = conn.cursor()
        cursor.execute(
            """
            SELECT updated_at, key, value
            FROM pipelines
            ORDER BY updated_at DESC
            LIMIT ?
            """,
            (limit,),
        )
        for updated_at, key, value in cursor.fetchall():
            print(f"[{updated_at}] {key} {_summary(value)}")
    finally:
        conn.close()


def show_pipeline(pipeline_id: str, db_path: Optional[str] = None) -> bool:
    conn = sqlite3.connect(db_path or settings.DB_PATH)
    try:
        row = conn.execute("SELECT value FROM pipelines WHERE key = ?", (pipeline_id,)).fetchone()
    finally:
        conn.close()
    if row is None:
        print(f"pipeline {pipeline_id} not found")
        return False
    print(json.dumps(json.loads(row[0]), indent=2))
    return True


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--tail", type=int, help="Show the most recently updated pipelines")
    parser.add_argument("--show", help="Print one pipeline as JSON")
    parser.add_argument("--db", help="Database path (defaults to DB_PATH)")
    args = parser.parse_args(argv)

    if args.tail:
        tail_pipelines(args.tail, args.db)
    if args.show:
        show_pipeline(args.show, args.db)


if __name__ == "__main__":
    main()
