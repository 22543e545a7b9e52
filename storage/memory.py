from __future__ import annotations  # In-process durable store for tests and ephemeral runs

import threading
from typing import Dict, Optional

from pipeline.models import Pipeline


class MemoryStore:  # Holds serialized snapshots so callers never share references
    def __init__(self) -> None:
        self._rows: Dict[str, str] = {}
        self._guard = threading.Lock()

    def get(self, key: str) -> Optional[Pipeline]:
        with self._guard:
            raw = self._rows.get(key)
        if raw is None:
            return None
        return Pipeline.model_validate_json(raw)

    def put(self, key: str, value: Pipeline) -> None:
        raw = value.model_dump_json()
        with self._guard:
            self._rows[key] = raw

    def __len__(self) -> int:
        return len(self._rows)


__all__ = ["MemoryStore"]
