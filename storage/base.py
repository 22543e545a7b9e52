"""Durable store protocol keyed by pipeline id."""
from __future__ import annotations

from typing import Optional, Protocol

from pipeline.models import Pipeline


class DurableStore(Protocol):  # Key-value store holding one pipeline snapshot per key
    def get(self, key: str) -> Optional[Pipeline]: ...

    def put(self, key: str, value: Pipeline) -> None: ...


__all__ = ["DurableStore"]
