"""Durable store adapters for pipeline state."""
from .base import DurableStore
from .memory import MemoryStore
from .migrate import migrate
from .pipelines import SqliteStore

__all__ = ["DurableStore", "MemoryStore", "SqliteStore", "migrate"]
