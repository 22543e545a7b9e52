"""Process-wide service wiring for the HTTP layer."""
from __future__ import annotations

import threading
from typing import Optional

from config.settings import settings
from pipeline import PipelineMachine
from services.interview import InterviewService
from storage import SqliteStore, migrate

_SERVICE: Optional[InterviewService] = None
_SERVICE_GUARD = threading.Lock()


def build_service(db_path: Optional[str] = None) -> InterviewService:
    """Create a service over the SQLite store; one instance must serve every request."""

    path = db_path or settings.DB_PATH
    migrate(path)
    machine = PipelineMachine(
        SqliteStore(path, ensure_schema=False),
        max_notes=settings.MAX_NOTES_PER_PIPELINE,
        initial_phase=settings.INITIAL_PHASE,
    )
    return InterviewService(machine, max_jd_chars=settings.JD_MAX_CHARS)


def get_service() -> InterviewService:
    global _SERVICE
    with _SERVICE_GUARD:
        if _SERVICE is None:
            _SERVICE = build_service()
        return _SERVICE


def set_service(service: Optional[InterviewService]) -> None:
    """Install ``service`` for subsequent requests; ``None`` rebuilds lazily."""
    global _SERVICE
    with _SERVICE_GUARD:
        _SERVICE = service


__all__ = ["build_service", "get_service", "set_service"]
