"""Per-session pipeline state machine.

Every operation on a pipeline id runs load -> mutate -> persist while holding
the lock bound to that id, so concurrent calls on one session queue instead of
racing. Different ids share nothing but the lock table guard. A lock entry
lives only while some caller holds or waits on it.
"""
from __future__ import annotations

import logging
import threading
from collections.abc import Mapping
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Callable, Dict, Iterator, Optional
from uuid import uuid4

from observability import log_event

from .errors import NotFoundError, ValidationError
from .models import Pipeline, PipelineNote

if TYPE_CHECKING:
    from storage.base import DurableStore

logger = logging.getLogger(__name__)

INITIAL_PHASE = "analysis"


def _new_id() -> str:
    return str(uuid4())


def _phase_label(phase: str) -> str:
    label = (phase or "").strip()
    if not label:
        raise ValidationError("phase must be a non-empty label")
    return label


def as_note(note: Any) -> PipelineNote:
    """Wrap a raw annotation into the note envelope."""

    if isinstance(note, PipelineNote):
        return note
    if isinstance(note, str):
        return PipelineNote(kind="text", body=note)
    if isinstance(note, Mapping):
        return PipelineNote(kind="text", body=dict(note))
    raise ValidationError("note must be a PipelineNote, string or mapping")


class _SessionLock:  # Lock plus the number of callers holding or waiting on it
    __slots__ = ("lock", "users")

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.users = 0


class PipelineMachine:
    """Owns pipeline lifecycle, phase transitions and note recording."""

    def __init__(
        self,
        store: "DurableStore",
        *,
        max_notes: Optional[int] = None,
        initial_phase: str = INITIAL_PHASE,
        id_factory: Callable[[], str] = _new_id,
    ) -> None:
        self._store = store
        self._max_notes = max_notes
        self._initial_phase = initial_phase
        self._id_factory = id_factory
        self._locks: Dict[str, _SessionLock] = {}
        self._locks_guard = threading.Lock()

    @contextmanager
    def _lock_for(self, pipeline_id: str) -> Iterator[None]:
        with self._locks_guard:
            entry = self._locks.get(pipeline_id)
            if entry is None:
                entry = self._locks[pipeline_id] = _SessionLock()
            entry.users += 1
        try:
            with entry.lock:
                yield
        finally:
            with self._locks_guard:
                entry.users -= 1
                if entry.users == 0:
                    del self._locks[pipeline_id]

    def _load(self, pipeline_id: str) -> Pipeline:
        pipeline = self._store.get(pipeline_id)
        if pipeline is None:
            raise NotFoundError(f"pipeline '{pipeline_id}' not found", pipeline_id=pipeline_id)
        return pipeline

    @contextmanager
    def _mutating(self, pipeline_id: str) -> Iterator[Pipeline]:
        # The snapshot is persisted only when the block exits without raising.
        with self._lock_for(pipeline_id):
            pipeline = self._load(pipeline_id)
            yield pipeline
            self._store.put(pipeline_id, pipeline)

    def start(self, job_title: str, company: str, jd: str) -> str:
        """Create and persist a new pending pipeline; return its id."""

        if not (job_title or "").strip():
            raise ValidationError("job_title is required")
        if not (jd or "").strip():
            raise ValidationError("jd is required")

        while True:
            pipeline_id = self._id_factory()
            with self._lock_for(pipeline_id):
                if self._store.get(pipeline_id) is not None:
                    logger.warning("Pipeline id collision, drawing a new id: %s", pipeline_id)
                    continue
                pipeline = Pipeline(
                    id=pipeline_id,
                    jobTitle=job_title.strip(),
                    company=(company or "").strip(),
                    jd=jd,
                    status="pending",
                    currentPhase=self._initial_phase,
                    notes=[],
                )
                self._store.put(pipeline_id, pipeline)
                break

        log_event("pipeline_started", pipeline_id, status=pipeline.status, phase=pipeline.currentPhase)
        return pipeline_id

    def get_status(self, pipeline_id: str) -> Pipeline:
        """Return the persisted snapshot for ``pipeline_id``."""

        with self._lock_for(pipeline_id):
            return self._load(pipeline_id)

    def record_note(
        self,
        pipeline_id: str,
        note: Any,
        *,
        phase: Optional[str] = None,
        require_open: bool = False,
    ) -> PipelineNote:
        """Append ``note`` and persist; the first note moves pending to in_progress.

        When ``phase`` is given the phase label changes in the same write. With
        ``require_open`` a complete pipeline is refused under the same lock.
        """

        entry = as_note(note)
        label = None if phase is None else _phase_label(phase)
        with self._mutating(pipeline_id) as pipeline:
            if require_open and pipeline.status == "complete":
                raise ValidationError(f"pipeline '{pipeline_id}' is complete", pipeline_id=pipeline_id)
            if self._max_notes is not None and len(pipeline.notes) >= self._max_notes:
                raise ValidationError(
                    f"pipeline '{pipeline_id}' already holds {len(pipeline.notes)} notes",
                    pipeline_id=pipeline_id,
                )
            pipeline.notes.append(entry)
            pipeline.advance_status("in_progress")
            if label is not None:
                pipeline.currentPhase = label
            count = len(pipeline.notes)
            status = pipeline.status

        log_event("note_recorded", pipeline_id, note_kind=entry.kind, notes=count, status=status)
        if label is not None:
            log_event("phase_advanced", pipeline_id, phase=label)
        return entry

    def advance_phase(self, pipeline_id: str, phase: str) -> None:
        """Set the free-form phase label."""

        label = _phase_label(phase)
        with self._mutating(pipeline_id) as pipeline:
            pipeline.currentPhase = label

        log_event("phase_advanced", pipeline_id, phase=label)

    def complete(self, pipeline_id: str) -> Pipeline:
        """Mark the session concluded; repeated calls leave it complete."""

        with self._mutating(pipeline_id) as pipeline:
            changed = pipeline.advance_status("complete")

        if changed:
            log_event("pipeline_completed", pipeline_id, status=pipeline.status)
        return pipeline


__all__ = ["INITIAL_PHASE", "PipelineMachine", "as_note"]
