"""Pipeline state machine, entity models and error taxonomy."""
from .errors import (
    ContractViolationError,
    NotFoundError,
    PipelineError,
    StoreError,
    UpstreamError,
    ValidationError,
)
from .models import STATUS_ORDER, NoteKind, Pipeline, PipelineNote, PipelineStatus, now_ms
from .machine import INITIAL_PHASE, PipelineMachine, as_note

__all__ = [
    "ContractViolationError",
    "NotFoundError",
    "PipelineError",
    "StoreError",
    "UpstreamError",
    "ValidationError",
    "STATUS_ORDER",
    "NoteKind",
    "Pipeline",
    "PipelineNote",
    "PipelineStatus",
    "now_ms",
    "INITIAL_PHASE",
    "PipelineMachine",
    "as_note",
]
