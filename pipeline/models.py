from __future__ import annotations  # Pipeline entity and note envelope

import time
from typing import Any, Dict, List, Literal
from uuid import uuid4

from pydantic import BaseModel, Field

PipelineStatus = Literal["pending", "in_progress", "complete"]
NoteKind = Literal["question", "evaluation", "tone", "text"]

STATUS_ORDER: Dict[str, int] = {"pending": 0, "in_progress": 1, "complete": 2}


def now_ms() -> int:  # Epoch milliseconds used for every timestamp
    return int(time.time() * 1000)


class PipelineNote(BaseModel):  # Opaque annotation appended to a pipeline
    id: str = Field(default_factory=lambda: uuid4().hex)
    kind: NoteKind = "text"
    created_at: int = Field(default_factory=now_ms)
    body: Any = None


class Pipeline(BaseModel):  # Persisted state of one interview session
    id: str
    createdAt: int = Field(default_factory=now_ms)
    jobTitle: str
    company: str = ""
    jd: str
    status: PipelineStatus = "pending"
    currentPhase: str = "analysis"
    notes: List[PipelineNote] = Field(default_factory=list)

    def notes_of(self, kind: NoteKind) -> List[PipelineNote]:  # Notes of one kind in recorded order
        return [note for note in self.notes if note.kind == kind]

    def advance_status(self, target: PipelineStatus) -> bool:  # Move status forward only; report change
        if STATUS_ORDER[target] <= STATUS_ORDER[self.status]:
            return False
        self.status = target
        return True


__all__ = ["NoteKind", "Pipeline", "PipelineNote", "PipelineStatus", "STATUS_ORDER", "now_ms"]
