"""Typed request/response schemas exchanged with the generative model."""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class ModelRequest(BaseModel):
    """Instruction pair handed to the model invoker."""

    system: str
    user: Dict[str, Any]


class QuestionScorecard(BaseModel):
    competencies: List[str] = Field(default_factory=list)
    signals: List[str] = Field(default_factory=list)
    failure_modes: List[str] = Field(default_factory=list)


class GeneratedQuestion(BaseModel):
    """Question reply contract: exactly one question plus its scorecard."""

    question: str = Field(min_length=1)
    scorecard: QuestionScorecard


class Question(BaseModel):
    """A generated question attached to one pipeline."""

    id: str
    questionText: str
    scorecard: QuestionScorecard


class EvaluationResult(BaseModel):
    """Scores are keyed by competency name, each in 1..5."""

    scores: Dict[str, float] = Field(default_factory=dict)
    strengths: List[str] = Field(default_factory=list)
    weaknesses: List[str] = Field(default_factory=list)
    coaching_notes: str = ""
    improvement_plan: List[str] = Field(default_factory=list)


class ToneMetrics(BaseModel):
    speed_wpm: Optional[float] = Field(default=None, ge=0.0)
    pitch_variance: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    volume_avg: Optional[float] = None
    filler_count: int = Field(default=0, ge=0)
    pauses_ratio: Optional[float] = Field(default=None, ge=0.0)


class ToneResult(BaseModel):
    metrics: ToneMetrics
    summary: str
    suggestions: List[str] = Field(default_factory=list)


class CompetencyScore(BaseModel):
    competency: str
    score: float


class AnalysisSummary(BaseModel):
    """Derived per-session aggregate; recomputed on demand, never stored."""

    sessionId: str
    overallNotes: str
    strengths: List[str] = Field(default_factory=list)
    weaknesses: List[str] = Field(default_factory=list)
    competencyScores: List[CompetencyScore] = Field(default_factory=list)


__all__ = [
    "AnalysisSummary",
    "CompetencyScore",
    "EvaluationResult",
    "GeneratedQuestion",
    "ModelRequest",
    "Question",
    "QuestionScorecard",
    "ToneMetrics",
    "ToneResult",
]
