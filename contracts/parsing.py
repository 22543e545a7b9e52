"""Validation of untrusted model replies into the typed contracts.

Replies are rejected with ``ContractViolationError`` when a required key is
missing or has the wrong shape. Individual score values that do not coerce to a
finite number are dropped instead, matching the aggregation tolerance.
"""
from __future__ import annotations

import json
import logging
import math
from typing import Any, Dict, List, Mapping, Optional

import pydantic
from pydantic import BaseModel, Field

from pipeline.errors import ContractViolationError

from .models import EvaluationResult, GeneratedQuestion, QuestionScorecard, ToneMetrics, ToneResult

logger = logging.getLogger(__name__)

SCORE_MIN = 1.0
SCORE_MAX = 5.0


class _RawScorecard(BaseModel):
    # All three lists are required and at least one competency must be named.
    competencies: List[str] = Field(min_length=1)
    signals: List[str]
    failure_modes: List[str]


class _RawQuestion(BaseModel):
    question: str = Field(min_length=1)
    scorecard: _RawScorecard


class _RawEvaluation(BaseModel):
    scores: Dict[str, Any]
    strengths: List[str] = Field(default_factory=list)
    weaknesses: List[str] = Field(default_factory=list)
    coaching_notes: str = ""
    improvement_plan: List[str] = Field(default_factory=list)


class _RawTone(BaseModel):
    metrics: Optional[ToneMetrics] = None
    summary: str
    suggestions: List[str] = Field(default_factory=list)


def coerce_score(value: Any) -> Optional[float]:
    """Return ``value`` as a finite float, or None when it does not parse."""

    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    if not math.isfinite(number):
        return None
    return number


def _strip_code_fences(content: str) -> str:  # Remove markdown fences some models wrap JSON in
    text = content.strip()
    if text.startswith("```"):
        lines = text.splitlines()[1:]
        if lines and lines[-1].strip() == "```":
            lines = lines[:-1]
        text = "\n".join(lines).strip()
    return text


def _as_object(raw: Any, contract: str) -> Mapping[str, Any]:
    if isinstance(raw, str):
        try:
            raw = json.loads(_strip_code_fences(raw))
        except json.JSONDecodeError as exc:
            raise ContractViolationError(f"{contract} reply is not JSON", contract=contract) from exc
    if not isinstance(raw, Mapping):
        raise ContractViolationError(f"{contract} reply must be a JSON object", contract=contract)
    return raw


def _validate(schema: type[BaseModel], raw: Mapping[str, Any], contract: str) -> Any:
    try:
        return schema.model_validate(dict(raw))
    except pydantic.ValidationError as exc:
        logger.warning("Model reply failed %s contract: %s", contract, exc)
        errors = [
            {"loc": ".".join(str(part) for part in err["loc"]), "msg": err["msg"]}
            for err in exc.errors()
        ]
        raise ContractViolationError(
            f"{contract} reply failed validation", contract=contract, errors=errors
        ) from exc


def clean_scores(raw_scores: Mapping[str, Any]) -> Dict[str, float]:
    """Coerce each score, drop non-finite ones and clamp the rest into 1..5."""

    cleaned: Dict[str, float] = {}
    for competency, value in raw_scores.items():
        number = coerce_score(value)
        if number is None:
            logger.info("Dropping non-numeric score competency=%s value=%r", competency, value)
            continue
        clamped = max(SCORE_MIN, min(SCORE_MAX, number))
        if clamped != number:
            logger.warning("Clamping out-of-range score competency=%s value=%r to %s", competency, value, clamped)
        cleaned[str(competency)] = clamped
    return cleaned


def parse_question(raw: Any) -> GeneratedQuestion:
    data = _as_object(raw, "question")
    parsed: _RawQuestion = _validate(_RawQuestion, data, "question")
    text = parsed.question.strip()
    if not text:
        raise ContractViolationError("question reply has an empty question", contract="question")
    return GeneratedQuestion(
        question=text,
        scorecard=QuestionScorecard.model_validate(parsed.scorecard.model_dump()),
    )


def parse_evaluation(raw: Any) -> EvaluationResult:
    data = _as_object(raw, "evaluation")
    parsed: _RawEvaluation = _validate(_RawEvaluation, data, "evaluation")
    return EvaluationResult(
        scores=clean_scores(parsed.scores),
        strengths=parsed.strengths,
        weaknesses=parsed.weaknesses,
        coaching_notes=parsed.coaching_notes,
        improvement_plan=parsed.improvement_plan,
    )


def parse_tone(raw: Any, *, metrics: Optional[ToneMetrics] = None) -> ToneResult:
    """Validate a tone reply; ``metrics`` from the request win over the echoed copy."""

    data = _as_object(raw, "tone")
    parsed: _RawTone = _validate(_RawTone, data, "tone")
    resolved = metrics or parsed.metrics
    if resolved is None:
        raise ContractViolationError("tone reply is missing metrics", contract="tone")
    return ToneResult(metrics=resolved, summary=parsed.summary, suggestions=parsed.suggestions)


__all__ = [
    "clean_scores",
    "coerce_score",
    "parse_evaluation",
    "parse_question",
    "parse_tone",
]
