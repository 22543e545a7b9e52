"""Interview flow: drives the model through the contracts and records results.

Model calls run outside the per-session lock. A note is recorded only after the
reply validates, so a timeout, an upstream failure or a contract violation
leaves the persisted pipeline unchanged.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Mapping, Optional
from uuid import uuid4

from pydantic import BaseModel

from config.registry import EVALUATION_KEY, QUESTION_KEY, TONE_KEY, get_model
from contracts import (
    AnalysisSummary,
    EvaluationResult,
    ModelRequest,
    Question,
    QuestionScorecard,
    ToneMetrics,
    ToneResult,
    build_evaluation_prompt,
    build_question_prompt,
    build_tone_prompt,
    parse_evaluation,
    parse_question,
    parse_tone,
)
from contracts.prompts import JD_MAX_CHARS
from llm_gateway import LlmGatewayError
from observability import log_event, timed
from pipeline import (
    ContractViolationError,
    NotFoundError,
    Pipeline,
    PipelineMachine,
    PipelineNote,
    UpstreamError,
    ValidationError,
)

from .aggregation import summarize_pipeline

logger = logging.getLogger(__name__)

QUESTIONING_PHASE = "questioning"
SCORING_PHASE = "scoring"
MAX_WEAK_AREAS = 10


class ResultItem(BaseModel):  # One asked question with its latest answer and evaluation
    question_id: str
    question: str
    transcript: Optional[str] = None
    analysis: Optional[EvaluationResult] = None
    tone: Optional[ToneResult] = None


def previous_questions(pipeline: Pipeline) -> List[str]:
    return [
        str(note.body.get("question", ""))
        for note in pipeline.notes_of("question")
        if isinstance(note.body, Mapping)
    ]


def known_weak_areas(pipeline: Pipeline, limit: int = MAX_WEAK_AREAS) -> List[str]:
    """Distinct weaknesses from prior evaluations, most recent last."""

    seen: Dict[str, None] = {}
    for note in pipeline.notes_of("evaluation"):
        result = note.body.get("result") if isinstance(note.body, Mapping) else None
        if not isinstance(result, Mapping):
            continue
        for weakness in result.get("weaknesses") or []:
            if isinstance(weakness, str):
                seen.pop(weakness, None)
                seen[weakness] = None
    areas = list(seen)
    return areas[-limit:] if limit else []


def find_question(pipeline: Pipeline, question_id: str) -> Question:
    for note in pipeline.notes_of("question"):
        body = note.body if isinstance(note.body, Mapping) else {}
        if body.get("question_id") == question_id:
            return Question(
                id=question_id,
                questionText=str(body.get("question", "")),
                scorecard=QuestionScorecard.model_validate(body.get("scorecard") or {}),
            )
    raise NotFoundError(
        f"question '{question_id}' not found in pipeline '{pipeline.id}'",
        pipeline_id=pipeline.id,
        question_id=question_id,
    )


class InterviewService:
    """Surrounding request layer that ties contracts, model and machine together."""

    def __init__(
        self,
        machine: PipelineMachine,
        *,
        max_jd_chars: int = JD_MAX_CHARS,
        resolve_model: Callable[[str], Callable[[str, Dict[str, Any]], Any]] = get_model,
    ) -> None:
        self.machine = machine
        self._max_jd_chars = max_jd_chars
        self._resolve_model = resolve_model

    def _open_pipeline(self, pipeline_id: str) -> Pipeline:
        pipeline = self.machine.get_status(pipeline_id)
        if pipeline.status == "complete":
            raise ValidationError(f"pipeline '{pipeline_id}' is complete", pipeline_id=pipeline_id)
        return pipeline

    def _call_model(self, key: str, request: ModelRequest, session_id: str) -> Any:
        try:
            model = self._resolve_model(key)
        except KeyError as exc:
            raise UpstreamError(f"no model bound for {key}") from exc
        fields: Dict[str, object] = {"model_key": key}
        try:
            with timed(fields):
                return model(request.system, request.user)
        except (LlmGatewayError, TimeoutError) as exc:
            log_event("upstream_failure", session_id, error=type(exc).__name__, **fields)
            raise UpstreamError(str(exc) or "model call failed", model_key=key) from exc

    def _parsed(self, parse: Callable[[Any], Any], raw: Any, session_id: str) -> Any:
        try:
            return parse(raw)
        except ContractViolationError as exc:
            log_event("contract_violation", session_id, error=exc.message)
            raise

    def next_question(self, pipeline_id: str) -> Question:
        pipeline = self._open_pipeline(pipeline_id)
        request = build_question_prompt(
            job_title=pipeline.jobTitle,
            company=pipeline.company,
            jd=pipeline.jd,
            previous_questions=previous_questions(pipeline),
            known_weak_areas=known_weak_areas(pipeline),
            max_jd_chars=self._max_jd_chars,
        )
        raw = self._call_model(QUESTION_KEY, request, pipeline_id)
        generated = self._parsed(parse_question, raw, pipeline_id)

        question = Question(id=uuid4().hex, questionText=generated.question, scorecard=generated.scorecard)
        note = PipelineNote(
            kind="question",
            body={
                "question_id": question.id,
                "question": question.questionText,
                "scorecard": question.scorecard.model_dump(),
            },
        )
        self.machine.record_note(pipeline_id, note, phase=QUESTIONING_PHASE, require_open=True)
        log_event("question_generated", pipeline_id, question_id=question.id)
        return question

    def submit_answer(self, pipeline_id: str, question_id: str, transcript: str) -> EvaluationResult:
        if not (transcript or "").strip():
            raise ValidationError("transcript is required")
        pipeline = self._open_pipeline(pipeline_id)
        question = find_question(pipeline, question_id)
        request = build_evaluation_prompt(
            question=question.questionText,
            transcript=transcript,
            scorecard=question.scorecard,
        )
        raw = self._call_model(EVALUATION_KEY, request, pipeline_id)
        result = self._parsed(parse_evaluation, raw, pipeline_id)

        note = PipelineNote(
            kind="evaluation",
            body={"question_id": question_id, "transcript": transcript, "result": result.model_dump()},
        )
        self.machine.record_note(pipeline_id, note, phase=SCORING_PHASE, require_open=True)
        log_event("answer_evaluated", pipeline_id, question_id=question_id)
        return result

    def analyze_tone(
        self,
        pipeline_id: str,
        question_id: str,
        transcript: str,
        metrics: ToneMetrics | Mapping[str, Any],
    ) -> ToneResult:
        if not (transcript or "").strip():
            raise ValidationError("transcript is required")
        values = metrics if isinstance(metrics, ToneMetrics) else ToneMetrics.model_validate(metrics)
        pipeline = self._open_pipeline(pipeline_id)
        find_question(pipeline, question_id)
        request = build_tone_prompt(transcript=transcript, metrics=values)
        raw = self._call_model(TONE_KEY, request, pipeline_id)
        result = self._parsed(lambda reply: parse_tone(reply, metrics=values), raw, pipeline_id)

        note = PipelineNote(
            kind="tone",
            body={"question_id": question_id, "transcript": transcript, "result": result.model_dump()},
        )
        self.machine.record_note(pipeline_id, note, require_open=True)
        log_event("tone_analyzed", pipeline_id, question_id=question_id)
        return result

    def complete(self, pipeline_id: str) -> Pipeline:
        return self.machine.complete(pipeline_id)

    def analysis(self, pipeline_id: str) -> AnalysisSummary:
        return summarize_pipeline(self.machine.get_status(pipeline_id))

    def results(self, pipeline_id: str) -> List[ResultItem]:
        pipeline = self.machine.get_status(pipeline_id)
        items: Dict[str, ResultItem] = {}
        for note in pipeline.notes:
            body = note.body if isinstance(note.body, Mapping) else {}
            question_id = body.get("question_id")
            if not isinstance(question_id, str):
                continue
            if note.kind == "question":
                items[question_id] = ResultItem(question_id=question_id, question=str(body.get("question", "")))
                continue
            item = items.get(question_id)
            if item is None:
                continue
            if note.kind == "evaluation":
                item.transcript = body.get("transcript")
                item.analysis = EvaluationResult.model_validate(body.get("result") or {})
            elif note.kind == "tone":
                item.tone = ToneResult.model_validate(body.get("result"))
        return list(items.values())


__all__ = [
    "InterviewService",
    "ResultItem",
    "find_question",
    "known_weak_areas",
    "previous_questions",
]
