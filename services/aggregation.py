"""Session-level aggregation of recorded evaluation results."""
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, Tuple

import pydantic

from contracts.models import AnalysisSummary, CompetencyScore, EvaluationResult
from contracts.parsing import coerce_score
from pipeline.models import Pipeline

logger = logging.getLogger(__name__)


def _field(result: Any, name: str) -> Any:
    if isinstance(result, Mapping):
        return result.get(name)
    return getattr(result, name, None)


def _strings(values: Any) -> List[str]:
    if not isinstance(values, (list, tuple)):
        return []
    return [value for value in values if isinstance(value, str)]


def evaluation_results(pipeline: Pipeline) -> List[EvaluationResult]:
    """Evaluation results from the pipeline notes, in recorded order.

    A note whose body does not validate as an ``EvaluationResult`` is skipped.
    """

    results: List[EvaluationResult] = []
    for note in pipeline.notes_of("evaluation"):
        body = note.body if isinstance(note.body, Mapping) else {}
        try:
            results.append(EvaluationResult.model_validate(body.get("result")))
        except pydantic.ValidationError as exc:
            logger.warning(
                "Skipping malformed evaluation note session=%s note=%s errors=%d", pipeline.id, note.id, exc.error_count()
            )
    return results


def overall_notes(evaluated: int, competencies: int) -> str:
    if evaluated == 0:
        return "No answers have been evaluated yet."
    answers = "answer" if evaluated == 1 else "answers"
    return f"Aggregated {evaluated} evaluated {answers} across {competencies} competencies."


def aggregate(session_id: str, results: Iterable[Any]) -> AnalysisSummary:
    """Reduce evaluation results into competency averages and strength/weakness sets.

    Competencies are matched by exact name. Score values that do not coerce to
    a finite number are skipped and do not count towards the average. Output
    order follows first appearance so repeated runs produce identical output.
    """

    strengths: Dict[str, None] = {}
    weaknesses: Dict[str, None] = {}
    totals: Dict[str, Tuple[float, int]] = {}
    evaluated = 0

    for result in results:
        evaluated += 1
        for item in _strings(_field(result, "strengths")):
            strengths.setdefault(item, None)
        for item in _strings(_field(result, "weaknesses")):
            weaknesses.setdefault(item, None)

        scores = _field(result, "scores")
        if not isinstance(scores, Mapping):
            continue
        for competency, raw in scores.items():
            number = coerce_score(raw)
            if number is None:
                continue
            total, count = totals.get(competency, (0.0, 0))
            totals[competency] = (total + number, count + 1)

    competency_scores = [
        CompetencyScore(competency=name, score=total / count)
        for name, (total, count) in totals.items()
        if count > 0
    ]
    return AnalysisSummary(
        sessionId=session_id,
        overallNotes=overall_notes(evaluated, len(competency_scores)),
        strengths=list(strengths),
        weaknesses=list(weaknesses),
        competencyScores=competency_scores,
    )


def summarize_pipeline(pipeline: Pipeline) -> AnalysisSummary:
    return aggregate(pipeline.id, evaluation_results(pipeline))


__all__ = ["aggregate", "evaluation_results", "overall_notes", "summarize_pipeline"]
