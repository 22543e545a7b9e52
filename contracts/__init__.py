"""Request builders and reply contracts for the generative model."""
from .models import (
    AnalysisSummary,
    CompetencyScore,
    EvaluationResult,
    GeneratedQuestion,
    ModelRequest,
    Question,
    QuestionScorecard,
    ToneMetrics,
    ToneResult,
)
from .parsing import clean_scores, coerce_score, parse_evaluation, parse_question, parse_tone
from .prompts import (
    JD_MAX_CHARS,
    build_evaluation_prompt,
    build_question_prompt,
    build_tone_prompt,
    delivery_flags,
)

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
    "clean_scores",
    "coerce_score",
    "parse_evaluation",
    "parse_question",
    "parse_tone",
    "JD_MAX_CHARS",
    "build_evaluation_prompt",
    "build_question_prompt",
    "build_tone_prompt",
    "delivery_flags",
]
