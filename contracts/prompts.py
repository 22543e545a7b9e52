from __future__ import annotations  # Instruction builders for the three model tasks

import copy
from textwrap import dedent
from typing import Any, Dict, List, Mapping, Sequence

from .models import ModelRequest, QuestionScorecard, ToneMetrics

JD_MAX_CHARS = 8000

FAST_PACE_WPM = 170.0
HIGH_FILLER_COUNT = 5
LOW_PITCH_VARIANCE = 0.2
LOW_PAUSES_RATIO = 0.05


QUESTION_SYSTEM = dedent(
    """
    You generate interview questions for senior technology roles.

    Rules:
    - Ask exactly ONE question per reply.
    - Tailor the question to the role, the company and the job description.
    - Prefer behavioral, systems and execution questions over trivia.
    - Avoid repeating or paraphrasing any entry in previous_questions.
    - When known_weak_areas is not empty, probe one of them.
    - Reply with a single strict JSON object with keys "question" and "scorecard".

    The scorecard holds three lists of short phrases:
    - "competencies": skills or behaviors the question assesses.
    - "signals": what a strong answer shows.
    - "failure_modes": what a weak answer looks like.
    """
).strip()

EVALUATION_SYSTEM = dedent(
    """
    You evaluate a candidate's spoken answer to an interview question.

    Rules:
    - Apply the STAR rubric (Situation, Task, Action, Result).
    - Judge the answer against the provided scorecard.
    - Cite concrete evidence from the transcript for every strength and weakness.
    - Reply with a single strict JSON object with keys
      "scores", "strengths", "weaknesses", "coaching_notes", "improvement_plan".

    Scoring:
    - "scores" maps each scorecard competency to a number from 1 to 5.
    - 1 = very weak, 3 = acceptable, 5 = excellent.
    - "coaching_notes" is one paragraph of prose.
    - "improvement_plan" is a list of concrete actions.
    """
).strip()

TONE_SYSTEM = dedent(
    """
    You coach interview candidates on vocal delivery.

    You receive the answer transcript and numeric delivery metrics
    (pace, pitch variance, volume, filler words, pauses).

    Rules:
    - Interpret the metrics together with how the answer reads.
    - Suggestions address speaking style only, never the content of the answer.
    - Reply with a single strict JSON object with keys "metrics", "summary", "suggestions".
    - "metrics" echoes the metrics you received unchanged.
    - "summary" is a short paragraph; "suggestions" is a list of concrete actions.
    """
).strip()

STAR_INSTRUCTIONS = [
    "State whether the answer covers the Situation, the Task, the Action and the Result.",
    "Back each strength with a quote or close paraphrase from the transcript.",
    "Name each weakness concretely (missing detail, vague result, no metrics, unclear ownership).",
    "Write coaching_notes as a single paragraph.",
    "Write improvement_plan as a list of actions the candidate can practice.",
]

TONE_GUIDANCE = [
    "If the pace is very high, mention that the candidate is rushing.",
    "If filler_count is high, name the filler words explicitly.",
    "If pitch_variance is low, suggest more vocal variety.",
    "If pauses_ratio is low or zero, suggest inserting natural pauses.",
]

QUESTION_EXAMPLE: Dict[str, Any] = {
    "question": "Tell me about a time you aligned stakeholders who disagreed on a cross-team project.",
    "scorecard": {
        "competencies": ["stakeholder management", "communication", "ownership"],
        "signals": [
            "names the stakeholders and what each of them wanted",
            "uses a structured approach to reach agreement",
            "owns the outcome",
        ],
        "failure_modes": [
            "vague story without identifiable stakeholders",
            "no real conflict to resolve",
            "blames others for the outcome",
        ],
    },
}

EVALUATION_EXAMPLE: Dict[str, Any] = {
    "scores": {"stakeholder management": 4, "communication": 3},
    "strengths": ["Named each stakeholder and their incentive", "Set up a weekly sync to keep teams aligned"],
    "weaknesses": ["Result lacked numbers", "Blurred personal contribution with the team's"],
    "coaching_notes": "A well structured answer; the Result needs concrete metrics to land.",
    "improvement_plan": [
        "Quantify outcomes: time saved, risk reduced, revenue protected.",
        "Say explicitly what you did, separate from the team.",
    ],
}


def _truncate(text: str, limit: int) -> str:
    return (text or "")[: max(limit, 0)]


def build_question_prompt(
    *,
    job_title: str,
    company: str,
    jd: str,
    previous_questions: Sequence[str] = (),
    known_weak_areas: Sequence[str] = (),
    max_jd_chars: int = JD_MAX_CHARS,
) -> ModelRequest:
    """Build the question-generation request; the JD is cut to ``max_jd_chars``."""

    user = {
        "job_title": job_title,
        "company": company,
        "job_description": _truncate(jd, max_jd_chars),
        "previous_questions": list(previous_questions),
        "known_weak_areas": list(known_weak_areas),
        "response_format_example": copy.deepcopy(QUESTION_EXAMPLE),
    }
    return ModelRequest(system=QUESTION_SYSTEM, user=user)


def build_evaluation_prompt(
    *,
    question: str,
    transcript: str,
    scorecard: QuestionScorecard | Mapping[str, Any],
) -> ModelRequest:
    """Build the STAR evaluation request for one answered question."""

    card = scorecard if isinstance(scorecard, QuestionScorecard) else QuestionScorecard.model_validate(scorecard)
    user = {
        "question": question,
        "transcript": transcript,
        "scorecard": card.model_dump(),
        "instructions": list(STAR_INSTRUCTIONS),
        "response_format_example": copy.deepcopy(EVALUATION_EXAMPLE),
    }
    return ModelRequest(system=EVALUATION_SYSTEM, user=user)


def delivery_flags(metrics: ToneMetrics) -> List[str]:
    """Name the delivery issues the metrics trip, in a fixed order."""

    flags: List[str] = []
    if metrics.speed_wpm is not None and metrics.speed_wpm > FAST_PACE_WPM:
        flags.append("rushing")
    if metrics.filler_count > HIGH_FILLER_COUNT:
        flags.append("filler_words")
    if metrics.pitch_variance is not None and metrics.pitch_variance < LOW_PITCH_VARIANCE:
        flags.append("monotone")
    if metrics.pauses_ratio is not None and metrics.pauses_ratio < LOW_PAUSES_RATIO:
        flags.append("no_pauses")
    return flags


def build_tone_prompt(*, transcript: str, metrics: ToneMetrics | Mapping[str, Any]) -> ModelRequest:
    """Build the delivery-tone request; metrics are echoed into the example reply."""

    values = metrics if isinstance(metrics, ToneMetrics) else ToneMetrics.model_validate(metrics)
    echoed = values.model_dump()
    user = {
        "transcript": transcript,
        "metrics": echoed,
        "delivery_flags": delivery_flags(values),
        "guidance": list(TONE_GUIDANCE),
        "response_format_example": {
            "metrics": dict(echoed),
            "summary": "You spoke a little fast with some filler words and a fairly flat tone.",
            "suggestions": [
                "Slow down and leave a short pause between the STAR sections.",
                "Cut fillers such as 'um' and 'like' by rehearsing against a timer.",
                "Lift your voice when you state the Result so the impact is heard.",
            ],
        },
    }
    return ModelRequest(system=TONE_SYSTEM, user=user)


__all__ = [
    "JD_MAX_CHARS",
    "build_evaluation_prompt",
    "build_question_prompt",
    "build_tone_prompt",
    "delivery_flags",
]
