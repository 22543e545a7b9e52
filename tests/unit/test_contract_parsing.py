import json
import math

import pytest

from contracts import ToneMetrics, coerce_score, parse_evaluation, parse_question, parse_tone
from pipeline import ContractViolationError


def test_parse_question_accepts_valid_reply():
    parsed = parse_question(
        {
            "question": "  Walk me through a hard trade-off.  ",
            "scorecard": {"competencies": ["judgment"], "signals": ["weighs options"], "failure_modes": []},
            "extra": "ignored",
        }
    )
    assert parsed.question == "Walk me through a hard trade-off."
    assert parsed.scorecard.competencies == ["judgment"]


@pytest.mark.parametrize(
    "reply",
    [
        {"scorecard": {"competencies": [], "signals": [], "failure_modes": []}},
        {"question": "q"},
        {"question": "", "scorecard": {}},
        {"question": "   ", "scorecard": {}},
        {"question": "q", "scorecard": {"competencies": "ownership"}},
        {"question": 7, "scorecard": {}},
        {"question": "q?", "scorecard": {}},
        {"question": "q?", "scorecard": {"competencies": ["a"], "signals": []}},
        {"question": "q?", "scorecard": {"competencies": [], "signals": [], "failure_modes": []}},
        ["not", "an", "object"],
        "not json",
        None,
    ],
)
def test_parse_question_rejects_bad_shapes(reply):
    with pytest.raises(ContractViolationError):
        parse_question(reply)


def test_parse_question_decodes_fenced_json():
    reply = {"question": "q?", "scorecard": {"competencies": ["a"], "signals": [], "failure_modes": ["rambles"]}}
    parsed = parse_question(f"```json\n{json.dumps(reply)}\n```")
    assert parsed.question == "q?"
    assert parsed.scorecard.signals == []
    assert parsed.scorecard.failure_modes == ["rambles"]


def test_parse_evaluation_requires_scores():
    with pytest.raises(ContractViolationError) as info:
        parse_evaluation({"strengths": [], "weaknesses": [], "coaching_notes": "", "improvement_plan": []})
    assert info.value.code == "contract_violation"


@pytest.mark.parametrize(
    "reply",
    [
        {"scores": ["ownership", 4]},
        {"scores": {"a": 3}, "strengths": "good"},
        {"scores": {"a": 3}, "coaching_notes": ["prose"]},
        {"scores": {"a": 3}, "improvement_plan": "do better"},
    ],
)
def test_parse_evaluation_rejects_wrong_shapes(reply):
    with pytest.raises(ContractViolationError):
        parse_evaluation(reply)


def test_parse_evaluation_drops_non_numeric_scores_and_clamps():
    result = parse_evaluation(
        {
            "scores": {"x": "not-a-number", "y": "4.5", "z": 9, "w": 0, "nan": "nan", "flag": True},
            "strengths": ["a"],
            "weaknesses": ["b"],
            "coaching_notes": "notes",
            "improvement_plan": ["c"],
        }
    )
    assert result.scores == {"y": 4.5, "z": 5.0, "w": 1.0}
    assert result.strengths == ["a"]
    assert result.improvement_plan == ["c"]


def test_parse_evaluation_defaults_optional_lists():
    result = parse_evaluation({"scores": {"x": "not-a-number"}})
    assert result.scores == {}
    assert result.strengths == [] and result.coaching_notes == ""


@pytest.mark.parametrize(
    "value, expected",
    [(4, 4.0), (2.5, 2.5), ("3", 3.0), (" 1.5 ", 1.5), ("abc", None), ("", None), (None, None),
     (True, None), (float("inf"), None), ("-inf", None), ([3], None)],
)
def test_coerce_score(value, expected):
    assert coerce_score(value) == expected


def test_coerce_score_rejects_nan():
    assert coerce_score(math.nan) is None


def test_parse_tone_prefers_request_metrics():
    sent = ToneMetrics(speed_wpm=150, filler_count=2)
    result = parse_tone(
        {"metrics": {"speed_wpm": 999, "filler_count": 0}, "summary": "calm", "suggestions": ["breathe"]},
        metrics=sent,
    )
    assert result.metrics == sent
    assert result.summary == "calm"


def test_parse_tone_uses_echoed_metrics_without_request_copy():
    result = parse_tone({"metrics": {"filler_count": 3}, "summary": "ok", "suggestions": []})
    assert result.metrics.filler_count == 3


@pytest.mark.parametrize(
    "reply",
    [
        {"metrics": {}, "suggestions": []},
        {"summary": "ok", "suggestions": "slow down"},
        {"summary": "ok", "suggestions": []},
    ],
)
def test_parse_tone_rejects_bad_shapes(reply):
    with pytest.raises(ContractViolationError):
        parse_tone(reply)


def test_out_of_range_scores_are_clamped_with_a_warning(caplog):
    with caplog.at_level("WARNING", logger="contracts.parsing"):
        result = parse_evaluation({"scores": {"ownership": 10, "clarity": 3}})
    assert result.scores == {"ownership": 5.0, "clarity": 3.0}
    clamped = [record for record in caplog.records if "Clamping" in record.getMessage()]
    assert len(clamped) == 1
    assert "ownership" in clamped[0].getMessage()
