import os
import sys
import tempfile
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from api.deps import set_service
from config.registry import EVALUATION_KEY, QUESTION_KEY, TONE_KEY, bind_model, clear_models
from config.settings import settings
from storage.migrate import migrate


@pytest.fixture(autouse=True)
def tmp_db(monkeypatch):
    td = tempfile.TemporaryDirectory()
    db_path = os.path.join(td.name, "test.db")
    monkeypatch.setattr(settings, "DB_PATH", db_path, raising=False)
    migrate(db_path)
    set_service(None)
    try:
        yield db_path
    finally:
        set_service(None)
        clear_models()
        td.cleanup()


QUESTION_REPLY = {
    "question": "Describe a production incident you owned end to end.",
    "scorecard": {
        "competencies": ["ownership", "communication"],
        "signals": ["clear timeline", "measurable recovery"],
        "failure_modes": ["blames others"],
    },
}

EVALUATION_REPLY = {
    "scores": {"ownership": 4, "communication": "3"},
    "strengths": ["Owned the rollback decision"],
    "weaknesses": ["Result had no metrics"],
    "coaching_notes": "Solid structure; quantify the outcome.",
    "improvement_plan": ["State the recovery time in minutes."],
}

TONE_REPLY = {
    "metrics": {"speed_wpm": 190, "pitch_variance": 0.1, "volume_avg": 0.6, "filler_count": 9, "pauses_ratio": 0.0},
    "summary": "Fast and flat with frequent fillers.",
    "suggestions": ["Slow down.", "Drop 'um' and 'like'.", "Pause between STAR sections."],
}


@pytest.fixture
def fake_models():
    calls = []

    def _fake(reply):
        def _invoke(system, user):
            calls.append({"system": system, "user": user})
            return reply

        return _invoke

    bind_model(QUESTION_KEY, _fake(QUESTION_REPLY))
    bind_model(EVALUATION_KEY, _fake(EVALUATION_REPLY))
    bind_model(TONE_KEY, _fake(TONE_REPLY))
    return calls
