import json
from pathlib import Path

from fastapi.testclient import TestClient

import api_server
from api.deps import set_service
from config.registry import QUESTION_KEY, bind_model, get_model
from config.settings import settings
from pipeline import PipelineMachine
from services.interview import InterviewService
from storage import MemoryStore


def _client(**kwargs) -> TestClient:
    return TestClient(api_server.create_app(), **kwargs)


def _start(client: TestClient) -> str:
    response = client.post(
        "/pipeline/start",
        json={"job_title": "Backend Engineer", "company": "Acme", "jd": "Own payment services."},
    )
    assert response.status_code == 200
    return response.json()["pipeline_id"]


def _write_config(path: Path) -> None:
    route = {
        "name": "stub-route",
        "base_url": "http://localhost",
        "endpoint": "/v1/chat/completions",
        "model": "stub-model",
        "timeout_s": 30,
        "api_key_env": None,
        "sequential": False,
    }
    payload = {
        "llm_routes": {"stub-route": route},
        "registry": {
            "models.question_generator": "stub-route",
            "models.answer_evaluator": "stub-route",
            "models.tone_analyzer": "stub-route",
        },
    }
    path.write_text(json.dumps(payload), encoding="utf-8")


def test_start_then_status(tmp_db):
    client = _client()
    pipeline_id = _start(client)

    response = client.get(f"/pipeline/status/{pipeline_id}")
    assert response.status_code == 200
    pipeline = response.json()["pipeline"]
    assert pipeline["id"] == pipeline_id
    assert pipeline["status"] == "pending"
    assert pipeline["currentPhase"] == "analysis"
    assert pipeline["notes"] == []
    assert pipeline["jobTitle"] == "Backend Engineer"


def test_unknown_pipeline_is_404():
    response = _client().get("/pipeline/status/does-not-exist")
    assert response.status_code == 404
    assert response.json() == {"error": "not_found"}


def test_invalid_start_requests_are_400():
    client = _client()
    missing = client.post("/pipeline/start", json={"company": "Acme"})
    assert missing.status_code == 400
    assert missing.json() == {"error": "invalid_request"}

    blank = client.post("/pipeline/start", json={"job_title": "  ", "jd": "jd"})
    assert blank.status_code == 400
    assert blank.json() == {"error": "invalid_request"}


def test_interview_routes_flow(fake_models):
    client = _client()
    start = client.post(
        "/api/interview/session/start",
        json={"job_title": "Backend Engineer", "jd": "Own payment services."},
    )
    session_id = start.json()["pipeline_id"]

    question = client.post(f"/api/interview/session/{session_id}/question").json()["question"]
    assert question["scorecard"]["competencies"] == ["ownership", "communication"]

    answer = client.post(
        f"/api/interview/session/{session_id}/answer",
        json={"question_id": question["id"], "transcript": "I rolled back and wrote the postmortem."},
    )
    assert answer.status_code == 200
    assert answer.json()["analysis"]["scores"] == {"ownership": 4.0, "communication": 3.0}

    tone = client.post(
        f"/api/interview/session/{session_id}/tone",
        json={"question_id": question["id"], "transcript": "um so", "metrics": {"speed_wpm": 120}},
    )
    assert tone.status_code == 200
    assert tone.json()["tone"]["metrics"]["speed_wpm"] == 120

    results = client.get(f"/api/interview/session/{session_id}/results").json()
    assert [item["question_id"] for item in results["items"]] == [question["id"]]

    analysis = client.get(f"/api/interview/session/{session_id}/analysis").json()
    assert analysis["sessionId"] == session_id
    assert {entry["competency"] for entry in analysis["competencyScores"]} == {"ownership", "communication"}

    completed = client.post(f"/api/interview/session/{session_id}/complete").json()
    assert completed["pipeline"]["status"] == "complete"

    refused = client.post(f"/api/interview/session/{session_id}/question")
    assert refused.status_code == 400
    assert refused.json() == {"error": "invalid_request"}


def test_contract_violation_is_502_and_records_nothing():
    client = _client()
    session_id = _start(client)
    bind_model(QUESTION_KEY, lambda system, user: {"scorecard": {}})

    response = client.post(f"/api/interview/session/{session_id}/question")
    assert response.status_code == 502
    assert response.json() == {"error": "contract_violation"}
    assert client.get(f"/pipeline/status/{session_id}").json()["pipeline"]["notes"] == []


def test_unbound_model_is_upstream_error():
    client = _client()
    session_id = _start(client)
    response = client.post(f"/api/interview/session/{session_id}/question")
    assert response.status_code == 502
    assert response.json() == {"error": "upstream_error"}


def test_unexpected_error_is_500():
    class ExplodingStore(MemoryStore):
        def get(self, key):
            raise RuntimeError("disk on fire")

    set_service(InterviewService(PipelineMachine(ExplodingStore())))
    client = _client(raise_server_exceptions=False)
    response = client.get("/pipeline/status/anything")
    assert response.status_code == 500
    assert response.json() == {"error": "disk on fire"}


def test_lifespan_binds_models_from_config(tmp_path, monkeypatch):
    config_path = tmp_path / "app_config.json"
    _write_config(config_path)
    monkeypatch.setattr(settings, "LLM_CONFIG_PATH", str(config_path))

    with _client():
        assert callable(get_model(QUESTION_KEY))


def test_missing_config_leaves_models_unbound(tmp_path):
    assert api_server.bind_models_from_config(tmp_path / "missing.json") is False


def test_practice_client_routes(fake_models):
    client = _client()
    start = client.post("/api/interview/session/start", json={"job_title": "Backend Engineer", "jd": "Own payments."})
    body = start.json()
    session_id = body["session_id"]
    assert body["pipeline_id"] == session_id

    question = client.get(f"/api/interview/session/{session_id}/next-question")
    assert question.status_code == 200
    data = question.json()
    assert data["question"].startswith("Describe a production incident")
    assert data["scorecard"]["competencies"] == ["ownership", "communication"]

    analysis = client.post(
        "/api/interview/analysis",
        json={"session_id": session_id, "question_id": data["question_id"], "transcript": "We rolled back."},
    )
    assert analysis.status_code == 200
    assert analysis.json()["weaknesses"] == ["Result had no metrics"]
    assert analysis.json()["improvement_plan"] == ["State the recovery time in minutes."]

    missing = client.post(
        "/api/interview/analysis",
        json={"session_id": session_id, "question_id": "unknown", "transcript": "text"},
    )
    assert missing.status_code == 404
    assert missing.json() == {"error": "not_found"}
