import json

import pytest

from config.registry import EVALUATION_KEY, MODEL_KEYS, QUESTION_KEY, bind_model, clear_models, get_model
from config.routing import load_config, resolve_registry, resolve_route
from config.settings import Settings


def test_settings_defaults():
    settings = Settings(_env_file=None)
    assert settings.DB_PATH.endswith(".db")
    assert settings.JD_MAX_CHARS == 8000
    assert settings.MAX_NOTES_PER_PIPELINE == 500
    assert settings.INITIAL_PHASE == "analysis"


def test_settings_read_environment(monkeypatch):
    monkeypatch.setenv("JD_MAX_CHARS", "1200")
    assert Settings(_env_file=None).JD_MAX_CHARS == 1200


def test_registry_bind_and_retrieve():
    marker = object()
    bind_model(QUESTION_KEY, lambda system, user: marker)
    assert get_model(QUESTION_KEY)("s", {}) is marker

    clear_models()
    with pytest.raises(KeyError):
        get_model(QUESTION_KEY)


def _config(tmp_path, registry):
    path = tmp_path / "app_config.json"
    path.write_text(
        json.dumps(
            {
                "llm_routes": {
                    "local": {
                        "name": "local",
                        "base_url": "http://localhost:1234",
                        "endpoint": "/v1/chat/completions",
                        "model": "m",
                        "timeout_s": 10,
                    }
                },
                "registry": registry,
            }
        ),
        encoding="utf-8",
    )
    return load_config(path)


def test_resolve_registry_covers_every_model_key(tmp_path):
    cfg = _config(tmp_path, {key: "local" for key in MODEL_KEYS})
    routes = resolve_registry(cfg, list(MODEL_KEYS))
    assert set(routes) == set(MODEL_KEYS)
    assert routes[QUESTION_KEY].response_format == "json_object"


def test_resolve_route_reports_missing_entries(tmp_path):
    cfg = _config(tmp_path, {QUESTION_KEY: "absent"})
    with pytest.raises(KeyError):
        resolve_route(cfg, EVALUATION_KEY)
    with pytest.raises(KeyError):
        resolve_route(cfg, QUESTION_KEY)
