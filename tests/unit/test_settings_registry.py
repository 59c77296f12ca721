import json

import pytest

from config.registry import EVALUATION_KEY, QUESTION_KEY, bind_model, get_model
from config.routes import load_app_registry
from config.settings import Settings


def test_settings_defaults():
    settings = Settings(_env_file=None)
    assert settings.DB_PATH.endswith(".db")
    assert settings.MAX_TIME_SECONDS == 600
    assert settings.RESUME_WINDOW_MINUTES == 30
    assert settings.CONSECUTIVE_POOR_THRESHOLD == 3
    assert settings.PASTE_BAN_THRESHOLD == 2
    assert settings.INITIAL_PROGRESS == 50


def test_settings_reject_out_of_range_initial_score():
    with pytest.raises(ValueError):
        Settings(_env_file=None, INITIAL_PROGRESS=120)


def test_registry_bind_and_retrieve():
    marker = object()
    bind_model(QUESTION_KEY, lambda **_: marker)
    model = get_model(QUESTION_KEY)
    assert model() is marker


def test_registry_missing_key():
    with pytest.raises(KeyError):
        get_model("models.not_bound")


def test_app_registry_resolves_routes(tmp_path):
    from agents.types import InterviewEvaluation, NextUtterance

    route = {
        "name": "r1",
        "base_url": "http://llm.local",
        "endpoint": "/v1/chat/completions",
        "model": "fake",
        "timeout_s": 5,
    }
    path = tmp_path / "app_config.json"
    path.write_text(
        json.dumps({"llm_routes": {"r1": route}, "registry": {QUESTION_KEY: "r1", EVALUATION_KEY: "r1"}}),
        encoding="utf-8",
    )
    resolved = load_app_registry(path, {QUESTION_KEY: NextUtterance, EVALUATION_KEY: InterviewEvaluation})
    assert resolved[QUESTION_KEY][0].name == "r1"
    assert resolved[EVALUATION_KEY][1] is InterviewEvaluation

    path.write_text(json.dumps({"llm_routes": {"r1": route}, "registry": {QUESTION_KEY: "r1"}}), encoding="utf-8")
    with pytest.raises(KeyError):
        load_app_registry(path, {EVALUATION_KEY: InterviewEvaluation})
