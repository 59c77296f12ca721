import pytest
from fastapi.testclient import TestClient

from api.routes import _LIFECYCLES, reset_lifecycles
from api_server import app

client = TestClient(app)

LONG_PASTE = "A" * 150


@pytest.fixture(autouse=True)
def _fresh_registry():
    reset_lifecycles()
    yield
    reset_lifecycles()


def _register(candidate_id="c7", name="Nia"):
    resp = client.post(
        "/api/candidates",
        json={"candidate_id": candidate_id, "display_name": name, "track_id": "fullstack", "email": "nia@example.com"},
    )
    assert resp.status_code == 201
    return resp.json()


def test_start_turns_and_wrapup(fake_models):
    questions, evaluator = fake_models
    questions.script.append({"next_utterance": "Final question: what would you build next?", "response_quality_hint": "good"})
    _register()

    assert client.get("/api/interview/entry/c7").json()["status"] == "fresh"

    start = client.post("/api/interview/start", json={"owner_id": "c7"})
    assert start.status_code == 200
    body = start.json()
    assert body["status"] == "active"
    assert "Nia" in body["ui_messages"][0]["text"]
    assert client.get("/api/candidates/c7").json()["status"] == "interview_pending"

    first = client.post("/api/interview/turn", json={"owner_id": "c7", "reply": "I built a chat app with Django."})
    assert first.json()["status"] == "wrapping_up"
    assert first.json()["ui_messages"][0]["text"].startswith("Final question")

    done = client.post("/api/interview/turn", json={"owner_id": "c7", "reply": "A tutoring platform!"})
    payload = done.json()
    assert payload["status"] == "completed"
    assert payload["session"]["exit_reason"] == "normal_wrapup"
    assert payload["evaluation"]["recommendation"] == "Hire"
    assert evaluator.calls == 1

    record = client.get("/api/candidates/c7").json()
    assert record["status"] == "interview_done"
    assert record["ai_score"] == 78
    stored = client.get("/api/candidates/c7/interview").json()
    assert stored["exit_reason"] == "normal_wrapup"
    assert client.get("/api/interview/entry/c7").json()["status"] == "completed"
    assert client.post("/api/interview/start", json={"owner_id": "c7"}).status_code == 403


def test_paste_warn_then_ban(fake_models):
    _, evaluator = fake_models
    _register()
    client.post("/api/interview/start", json={"owner_id": "c7"})

    warn = client.post("/api/interview/paste", json={"owner_id": "c7", "text": LONG_PASTE}).json()
    assert warn["action"] == "WARN"
    assert warn["blocked"] is True
    assert warn["warning_count"] == 1

    ban = client.post("/api/interview/paste", json={"owner_id": "c7", "text": LONG_PASTE}).json()
    assert ban["action"] == "BAN"
    assert evaluator.calls == 0

    assert client.get("/api/interview/entry/c7").json()["status"] == "banned"
    assert client.post("/api/interview/start", json={"owner_id": "c7"}).status_code == 403
    turn = client.post("/api/interview/turn", json={"owner_id": "c7", "reply": "hello?"})
    assert turn.status_code == 409


def test_resume_after_process_restart(fake_models):
    _register()
    client.post("/api/interview/start", json={"owner_id": "c7"})
    client.post("/api/interview/turn", json={"owner_id": "c7", "reply": "I like building APIs."})

    reset_lifecycles()

    entry = client.get("/api/interview/entry/c7").json()
    assert entry["status"] == "resume_available"
    assert entry["session"]["turn_count"] == 2

    resumed = client.post("/api/interview/resume", json={"owner_id": "c7"})
    assert resumed.status_code == 200
    assert resumed.json()["ui_messages"][0]["text"].startswith("Follow-up 1")

    view = client.get("/api/interview/session/c7").json()
    assert view["phase"] == "active"
    assert view["remaining_seconds"] == 600 - view["time_elapsed_seconds"]


def test_retry_surfaces_as_ok_body(fake_models):
    questions, _ = fake_models
    _register()
    client.post("/api/interview/start", json={"owner_id": "c7"})
    questions.script.append(RuntimeError("model down"))

    resp = client.post("/api/interview/turn", json={"owner_id": "c7", "reply": "Hello there"})
    assert resp.status_code == 200
    assert resp.json()["status"] == "retry"
    assert resp.json()["session"]["turn_count"] == 1


def test_error_statuses(fake_models):
    assert client.get("/api/interview/entry/ghost").status_code == 404
    assert client.post("/api/interview/start", json={"owner_id": "ghost"}).status_code == 404
    _register()
    assert client.post("/api/interview/turn", json={"owner_id": "c7", "reply": "hi"}).status_code == 409
    assert client.post("/api/interview/paste", json={"owner_id": "c7", "text": LONG_PASTE}).status_code == 409
    assert client.post("/api/interview/turn", json={"owner_id": "c7", "reply": ""}).status_code == 422
    assert client.get("/api/interview/session/c7").status_code == 404
    assert client.post(
        "/api/candidates", json={"candidate_id": "c7", "display_name": "Dup"}
    ).status_code == 409


def test_finished_controllers_are_released(fake_models):
    questions, _ = fake_models
    questions.script.append({"next_utterance": "Final question: any questions for us?", "response_quality_hint": "good"})
    _register()
    _register("c8", "Omar")

    client.post("/api/interview/start", json={"owner_id": "c7"})
    assert "c7" in _LIFECYCLES
    client.post("/api/interview/turn", json={"owner_id": "c7", "reply": "I build games."})
    done = client.post("/api/interview/turn", json={"owner_id": "c7", "reply": "No, thanks!"})
    assert done.json()["status"] == "completed"
    assert "c7" not in _LIFECYCLES

    assert client.get("/api/interview/entry/c7").json()["status"] == "completed"
    assert "c7" not in _LIFECYCLES

    client.post("/api/interview/start", json={"owner_id": "c8"})
    client.post("/api/interview/paste", json={"owner_id": "c8", "text": LONG_PASTE})
    assert "c8" in _LIFECYCLES
    client.post("/api/interview/paste", json={"owner_id": "c8", "text": LONG_PASTE})
    assert "c8" not in _LIFECYCLES
    assert client.post("/api/interview/start", json={"owner_id": "c8"}).status_code == 403
    assert "c8" not in _LIFECYCLES
