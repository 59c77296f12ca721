import json
import random

import pytest

from agents.evaluator import evaluate_interview, fallback_evaluation, llm_evaluation_model
from agents.question_generator import (
    build_system_prompt,
    llm_question_model,
    opening_line,
    request_next_utterance,
    stage_for,
)
from agents.types import EvaluationRequest, QualitySignals, QuestionRequest
from config.registry import EVALUATION_KEY, QUESTION_KEY, bind_model
from config.routes import LlmRoute
from llm_gateway import LlmGatewayError, LlmValidationError, chat
from services.errors import CollaboratorError
from session.state import HistoryMessage

ROUTE = LlmRoute(
    name="test",
    base_url="http://llm.local",
    endpoint="/v1/chat/completions",
    model="fake",
    timeout_s=5,
    max_retries=1,
)


class FakeResponse:
    def __init__(self, status_code, body):
        self.status_code = status_code
        self._body = body

    def json(self):
        return self._body


class FakeClient:
    def __init__(self, contents, status_code=200):
        self.contents = list(contents)
        self.status_code = status_code
        self.requests = []

    def post(self, url, *, json, headers, timeout):
        self.requests.append({"url": url, "json": json, "headers": headers})
        content = self.contents.pop(0)
        return FakeResponse(self.status_code, {"choices": [{"message": {"content": content}}]})


def _history():
    return [
        HistoryMessage(role="assistant", content="Hi! What got you into coding?"),
        HistoryMessage(role="user", content="I built a React app because I love it. How do you test?"),
    ]


def test_opening_line_uses_track_and_name():
    line = opening_line("data-science", "Ravi", random.Random(3))
    assert "Ravi" in line


def test_stage_boundaries():
    assert [stage_for(n) for n in (0, 1, 2, 3, 4, 5, 6, 9)] == [
        "warmup",
        "warmup",
        "tech_experience",
        "tech_experience",
        "projects",
        "projects",
        "closing",
        "closing",
    ]


def test_system_prompt_mentions_track_and_adaptation():
    request = QuestionRequest(conversation_history=_history(), track_id="ar-vr", candidate_display_name="Mia")
    prompt = build_system_prompt(request, QualitySignals(is_short=True), random.Random(1))
    assert "Immersive Tech (AR/VR)" in prompt
    assert "Mia" in prompt
    assert "ADAPTATION" in prompt


def test_llm_question_model_adds_local_hint():
    client = FakeClient(['```json\n{"next_utterance": "Nice! What did you test with?"}\n```'])
    model = llm_question_model(ROUTE, client=client, rng=random.Random(1))
    request = QuestionRequest(conversation_history=_history(), track_id="fullstack", candidate_display_name="Asha")
    raw = model(inputs=request.model_dump(mode="json"), temperature=0.9)
    assert raw["next_utterance"] == "Nice! What did you test with?"
    assert raw["response_quality_hint"] == "excellent"
    sent = client.requests[0]["json"]
    assert sent["temperature"] == 0.9
    assert sent["messages"][0]["role"] == "system"
    assert sent["messages"][-1]["role"] == "user"


def test_request_next_utterance_wraps_gateway_errors():
    bind_model(QUESTION_KEY, llm_question_model(ROUTE, client=FakeClient(["{}"], status_code=503)))
    request = QuestionRequest(conversation_history=_history(), track_id="fullstack", candidate_display_name="Asha")
    with pytest.raises(CollaboratorError):
        request_next_utterance(request, temperature=0.75)


def test_evaluator_validation_failure_falls_back():
    bind_model(EVALUATION_KEY, llm_evaluation_model(ROUTE, client=FakeClient(["not json", "still not json"])))
    request = EvaluationRequest(conversation_history=_history(), track_id="fullstack", candidate_display_name="Asha")
    result = evaluate_interview(request)
    assert result == fallback_evaluation()


def test_evaluator_parses_model_output():
    payload = {
        "summary": "Keen builder.",
        "overall_score": 81,
        "technical_depth": "High",
        "empathy_score": "Medium",
        "culture_fit": "Strong",
        "key_observation": "\"I love it\"",
        "recommendation": "Strong Hire",
        "scores": {"curiosity": 21, "empathy": 18, "grit": 20, "thinking": 22},
    }
    client = FakeClient([json.dumps(payload)])
    bind_model(EVALUATION_KEY, llm_evaluation_model(ROUTE, client=client))
    request = EvaluationRequest(conversation_history=_history(), track_id="fullstack", candidate_display_name="Asha")
    result = evaluate_interview(request)
    assert result.overall_score == 81
    assert result.recommendation == "Strong Hire"
    assert "Asha: I built a React app" in client.requests[0]["json"]["messages"][-1]["content"]


def test_evaluator_transport_failure_raises():
    bind_model(EVALUATION_KEY, llm_evaluation_model(ROUTE, client=FakeClient(["{}"], status_code=500)))
    request = EvaluationRequest(conversation_history=_history(), track_id="fullstack", candidate_display_name="Asha")
    with pytest.raises(CollaboratorError):
        evaluate_interview(request)


def test_gateway_retries_with_hint_then_raises():
    client = FakeClient(["nope", "{\"next\": 1}"])
    from agents.types import NextUtterance

    with pytest.raises(LlmValidationError):
        chat([{"role": "user", "content": "hi"}], NextUtterance, cfg=ROUTE, client=client)
    assert len(client.requests) == 2
    assert "failed validation" in client.requests[1]["json"]["messages"][-1]["content"]


def test_gateway_status_error_is_not_retried():
    client = FakeClient(["{}", "{}"], status_code=429)
    from agents.types import NextUtterance

    with pytest.raises(LlmGatewayError):
        chat([{"role": "user", "content": "hi"}], NextUtterance, cfg=ROUTE, client=client)
    assert len(client.requests) == 1
