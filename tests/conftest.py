import os
import sys
import tempfile
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from storage.migrate import migrate
from config.settings import settings
from config.registry import bind_model, EVALUATION_KEY, QUESTION_KEY
from config.scoring import reset_tables


@pytest.fixture(autouse=True)
def tmp_db(monkeypatch):
    td = tempfile.TemporaryDirectory()
    db_path = os.path.join(td.name, "test.db")
    monkeypatch.setattr(settings, "DB_PATH", db_path, raising=False)
    monkeypatch.setattr(settings, "SESSION_DIR", os.path.join(td.name, "sessions"), raising=False)
    monkeypatch.setattr(settings, "SCORING_CONFIG", str(ROOT / "config" / "scoring.yaml"), raising=False)
    monkeypatch.setattr(settings, "WATCHDOG_ENABLED", False, raising=False)
    reset_tables()
    migrate(db_path)
    try:
        yield td.name
    finally:
        reset_tables()
        td.cleanup()


class ScriptedQuestions:
    """Question model fake returning queued utterances and hints in order."""

    def __init__(self, script=None, default_hint="medium"):
        self.script = list(script or [])
        self.default_hint = default_hint
        self.calls = []

    def __call__(self, *, inputs, temperature, max_tokens=180):
        self.calls.append({"inputs": inputs, "temperature": temperature})
        if self.script:
            item = self.script.pop(0)
            if isinstance(item, Exception):
                raise item
            if callable(item):
                return item()
            return item
        n = len(self.calls)
        return {"next_utterance": f"Follow-up {n}: tell me more about that?", "response_quality_hint": self.default_hint}


class FakeEvaluator:
    def __init__(self, payload=None, error=None):
        self.payload = payload or {
            "summary": "Curious and honest candidate.",
            "overall_score": 78,
            "technical_depth": "Medium",
            "empathy_score": "High",
            "culture_fit": "Good",
            "key_observation": "\"I love building things\"",
            "recommendation": "Hire",
            "scores": {"curiosity": 20, "empathy": 20, "grit": 18, "thinking": 20},
        }
        self.error = error
        self.calls = 0

    def __call__(self, *, inputs, temperature=0.3, max_tokens=600):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return dict(self.payload)


@pytest.fixture
def fake_models():
    questions = ScriptedQuestions()
    evaluator = FakeEvaluator()
    bind_model(QUESTION_KEY, questions)
    bind_model(EVALUATION_KEY, evaluator)
    return questions, evaluator


@pytest.fixture
def candidate():
    from storage.candidates import CandidateStatusStore

    store = CandidateStatusStore()
    return store.create(candidate_id="c1", display_name="Asha", track_id="fullstack", email="asha@example.com")
