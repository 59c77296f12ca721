import random

import pytest

from config.settings import settings
from services.errors import CollaboratorError, SessionNotActive
from services.sessions import new_session
from services.turns import is_near_duplicate, run_turn


def _session():
    session = new_session("c1", track_id="fullstack", candidate_name="Asha")
    session.add_interviewer_turn("Hi Asha! What got you into full stack development?")
    return session


def test_continued_turn_commits_on_copy(fake_models):
    questions, _ = fake_models
    questions.script.append({"next_utterance": "Nice! Which frameworks have you tried?", "response_quality_hint": "good"})
    session = _session()
    outcome = run_turn(session, "I built a portfolio site with React.", rng=random.Random(1))

    assert outcome.kind == "continued"
    assert outcome.tier == "good"
    assert session.turn_count == 1
    assert len(session.transcript) == 1
    working = outcome.session
    assert working.turn_count == 2
    assert working.conversation_history[-1].content == "Nice! Which frameworks have you tried?"
    assert working.progress_score == 50 + outcome.score.delta
    assert working.last_direction == "up"
    assert sum(1 for m in working.conversation_history if m.role == "assistant") == working.turn_count
    assert questions.calls[0]["temperature"] == settings.BASE_TEMPERATURE


def test_analyzer_used_when_no_hint(fake_models):
    questions, _ = fake_models
    questions.script.append({"next_utterance": "Okay, tell me about a project?"})
    outcome = run_turn(_session(), "ok", rng=random.Random(1))
    assert outcome.tier == "poor"
    assert outcome.quality is not None
    assert outcome.session.consecutive_poor_count == 1


def test_near_duplicate_requested_again_at_higher_temperature(fake_models):
    questions, _ = fake_models
    questions.script.extend(
        [
            {"next_utterance": "Hi Asha! What got you into coding?", "response_quality_hint": "medium"},
            {"next_utterance": "Cool. Which tools do you enjoy most?", "response_quality_hint": "medium"},
        ]
    )
    outcome = run_turn(_session(), "My cousin showed me HTML.", rng=random.Random(2))
    assert outcome.regenerated is True
    assert outcome.next_utterance == "Cool. Which tools do you enjoy most?"
    assert questions.calls[1]["temperature"] == settings.RETRY_TEMPERATURE


def test_duplicate_accepted_when_retry_fails(fake_models):
    questions, _ = fake_models
    questions.script.extend(
        [
            {"next_utterance": "Hi Asha! What got you into coding?", "response_quality_hint": "medium"},
            RuntimeError("model down"),
        ]
    )
    outcome = run_turn(_session(), "My cousin showed me HTML.", rng=random.Random(2))
    assert outcome.next_utterance == "Hi Asha! What got you into coding?"
    assert outcome.kind == "continued"


def test_collaborator_failure_leaves_session_untouched(fake_models):
    questions, _ = fake_models
    questions.script.append(RuntimeError("timeout"))
    session = _session()
    before = session.model_dump()
    with pytest.raises(CollaboratorError):
        run_turn(session, "I like APIs")
    assert session.model_dump() == before


def test_invalid_payload_is_collaborator_error(fake_models):
    questions, _ = fake_models
    questions.script.append({"unexpected": True})
    with pytest.raises(CollaboratorError):
        run_turn(_session(), "I like APIs")


def test_wrapup_signal_moves_to_wrapping_up(fake_models):
    questions, _ = fake_models
    questions.script.append({"next_utterance": "I've got a good read. One last thing - any questions?", "response_quality_hint": "good"})
    outcome = run_turn(_session(), "I love building apps.", rng=random.Random(1))
    assert outcome.kind == "wrapping_up"
    assert outcome.session.phase == "wrapping_up"


def test_reply_during_wrapping_up_finishes_without_scoring(fake_models):
    questions, _ = fake_models
    session = _session()
    session.phase = "wrapping_up"
    outcome = run_turn(session, "No questions, thank you!")
    assert outcome.kind == "terminal"
    assert outcome.session.exit_reason == "normal_wrapup"
    assert outcome.session.progress_score == session.progress_score
    assert questions.calls == []
    assert outcome.session.transcript[-1].speaker == "interviewer"
    assert outcome.session.turn_count == session.turn_count


def test_terminal_turn_appends_closing_only_to_transcript(fake_models):
    questions, _ = fake_models
    questions.script.append({"next_utterance": "Tell me more?", "response_quality_hint": "poor"})
    session = _session()
    session.consecutive_poor_count = 2
    outcome = run_turn(session, "no", rng=random.Random(1))
    assert outcome.kind == "terminal"
    assert outcome.session.exit_reason == "poor_responses"
    assert outcome.next_utterance is None
    assert outcome.session.turn_count == 1
    assert outcome.session.conversation_history[-1].role == "user"


def test_finished_session_rejected():
    session = _session()
    session.phase = "completed"
    with pytest.raises(SessionNotActive):
        run_turn(session, "hello")


def test_near_duplicate_prefix_rule():
    assert is_near_duplicate("hi asha! what gets you going", ["Hi Asha! What got you"], prefix_chars=15)
    assert not is_near_duplicate("Different opening here", ["Hi Asha! What got you"], prefix_chars=15)
    assert not is_near_duplicate("anything", [""], prefix_chars=15)
