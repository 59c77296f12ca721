"""Conversation turn controller: one candidate reply in, one committed outcome out."""
from __future__ import annotations

import random
from typing import List, Literal, Optional, Tuple

from pydantic import BaseModel, Field

from agents.question_generator import request_next_utterance
from agents.quality_analyzer import HeuristicQualityAnalyzer, QualityAnalyzer
from agents.types import NextUtterance, QualityReport, QualityTier, QuestionRequest
from config.settings import settings
from observability.logger import log_event
from observability.tracing import span
from services.errors import CollaboratorError, SessionNotActive
from services.exit_conditions import ExitDecision, evaluate_exit, wrapup_decision
from services.scoring import ScoreUpdate, apply_quality
from session.state import InterviewSession

TurnKind = Literal["continued", "wrapping_up", "terminal"]


class TurnOutcome(BaseModel):
    """Candidate state after a turn; nothing is persisted until the lifecycle commits it."""

    kind: TurnKind
    session: InterviewSession
    decision: ExitDecision
    next_utterance: Optional[str] = None
    tier: Optional[QualityTier] = None
    quality: Optional[QualityReport] = None
    score: Optional[ScoreUpdate] = None
    regenerated: bool = False
    events: List[dict] = Field(default_factory=list)


def is_near_duplicate(utterance: str, previous: List[str], prefix_chars: Optional[int] = None) -> bool:
    """True when ``utterance`` opens the same way as an earlier interviewer prompt."""

    size = prefix_chars or settings.DUPLICATE_PREFIX_CHARS
    lower = utterance.lower()
    for prompt in previous:
        prefix = prompt.lower()[:size]
        if prefix and lower.startswith(prefix):
            return True
    return False


def _question_request(session: InterviewSession) -> QuestionRequest:
    return QuestionRequest(
        conversation_history=list(session.conversation_history),
        track_id=session.track_id,
        candidate_display_name=session.candidate_name,
        request_scoring=True,
    )


def _generate(session: InterviewSession, events: List[dict]) -> Tuple[NextUtterance, bool]:
    request = _question_request(session)
    with span(events, "question_generator"):
        first = request_next_utterance(request, temperature=settings.BASE_TEMPERATURE)
    if not is_near_duplicate(first.next_utterance, session.interviewer_prompts()):
        return first, False
    try:
        with span(events, "question_generator.retry"):
            second = request_next_utterance(request, temperature=settings.RETRY_TEMPERATURE)
    except CollaboratorError:
        # A failed retry still lets the candidate move on with the duplicate.
        return first, True
    if second.response_quality_hint is None:
        second = second.model_copy(update={"response_quality_hint": first.response_quality_hint})
    return second, True


def run_turn(
    session: InterviewSession,
    reply: str,
    *,
    analyzer: Optional[QualityAnalyzer] = None,
    rng: Optional[random.Random] = None,
) -> TurnOutcome:
    """Score ``reply`` against a copy of ``session`` and decide what happens next.

    The caller's session is never mutated, so a :class:`CollaboratorError`
    leaves it exactly as it was.
    """

    if not session.is_live:
        raise SessionNotActive(f"session for {session.session_owner_id} is {session.phase}")

    working = session.model_copy(deep=True)
    working.add_candidate_reply(reply)
    events: List[dict] = []

    if session.phase == "wrapping_up":
        decision = wrapup_decision(working.candidate_name)
        working.add_interviewer_note(decision.closing_message or "")
        working.phase = "completed"
        working.exit_reason = decision.exit_reason
        log_event("turn.wrapup_reply", working.session_owner_id, turn=working.turn_count, exit_reason=decision.exit_reason)
        return TurnOutcome(kind="terminal", session=working, decision=decision, events=events)

    utterance, regenerated = _generate(working, events)

    quality: Optional[QualityReport] = None
    tier = utterance.response_quality_hint
    if tier is None:
        quality = (analyzer or HeuristicQualityAnalyzer()).classify(reply, track_id=working.track_id)
        tier = quality.tier

    update = apply_quality(working.progress_score, working.consecutive_poor_count, tier, rng=rng)
    working.progress_score = update.progress_score
    working.consecutive_poor_count = update.consecutive_poor_count
    working.last_direction = update.direction

    decision = evaluate_exit(working.progress_score, working.consecutive_poor_count, utterance.next_utterance)
    if decision.is_terminal:
        working.add_interviewer_note(decision.closing_message or "")
        working.phase = "completed"
        working.exit_reason = decision.exit_reason
        kind: TurnKind = "terminal"
    elif decision.action == "wrap_up":
        working.add_interviewer_turn(utterance.next_utterance)
        working.phase = "wrapping_up"
        kind = "wrapping_up"
    else:
        working.add_interviewer_turn(utterance.next_utterance)
        kind = "continued"

    log_event(
        "turn.scored",
        working.session_owner_id,
        turn=working.turn_count,
        tier=tier,
        delta=update.delta,
        score=working.progress_score,
        outcome=kind,
        exit_reason=decision.exit_reason,
        regenerated=regenerated,
    )
    return TurnOutcome(
        kind=kind,
        session=working,
        decision=decision,
        next_utterance=None if decision.is_terminal else utterance.next_utterance,
        tier=tier,
        quality=quality,
        score=update,
        regenerated=regenerated,
        events=events,
    )


__all__ = ["TurnKind", "TurnOutcome", "is_near_duplicate", "run_turn"]
