"""Session lifecycle controller composing turns, integrity checks and the timeout clock."""
from __future__ import annotations

import random
import threading
from typing import Literal, Optional

from pydantic import BaseModel

from agents.evaluator import evaluate_interview, fallback_evaluation
from agents.integrity_monitor import BAN_REASON, IntegrityMonitor
from agents.question_generator import opening_line
from agents.quality_analyzer import QualityAnalyzer
from agents.types import EvaluationRequest, InterviewEvaluation
from config.settings import settings
from observability.logger import log_event
from services.errors import (
    CandidateNotFound,
    CollaboratorError,
    EntryBlocked,
    SessionNotActive,
    TurnInProgress,
)
from services.exit_conditions import closing_for
from services.sessions import default_stores, new_session, validate_resume
from services.timeout import TimeoutWatchdog, timed_out
from services.turns import run_turn
from session.state import InterviewSession
from session.store import SessionStore, WarningCounter
from storage.candidates import FINISHED_STATUSES, CandidateRecord, CandidateStatusStore
from storage.interviews import insert_interview_result

RETRY_MESSAGE = "Something went wrong on our side. Please send your answer again."


class EntryDecision(BaseModel):
    status: Literal["fresh", "resume_available", "completed", "banned"]
    candidate_status: str
    session: Optional[InterviewSession] = None
    discarded: Optional[str] = None


class TurnResult(BaseModel):
    status: Literal["continued", "wrapping_up", "completed", "retry", "preempted"]
    message: Optional[str] = None
    session: Optional[InterviewSession] = None
    evaluation: Optional[InterviewEvaluation] = None


class PasteResult(BaseModel):
    action: Literal["ALLOW", "WARN", "BAN"]
    blocked: bool
    warning_count: int
    message: str = ""


class InterviewLifecycle:
    """State machine for one candidate: not started, active, then completed or banned.

    A single ``_terminated`` flag, flipped under ``_lock``, decides who
    finalizes: a terminal turn, the timeout or a ban. Collaborator calls run
    outside the lock.
    """

    def __init__(
        self,
        owner_id: str,
        *,
        candidates: Optional[CandidateStatusStore] = None,
        store: Optional[SessionStore] = None,
        counter: Optional[WarningCounter] = None,
        integrity: Optional[IntegrityMonitor] = None,
        analyzer: Optional[QualityAnalyzer] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        default_store, default_counter = default_stores() if store is None or counter is None else (store, counter)
        self.owner_id = owner_id
        self.candidates = candidates or CandidateStatusStore()
        self.store = store or default_store
        self.counter = counter or default_counter
        self.integrity = integrity or IntegrityMonitor(self.counter)
        self.analyzer = analyzer
        self.rng = rng

        self.session: Optional[InterviewSession] = None
        self.evaluation: Optional[InterviewEvaluation] = None

        self._lock = threading.Lock()
        self._turn_lock = threading.Lock()
        self._terminated = False
        self._timeout_fired = False
        self._banned = False
        self._retired = False
        self._pending_reply: Optional[str] = None
        self._watchdog: Optional[TimeoutWatchdog] = None

    # entry -----------------------------------------------------------------

    def _record(self) -> CandidateRecord:
        record = self.candidates.get(self.owner_id)
        if record is None:
            raise CandidateNotFound(self.owner_id)
        return record

    def check_entry(self) -> EntryDecision:
        """Gate entry on durable status, then offer a resumable snapshot if one is valid."""

        record = self._record()
        if record.status == "banned":
            self.store.clear(self.owner_id)
            return EntryDecision(status="banned", candidate_status=record.status)
        if record.status in FINISHED_STATUSES:
            self.store.clear(self.owner_id)
            return EntryDecision(status="completed", candidate_status=record.status)

        snapshot = self.store.load(self.owner_id)
        check = validate_resume(snapshot, self.owner_id)
        if check.ok:
            return EntryDecision(status="resume_available", candidate_status=record.status, session=snapshot)
        if snapshot is not None:
            self.store.clear(self.owner_id)
            log_event("session.discarded", self.owner_id, reason=check.reason)
            return EntryDecision(status="fresh", candidate_status=record.status, discarded=check.reason)
        return EntryDecision(status="fresh", candidate_status=record.status)

    def _reset_flags(self) -> None:
        self._terminated = False
        self._timeout_fired = False
        self._banned = False
        self._retired = False
        self._pending_reply = None
        self.evaluation = None

    def start(self) -> InterviewSession:
        decision = self.check_entry()
        if decision.status in ("banned", "completed"):
            raise EntryBlocked(self.owner_id, decision.candidate_status)
        record = self._record()
        self.store.clear(self.owner_id)
        if record.status == "registered":
            self.candidates.set_status(self.owner_id, "interview_pending")

        session = new_session(self.owner_id, track_id=record.track_id, candidate_name=record.display_name)
        session.add_interviewer_turn(opening_line(record.track_id, record.display_name, self.rng))
        with self._lock:
            self._reset_flags()
            self.session = session
            self.store.save(session)
        log_event("session.started", self.owner_id, phase=session.phase, turn=session.turn_count)
        self._start_watchdog()
        return session

    def resume(self) -> InterviewSession:
        decision = self.check_entry()
        if decision.status in ("banned", "completed"):
            raise EntryBlocked(self.owner_id, decision.candidate_status)
        if decision.status != "resume_available" or decision.session is None:
            raise SessionNotActive(f"no resumable session for {self.owner_id}")
        with self._lock:
            self._reset_flags()
            self.session = decision.session
        log_event(
            "session.resumed",
            self.owner_id,
            phase=decision.session.phase,
            turn=decision.session.turn_count,
            score=decision.session.progress_score,
        )
        self._start_watchdog()
        return decision.session

    # turns -----------------------------------------------------------------

    def submit_reply(self, text: str) -> TurnResult:
        if not self._turn_lock.acquire(blocking=False):
            raise TurnInProgress(f"a reply is already being processed for {self.owner_id}")
        try:
            return self._submit(text)
        finally:
            self._turn_lock.release()

    def _submit(self, text: str) -> TurnResult:
        with self._lock:
            if self.session is None or self._terminated or not self.session.is_live:
                raise SessionNotActive(f"no active session for {self.owner_id}")
            base = self.session.model_copy(deep=True)
            self._pending_reply = text

        try:
            outcome = run_turn(base, text, analyzer=self.analyzer, rng=self.rng)
        except CollaboratorError as exc:
            with self._lock:
                self._pending_reply = None
                if self._terminated:
                    return self._preempted()
            log_event("turn.retry", self.owner_id, error=str(exc))
            return TurnResult(status="retry", message=RETRY_MESSAGE, session=base)

        with self._lock:
            self._pending_reply = None
            if self._terminated or self.session is None:
                return self._preempted()
            committed = outcome.session
            committed.time_elapsed_seconds = self.session.time_elapsed_seconds
            if outcome.kind != "terminal":
                self.session = committed
                self.store.save(committed)
                return TurnResult(status=outcome.kind, message=outcome.next_utterance, session=committed)
            self._terminated = True

        try:
            evaluation = self._evaluate(committed)
        except CollaboratorError as exc:
            with self._lock:
                if self._banned or self._retired:
                    return self._preempted()
                # Hand the clock back; the reply can be resubmitted.
                self._terminated = False
            self._start_watchdog()
            log_event("turn.retry", self.owner_id, error=str(exc), exit_reason=committed.exit_reason)
            return TurnResult(status="retry", message=RETRY_MESSAGE, session=base)

        if not self._finalize(committed, evaluation):
            with self._lock:
                return self._preempted()
        return TurnResult(
            status="completed",
            message=committed.transcript[-1].text,
            session=committed,
            evaluation=evaluation,
        )

    def _preempted(self) -> TurnResult:
        return TurnResult(
            status="preempted",
            message=self.session.transcript[-1].text if self.session and self.session.transcript else None,
            session=self.session,
            evaluation=self.evaluation,
        )

    # integrity -------------------------------------------------------------

    def handle_paste(self, text: str) -> PasteResult:
        with self._lock:
            if self.session is None or self._terminated or not self.session.is_live:
                raise SessionNotActive(f"no active session for {self.owner_id}")
        outcome = self.integrity.inspect_paste(self.owner_id, text)
        if outcome.action == "ALLOW":
            return PasteResult(action="ALLOW", blocked=False, warning_count=outcome.warning_count)
        if outcome.action == "BAN":
            self._ban()
        return PasteResult(
            action=outcome.action,
            blocked=True,
            warning_count=outcome.warning_count,
            message=outcome.message,
        )

    def _ban(self) -> None:
        with self._lock:
            self._terminated = True
            self._banned = True
            if self.session is not None:
                self.session.phase = "banned"
        self.candidates.ban(self.owner_id, BAN_REASON)
        self.store.clear(self.owner_id)
        self._stop_watchdog()
        log_event("session.banned", self.owner_id, phase="banned")

    # clock -----------------------------------------------------------------

    def tick(self) -> bool:
        """Advance the clock by one second; returns ``False`` once the session is over."""

        with self._lock:
            if self.session is None or self._terminated or not self.session.is_live:
                return False
            self.session.time_elapsed_seconds += 1
            if not timed_out(self.session.time_elapsed_seconds):
                self.store.save(self.session)
                return True
            final = self._claim_timeout(self.session)
        self._finish_timeout(final)
        return False

    def expire(self) -> Optional[TurnResult]:
        """Force the timeout path now; ``None`` when the session already ended."""

        with self._lock:
            if self.session is None or self._terminated or not self.session.is_live:
                return None
            self.session.time_elapsed_seconds = max(self.session.time_elapsed_seconds, settings.MAX_TIME_SECONDS)
            final = self._claim_timeout(self.session)
        evaluation = self._finish_timeout(final)
        return TurnResult(status="completed", message=final.transcript[-1].text, session=final, evaluation=evaluation)

    def _claim_timeout(self, session: InterviewSession) -> InterviewSession:
        # Caller holds the lock.
        self._timeout_fired = True
        self._terminated = True
        final = session.model_copy(deep=True)
        if self._pending_reply is not None:
            final.add_candidate_reply(self._pending_reply)
        final.add_interviewer_note(closing_for("timeout", final.candidate_name))
        final.phase = "completed"
        final.exit_reason = "timeout"
        log_event("session.timeout", self.owner_id, turn=final.turn_count, score=final.progress_score)
        return final

    def _finish_timeout(self, final: InterviewSession) -> InterviewEvaluation:
        try:
            evaluation = self._evaluate(final)
        except CollaboratorError as exc:
            log_event("evaluation.degraded", self.owner_id, error=str(exc))
            evaluation = fallback_evaluation()
        self._finalize(final, evaluation)
        return evaluation

    def _start_watchdog(self) -> None:
        if not settings.WATCHDOG_ENABLED:
            return
        self._stop_watchdog()
        self._watchdog = TimeoutWatchdog(self.tick)
        self._watchdog.start()

    def close(self) -> None:
        """Retire this controller without finalizing; the snapshot stays resumable.

        An in-flight turn on a retired controller returns ``preempted`` and
        commits nothing, so a replacement controller owns the snapshot alone.
        """

        with self._lock:
            self._retired = True
            self._terminated = True
        self._stop_watchdog()

    @property
    def finished(self) -> bool:
        session = self.session
        return session is not None and session.is_terminal

    def _stop_watchdog(self) -> None:
        if self._watchdog is not None:
            self._watchdog.stop()
            self._watchdog = None

    # finalization ----------------------------------------------------------

    def _evaluate(self, session: InterviewSession) -> InterviewEvaluation:
        request = EvaluationRequest(
            conversation_history=list(session.conversation_history),
            track_id=session.track_id,
            candidate_display_name=session.candidate_name,
        )
        return evaluate_interview(request)

    def _finalize(self, final: InterviewSession, evaluation: InterviewEvaluation) -> bool:
        with self._lock:
            if self._banned or self._retired:
                return False
            self.session = final
            self.evaluation = evaluation

        record = self.candidates.get(self.owner_id)
        insert_interview_result(
            candidate_id=self.owner_id,
            candidate_email=record.email if record else None,
            track_id=final.track_id,
            transcript=[entry.model_dump(mode="json") for entry in final.transcript],
            ai_summary=evaluation.summary,
            score=evaluation.overall_score,
            technical_depth=evaluation.technical_depth,
            empathy_score=evaluation.empathy_score,
            culture_fit=evaluation.culture_fit,
            key_observation=evaluation.key_observation,
            recommendation=evaluation.recommendation,
            evaluation=evaluation.model_dump(),
            duration_seconds=final.time_elapsed_seconds,
            progress_score=final.progress_score,
            exit_reason=final.exit_reason or "normal_wrapup",
        )
        self.candidates.mark_interview_done(
            self.owner_id,
            summary=evaluation.summary,
            score=evaluation.overall_score,
            recommendation=evaluation.recommendation,
        )
        self.store.clear(self.owner_id)
        self._stop_watchdog()
        log_event(
            "session.completed",
            self.owner_id,
            phase=final.phase,
            exit_reason=final.exit_reason,
            score=final.progress_score,
            turn=final.turn_count,
        )
        return True


__all__ = ["EntryDecision", "InterviewLifecycle", "PasteResult", "TurnResult", "RETRY_MESSAGE"]
