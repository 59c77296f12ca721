"""Helpers for creating, validating and storing interview sessions."""
from __future__ import annotations

import os
from datetime import datetime, timedelta
from typing import Optional, Tuple

from pydantic import BaseModel

from config.settings import settings
from session.state import InterviewSession, utcnow
from session.store import FileSessionStore, FileWarningCounter, SessionStore, WarningCounter
from storage.sessions import SqliteSessionStore, SqliteWarningCounter


class ResumeCheck(BaseModel):
    ok: bool
    reason: str = "ok"


def new_session(owner_id: str, *, track_id: str, candidate_name: str, now: Optional[datetime] = None) -> InterviewSession:
    """Create a fresh active session with default scores."""

    return InterviewSession(
        session_owner_id=owner_id,
        track_id=track_id,
        candidate_name=candidate_name,
        progress_score=settings.INITIAL_PROGRESS,
        phase="active",
        started_at=now or utcnow(),
    )


def validate_resume(
    snapshot: Optional[InterviewSession],
    owner_id: str,
    now: Optional[datetime] = None,
    max_age: Optional[timedelta] = None,
) -> ResumeCheck:
    """Decide whether ``snapshot`` may be resumed by ``owner_id``; pure."""

    if snapshot is None:
        return ResumeCheck(ok=False, reason="missing")
    if snapshot.session_owner_id != owner_id:
        return ResumeCheck(ok=False, reason="owner_mismatch")
    if not snapshot.is_live:
        return ResumeCheck(ok=False, reason=f"phase_{snapshot.phase}")
    if not snapshot.transcript:
        return ResumeCheck(ok=False, reason="empty_transcript")
    if snapshot.turn_count <= 0:
        return ResumeCheck(ok=False, reason="no_turns")
    window = max_age or timedelta(minutes=settings.RESUME_WINDOW_MINUTES)
    if (now or utcnow()) - snapshot.started_at >= window:
        return ResumeCheck(ok=False, reason="stale")
    return ResumeCheck(ok=True)


def default_stores() -> Tuple[SessionStore, WarningCounter]:
    """Stores selected by ``SESSION_BACKEND``."""

    if settings.SESSION_BACKEND == "sqlite":
        return SqliteSessionStore(), SqliteWarningCounter()
    return (
        FileSessionStore(settings.SESSION_DIR),
        FileWarningCounter(os.path.join(settings.SESSION_DIR, "paste_warnings.json")),
    )


__all__ = ["ResumeCheck", "default_stores", "new_session", "validate_resume"]
