"""Pydantic schemas for the interview session API."""
from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from config.settings import settings
from session.state import InterviewSession


class StartReq(BaseModel):
    owner_id: str


class ResumeReq(BaseModel):
    owner_id: str


class TurnReq(BaseModel):
    owner_id: str
    reply: str = Field(min_length=1)


class PasteReq(BaseModel):
    owner_id: str
    text: str


class UIMessage(BaseModel):
    role: Literal["interviewer", "candidate"] = "interviewer"
    text: str


class SessionView(BaseModel):
    owner_id: str
    track_id: str
    phase: str
    turn_count: int
    progress_score: int
    last_direction: Optional[str] = None
    time_elapsed_seconds: int
    remaining_seconds: int
    exit_reason: Optional[str] = None
    transcript: List[UIMessage] = Field(default_factory=list)

    @classmethod
    def from_session(cls, session: InterviewSession) -> "SessionView":
        return cls(
            owner_id=session.session_owner_id,
            track_id=session.track_id,
            phase=session.phase,
            turn_count=session.turn_count,
            progress_score=session.progress_score,
            last_direction=session.last_direction,
            time_elapsed_seconds=session.time_elapsed_seconds,
            remaining_seconds=max(0, settings.MAX_TIME_SECONDS - session.time_elapsed_seconds),
            exit_reason=session.exit_reason,
            transcript=[UIMessage(role=entry.speaker, text=entry.text) for entry in session.transcript],
        )


class EntryResp(BaseModel):
    status: Literal["fresh", "resume_available", "completed", "banned"]
    candidate_status: str
    discarded: Optional[str] = None
    session: Optional[SessionView] = None


class ApiResp(BaseModel):
    status: Literal["active", "continued", "wrapping_up", "completed", "retry", "preempted"]
    ui_messages: List[UIMessage] = Field(default_factory=list)
    session: Optional[SessionView] = None
    evaluation: Optional[Dict[str, Any]] = None


class PasteResp(BaseModel):
    action: Literal["ALLOW", "WARN", "BAN"]
    blocked: bool
    warning_count: int
    message: str = ""
