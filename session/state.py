"""Serializable interview session state."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

Phase = Literal["not_started", "active", "wrapping_up", "completed", "banned"]
ExitReason = Literal["success_100", "poor_responses", "bottom_out", "timeout", "normal_wrapup"]
Speaker = Literal["interviewer", "candidate"]

LIVE_PHASES = ("active", "wrapping_up")
TERMINAL_PHASES = ("completed", "banned")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TranscriptEntry(BaseModel):
    speaker: Speaker
    text: str
    timestamp: datetime = Field(default_factory=utcnow)


class HistoryMessage(BaseModel):
    role: Literal["assistant", "user"]
    content: str


class InterviewSession(BaseModel):
    """One candidate attempt, mirrored to the session store after every mutation."""

    session_owner_id: str
    track_id: str = "fullstack"
    candidate_name: str = ""

    transcript: List[TranscriptEntry] = Field(default_factory=list)
    conversation_history: List[HistoryMessage] = Field(default_factory=list)

    turn_count: int = Field(default=0, ge=0)
    time_elapsed_seconds: int = Field(default=0, ge=0)
    progress_score: int = Field(default=50, ge=0, le=100)
    consecutive_poor_count: int = Field(default=0, ge=0)
    last_direction: Optional[Literal["up", "down"]] = None

    phase: Phase = "not_started"
    started_at: datetime = Field(default_factory=utcnow)
    exit_reason: Optional[ExitReason] = None

    model_config = {"validate_assignment": True}

    @property
    def is_live(self) -> bool:
        return self.phase in LIVE_PHASES

    @property
    def is_terminal(self) -> bool:
        return self.phase in TERMINAL_PHASES

    def add_interviewer_turn(self, text: str, at: Optional[datetime] = None) -> None:
        """Record a prompt the candidate is expected to answer."""

        self.transcript.append(TranscriptEntry(speaker="interviewer", text=text, timestamp=at or utcnow()))
        self.conversation_history.append(HistoryMessage(role="assistant", content=text))
        self.turn_count += 1

    def add_interviewer_note(self, text: str, at: Optional[datetime] = None) -> None:
        # Closing lines are shown to the candidate but never forwarded as context.
        self.transcript.append(TranscriptEntry(speaker="interviewer", text=text, timestamp=at or utcnow()))

    def add_candidate_reply(self, text: str, at: Optional[datetime] = None) -> None:
        self.transcript.append(TranscriptEntry(speaker="candidate", text=text, timestamp=at or utcnow()))
        self.conversation_history.append(HistoryMessage(role="user", content=text))

    def interviewer_prompts(self) -> List[str]:
        return [msg.content for msg in self.conversation_history if msg.role == "assistant"]
