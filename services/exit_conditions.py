"""Exit decisions evaluated after every scored turn."""
from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel

from config.scoring import ExitTables, scoring_tables
from config.settings import settings
from session.state import ExitReason

SUCCESS_CLOSING = (
    "That's wonderful! I can really see your enthusiasm and potential. Let me wrap up my notes - "
    "the team will be excited to review your application!"
)
POOR_CLOSING = "Thanks for chatting with me today! The team will review your application and get back to you soon."
BOTTOM_OUT_CLOSING = "Thanks for your time today! We'll be in touch with next steps."
TIMEOUT_CLOSING = (
    "Time's up! Thanks for the conversation - we've reached the end of our interview time. "
    "The team will review your application soon."
)
WRAPUP_CLOSING = (
    "Thanks for the conversation, {name}. I've got everything I need. "
    "You'll hear back from the team within 24 hours."
)

CLOSINGS = {
    "success_100": SUCCESS_CLOSING,
    "poor_responses": POOR_CLOSING,
    "bottom_out": BOTTOM_OUT_CLOSING,
    "timeout": TIMEOUT_CLOSING,
    "normal_wrapup": WRAPUP_CLOSING,
}


class ExitDecision(BaseModel):
    action: Literal["continue", "wrap_up", "terminate"]
    exit_reason: Optional[ExitReason] = None
    closing_message: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        return self.action == "terminate"


def closing_for(reason: ExitReason, name: str = "") -> str:
    return CLOSINGS[reason].format(name=name or "there")


def _terminate(reason: ExitReason, name: str = "") -> ExitDecision:
    return ExitDecision(action="terminate", exit_reason=reason, closing_message=closing_for(reason, name))


def is_wrapup_signal(utterance: str, tables: Optional[ExitTables] = None) -> bool:
    phrases = (tables or scoring_tables().exit).wrapup_phrases
    lower = (utterance or "").lower()
    return any(phrase in lower for phrase in phrases)


def evaluate_exit(
    progress_score: int,
    consecutive_poor_count: int,
    next_utterance: str,
    *,
    tables: Optional[ExitTables] = None,
    poor_threshold: Optional[int] = None,
) -> ExitDecision:
    """Apply exit rules in priority order: success, poor streak, bottom out, wrap-up."""

    threshold = poor_threshold or settings.CONSECUTIVE_POOR_THRESHOLD
    if progress_score >= 100:
        return _terminate("success_100")
    if consecutive_poor_count >= threshold:
        return _terminate("poor_responses")
    if progress_score <= 0:
        return _terminate("bottom_out")
    if is_wrapup_signal(next_utterance, tables):
        return ExitDecision(action="wrap_up")
    return ExitDecision(action="continue")


def timeout_decision() -> ExitDecision:
    return _terminate("timeout")


def wrapup_decision(name: str = "") -> ExitDecision:
    return _terminate("normal_wrapup", name)


__all__ = [
    "CLOSINGS",
    "ExitDecision",
    "closing_for",
    "evaluate_exit",
    "is_wrapup_signal",
    "timeout_decision",
    "wrapup_decision",
]
