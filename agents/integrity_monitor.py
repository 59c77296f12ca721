"""Integrity monitor gating pasted text before it reaches the turn controller."""
from __future__ import annotations

from typing import List, Optional, Protocol

from agents.types import IntegrityOutcome, PasteVerdict
from config.scoring import IntegrityTables, scoring_tables
from config.settings import settings
from observability.logger import log_event
from session.store import WarningCounter
from storage.flags import insert_integrity_flag

BAN_REASON = "Detected repeated copy-pasting of AI-generated responses during interview."
WARN_MESSAGE = (
    "Pasting answers is not allowed. Please type your response in your own words. "
    "A second paste will end the interview."
)
BAN_MESSAGE = "Your interview has been ended because pasted responses were detected more than once."


class PasteDetector(Protocol):
    def inspect(self, text: str) -> PasteVerdict: ...


def line_count(text: str) -> int:
    return len(text.split("\n")) if text else 0


class HeuristicPasteDetector:
    """Flags long, formally connected or multi-line blocks typical of generated text."""

    def __init__(self, tables: Optional[IntegrityTables] = None) -> None:
        self.tables = tables or scoring_tables().integrity

    def inspect(self, text: str) -> PasteVerdict:
        text = text or ""
        lower = text.lower()
        lines = line_count(text)
        reasons: List[str] = []
        if len(text) > self.tables.max_length:
            reasons.append("too_long")
        if any(phrase in lower for phrase in self.tables.formal_connectives):
            reasons.append("formal_connective")
        if lines >= self.tables.min_lines and len(text) > self.tables.multiline_length:
            reasons.append("multiline_block")
        return PasteVerdict(flagged=bool(reasons), reason_codes=reasons, length=len(text), line_count=lines)


class IntegrityMonitor:
    """Counts flagged pastes per owner and escalates to a ban.

    The counter lives outside the interview session so discarding or
    restarting a session never resets it. Unflagged pastes pass through
    untouched and do not count.
    """

    def __init__(
        self,
        counter: WarningCounter,
        detector: Optional[PasteDetector] = None,
        ban_after: Optional[int] = None,
    ) -> None:
        self.counter = counter
        self.detector = detector or HeuristicPasteDetector()
        self.ban_after = ban_after or settings.PASTE_BAN_THRESHOLD

    def inspect_paste(self, owner_id: str, text: str) -> IntegrityOutcome:
        verdict = self.detector.inspect(text)
        if not verdict.flagged:
            return IntegrityOutcome(action="ALLOW", warning_count=self.counter.get(owner_id), verdict=verdict)

        count = self.counter.increment(owner_id)
        action = "BAN" if count >= self.ban_after else "WARN"
        insert_integrity_flag(
            candidate_id=owner_id,
            action=action,
            warning_count=count,
            reason_codes=list(verdict.reason_codes),
            text_length=verdict.length,
            line_count=verdict.line_count,
            excerpt=text,
        )
        log_event(
            "integrity.paste_blocked",
            owner_id,
            action=action,
            warnings=count,
            reasons=verdict.reason_codes,
        )
        return IntegrityOutcome(
            action=action,
            warning_count=count,
            verdict=verdict,
            message=BAN_MESSAGE if action == "BAN" else WARN_MESSAGE,
        )


__all__ = [
    "BAN_REASON",
    "HeuristicPasteDetector",
    "IntegrityMonitor",
    "PasteDetector",
    "line_count",
]
