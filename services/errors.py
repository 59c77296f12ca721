"""Exceptions raised by the interview services."""
from __future__ import annotations


class InterviewError(Exception):
    """Base class for interview engine errors."""


class CandidateNotFound(InterviewError):
    pass


class EntryBlocked(InterviewError):
    """Durable status forbids entering the interview (finished or banned)."""

    def __init__(self, owner_id: str, status: str) -> None:
        super().__init__(f"candidate {owner_id} cannot enter interview with status '{status}'")
        self.owner_id = owner_id
        self.status = status


class SessionNotActive(InterviewError):
    pass


class TurnInProgress(InterviewError):
    pass


class CollaboratorError(InterviewError):
    """A question or evaluation collaborator failed; the session is left untouched."""


__all__ = [
    "CandidateNotFound",
    "CollaboratorError",
    "EntryBlocked",
    "InterviewError",
    "SessionNotActive",
    "TurnInProgress",
]
