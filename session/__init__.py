"""Interview session state and local snapshot persistence."""
from .state import ExitReason, HistoryMessage, InterviewSession, Phase, TranscriptEntry
from .store import FileSessionStore, FileWarningCounter, SessionStore, WarningCounter

__all__ = [
    "ExitReason",
    "HistoryMessage",
    "InterviewSession",
    "Phase",
    "TranscriptEntry",
    "FileSessionStore",
    "FileWarningCounter",
    "SessionStore",
    "WarningCounter",
]
