from __future__ import annotations  # Durable candidate status records

import datetime as dt
from typing import Literal, Optional, Tuple

from pydantic import BaseModel

from .sqlite import get_conn

CandidateStatus = Literal[
    "registered",
    "interview_pending",
    "interview_done",
    "selected",
    "rejected",
    "offer_downloaded",
    "active",
    "completed",
    "banned",
]

ENTRY_STATUSES: Tuple[str, ...] = ("registered", "interview_pending")
FINISHED_STATUSES: Tuple[str, ...] = (
    "interview_done",
    "selected",
    "rejected",
    "offer_downloaded",
    "active",
    "completed",
)

_COLUMNS = (
    "candidate_id, display_name, email, track_id, status, banned_reason, "
    "ai_summary, ai_score, ai_recommendation, created_at, updated_at"
)


class CandidateRecord(BaseModel):  # Stored candidate entry
    candidate_id: str
    display_name: str
    email: Optional[str] = None
    track_id: str
    status: CandidateStatus
    banned_reason: Optional[str] = None
    ai_summary: Optional[str] = None
    ai_score: Optional[int] = None
    ai_recommendation: Optional[str] = None
    created_at: str
    updated_at: str


def _now() -> str:
    return dt.datetime.now(dt.timezone.utc).isoformat(timespec="seconds")


class CandidateStatusStore:  # Source of truth for interview eligibility
    def get(self, candidate_id: str) -> Optional[CandidateRecord]:
        with get_conn() as conn:
            row = conn.execute(
                f"SELECT {_COLUMNS} FROM candidates WHERE candidate_id = ?",
                (candidate_id,),
            ).fetchone()
        if row is None:
            return None
        return CandidateRecord(**dict(row))

    def create(
        self,
        *,
        candidate_id: str,
        display_name: str,
        track_id: str,
        email: Optional[str] = None,
        status: CandidateStatus = "registered",
    ) -> CandidateRecord:
        now = _now()
        record = CandidateRecord(
            candidate_id=candidate_id,
            display_name=display_name,
            email=email,
            track_id=track_id,
            status=status,
            created_at=now,
            updated_at=now,
        )
        with get_conn() as conn:
            conn.execute(
                """
                INSERT INTO candidates (candidate_id, display_name, email, track_id, status, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    record.candidate_id,
                    record.display_name,
                    record.email,
                    record.track_id,
                    record.status,
                    record.created_at,
                    record.updated_at,
                ),
            )
        return record

    def set_status(self, candidate_id: str, status: CandidateStatus) -> None:
        with get_conn() as conn:
            conn.execute(
                "UPDATE candidates SET status = ?, updated_at = ? WHERE candidate_id = ?",
                (status, _now(), candidate_id),
            )

    def mark_interview_done(
        self,
        candidate_id: str,
        *,
        summary: str,
        score: int,
        recommendation: str,
    ) -> None:
        with get_conn() as conn:
            conn.execute(
                """
                UPDATE candidates
                SET status = 'interview_done', ai_summary = ?, ai_score = ?, ai_recommendation = ?, updated_at = ?
                WHERE candidate_id = ?
                """,
                (summary, score, recommendation, _now(), candidate_id),
            )

    def ban(self, candidate_id: str, reason: str) -> None:
        with get_conn() as conn:
            conn.execute(
                "UPDATE candidates SET status = 'banned', banned_reason = ?, updated_at = ? WHERE candidate_id = ?",
                (reason, _now(), candidate_id),
            )


__all__ = [
    "CandidateRecord",
    "CandidateStatus",
    "CandidateStatusStore",
    "ENTRY_STATUSES",
    "FINISHED_STATUSES",
]
