"""Persistence helpers for finished interview results."""
from __future__ import annotations

import datetime as dt
import json
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from .sqlite import get_conn


class InterviewResultPayload(BaseModel):
    candidate_id: str
    candidate_email: Optional[str] = None
    track_id: str
    transcript: List[Dict[str, Any]]
    ai_summary: str
    score: int
    technical_depth: str = ""
    empathy_score: str = ""
    culture_fit: str = ""
    key_observation: str = ""
    recommendation: str = ""
    evaluation: Dict[str, Any] = Field(default_factory=dict)
    duration_seconds: int
    progress_score: int
    exit_reason: str


def insert_interview_result(**data: Any) -> int:
    """Insert a completed interview row and return its primary key."""

    payload = InterviewResultPayload(**data)
    completed_at = dt.datetime.now(dt.timezone.utc).isoformat()
    with get_conn() as conn:
        cur = conn.cursor()
        cur.execute(
            """INSERT INTO interviews
               (completed_at, candidate_id, candidate_email, track_id, transcript_json, ai_summary, score,
                technical_depth, empathy_score, culture_fit, key_observation, recommendation,
                evaluation_json, duration_seconds, progress_score, exit_reason)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                completed_at,
                payload.candidate_id,
                payload.candidate_email,
                payload.track_id,
                json.dumps(payload.transcript, ensure_ascii=False),
                payload.ai_summary,
                payload.score,
                payload.technical_depth,
                payload.empathy_score,
                payload.culture_fit,
                payload.key_observation,
                payload.recommendation,
                json.dumps(payload.evaluation, ensure_ascii=False),
                payload.duration_seconds,
                payload.progress_score,
                payload.exit_reason,
            ),
        )
        return int(cur.lastrowid)


def latest_result(candidate_id: str) -> Optional[Dict[str, Any]]:
    """Return the most recent interview row for a candidate, decoded."""

    with get_conn() as conn:
        row = conn.execute(
            "SELECT * FROM interviews WHERE candidate_id = ? ORDER BY id DESC LIMIT 1",
            (candidate_id,),
        ).fetchone()
    if row is None:
        return None
    result = dict(row)
    result["transcript"] = json.loads(result.pop("transcript_json"))
    result["evaluation"] = json.loads(result.pop("evaluation_json"))
    return result


def count_results(candidate_id: str) -> int:
    with get_conn() as conn:
        row = conn.execute("SELECT COUNT(*) FROM interviews WHERE candidate_id = ?", (candidate_id,)).fetchone()
    return int(row[0])
