"""Persistence helpers for integrity flags raised on blocked pastes."""
from __future__ import annotations

import datetime as dt
import json
from typing import Any, List, Literal

from pydantic import BaseModel

from .sqlite import get_conn

EXCERPT_CHARS = 160


class IntegrityFlagPayload(BaseModel):
    candidate_id: str
    action: Literal["WARN", "BAN"]
    warning_count: int
    reason_codes: List[str]
    text_length: int
    line_count: int
    excerpt: str


def insert_integrity_flag(**data: Any) -> int:
    """Insert an integrity flag row and return its primary key."""

    payload = IntegrityFlagPayload(**data)
    timestamp = dt.datetime.now(dt.timezone.utc).isoformat()
    with get_conn() as conn:
        cur = conn.cursor()
        cur.execute(
            """INSERT INTO integrity_flags
               (timestamp, candidate_id, action, warning_count, reason_codes, text_length, line_count, excerpt)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                timestamp,
                payload.candidate_id,
                payload.action,
                payload.warning_count,
                json.dumps(payload.reason_codes),
                payload.text_length,
                payload.line_count,
                payload.excerpt[:EXCERPT_CHARS],
            ),
        )
        return int(cur.lastrowid)
