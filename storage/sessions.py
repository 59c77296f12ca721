"""SQLite-backed session snapshots and paste-warning counters."""
from __future__ import annotations

import datetime as dt
import json
from typing import Optional

from pydantic import ValidationError

from observability.logger import log_event
from session.state import InterviewSession

from .sqlite import get_conn


def _now() -> str:
    return dt.datetime.now(dt.timezone.utc).isoformat()


class SqliteSessionStore:
    """Server-side drop-in for the local snapshot store: one row per owner."""

    def save(self, session: InterviewSession) -> None:
        with get_conn() as conn:
            conn.execute(
                """
                INSERT INTO session_snapshots (owner_id, payload, saved_at) VALUES (?, ?, ?)
                ON CONFLICT(owner_id) DO UPDATE SET payload = excluded.payload, saved_at = excluded.saved_at
                """,
                (session.session_owner_id, session.model_dump_json(), _now()),
            )

    def load(self, owner_id: str) -> Optional[InterviewSession]:
        with get_conn() as conn:
            row = conn.execute(
                "SELECT payload FROM session_snapshots WHERE owner_id = ?", (owner_id,)
            ).fetchone()
        if row is None:
            return None
        try:
            return InterviewSession.model_validate_json(row["payload"])
        except (json.JSONDecodeError, ValidationError) as exc:
            log_event("session.snapshot_corrupt", owner_id, error=type(exc).__name__)
            self.clear(owner_id)
            return None

    def clear(self, owner_id: str) -> None:
        with get_conn() as conn:
            conn.execute("DELETE FROM session_snapshots WHERE owner_id = ?", (owner_id,))


class SqliteWarningCounter:
    """Paste warnings keyed only by owner; never expire and survive session resets."""

    def get(self, owner_id: str) -> int:
        with get_conn() as conn:
            row = conn.execute(
                "SELECT warning_count FROM paste_warnings WHERE owner_id = ?", (owner_id,)
            ).fetchone()
        return int(row["warning_count"]) if row else 0

    def increment(self, owner_id: str) -> int:
        with get_conn() as conn:
            conn.execute(
                """
                INSERT INTO paste_warnings (owner_id, warning_count, updated_at) VALUES (?, 1, ?)
                ON CONFLICT(owner_id) DO UPDATE SET
                  warning_count = paste_warnings.warning_count + 1,
                  updated_at = excluded.updated_at
                """,
                (owner_id, _now()),
            )
            row = conn.execute(
                "SELECT warning_count FROM paste_warnings WHERE owner_id = ?", (owner_id,)
            ).fetchone()
        return int(row["warning_count"])


__all__ = ["SqliteSessionStore", "SqliteWarningCounter"]
