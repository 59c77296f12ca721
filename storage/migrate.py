"""SQLite schema migrations."""
from __future__ import annotations

import os
import sqlite3
from typing import Iterable

SCHEMA: Iterable[str] = [
    """
CREATE TABLE IF NOT EXISTS candidates (
  candidate_id TEXT PRIMARY KEY,
  display_name TEXT NOT NULL,
  email TEXT,
  track_id TEXT NOT NULL,
  status TEXT NOT NULL,
  banned_reason TEXT,
  ai_summary TEXT,
  ai_score INTEGER,
  ai_recommendation TEXT,
  created_at TEXT NOT NULL,
  updated_at TEXT NOT NULL
);
""",
    """
CREATE TABLE IF NOT EXISTS interviews (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  completed_at TEXT NOT NULL,
  candidate_id TEXT NOT NULL,
  candidate_email TEXT,
  track_id TEXT NOT NULL,
  transcript_json TEXT NOT NULL,
  ai_summary TEXT NOT NULL,
  score INTEGER NOT NULL,
  technical_depth TEXT,
  empathy_score TEXT,
  culture_fit TEXT,
  key_observation TEXT,
  recommendation TEXT,
  evaluation_json TEXT NOT NULL,
  duration_seconds INTEGER NOT NULL,
  progress_score INTEGER NOT NULL,
  exit_reason TEXT NOT NULL
);
""",
    """
CREATE TABLE IF NOT EXISTS integrity_flags (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  timestamp TEXT NOT NULL,
  candidate_id TEXT NOT NULL,
  action TEXT NOT NULL,
  warning_count INTEGER NOT NULL,
  reason_codes TEXT NOT NULL,
  text_length INTEGER NOT NULL,
  line_count INTEGER NOT NULL,
  excerpt TEXT NOT NULL
);
""",
    """
CREATE TABLE IF NOT EXISTS session_snapshots (
  owner_id TEXT PRIMARY KEY,
  payload TEXT NOT NULL,
  saved_at TEXT NOT NULL
);
""",
    """
CREATE TABLE IF NOT EXISTS paste_warnings (
  owner_id TEXT PRIMARY KEY,
  warning_count INTEGER NOT NULL,
  updated_at TEXT NOT NULL
);
""",
]


def migrate(db_path: str = "data/interview.db") -> None:
    """Apply schema migrations to the SQLite database."""

    directory = os.path.dirname(db_path) or "."
    os.makedirs(directory, exist_ok=True)
    conn = sqlite3.connect(db_path)
    try:
        cur = conn.cursor()
        for stmt in SCHEMA:
            cur.execute(stmt)
        conn.commit()
    finally:
        conn.close()


if __name__ == "__main__":
    migrate()
