"""Lightweight CLI helpers for inspecting interview outcome tables."""
from __future__ import annotations

import argparse
from typing import List

from storage.sqlite import get_conn


def _fetch(query: str, limit: int) -> List[tuple]:
    with get_conn() as conn:
        return [tuple(row) for row in conn.execute(query, (limit,)).fetchall()]


def format_flag(row: tuple) -> str:
    ts, candidate_id, action, warnings, reasons, length, lines = row
    return f"[{ts}] {candidate_id} -> {action} warnings={warnings} reasons={reasons} len={length} lines={lines}"


def format_interview(row: tuple) -> str:
    ts, candidate_id, track_id, exit_reason, progress, score, recommendation, duration = row
    return (
        f"[{ts}] {candidate_id} track={track_id} exit={exit_reason} progress={progress} "
        f"score={score} rec={recommendation} duration={duration}s"
    )


def tail_flags(limit: int = 20) -> List[str]:
    rows = _fetch(
        """
        SELECT timestamp, candidate_id, action, warning_count, reason_codes, text_length, line_count
        FROM integrity_flags
        ORDER BY id DESC
        LIMIT ?
        """,
        limit,
    )
    lines = [format_flag(row) for row in rows]
    for line in lines:
        print(line)
    return lines


def tail_interviews(limit: int = 20) -> List[str]:
    rows = _fetch(
        """
        SELECT completed_at, candidate_id, track_id, exit_reason, progress_score, score, recommendation, duration_seconds
        FROM interviews
        ORDER BY id DESC
        LIMIT ?
        """,
        limit,
    )
    lines = [format_interview(row) for row in rows]
    for line in lines:
        print(line)
    return lines


def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--tail-flags", type=int, help="Show the latest integrity flags")
    parser.add_argument("--tail-interviews", type=int, help="Show the latest finished interviews")
    args = parser.parse_args()

    if args.tail_flags:
        tail_flags(args.tail_flags)
    if args.tail_interviews:
        tail_interviews(args.tail_interviews)


if __name__ == "__main__":
    main()
