"""Local snapshot persistence for interview sessions and paste warnings."""
from __future__ import annotations

import json
import os
import re
import threading
from typing import Dict, Optional, Protocol

from pydantic import ValidationError

from observability.logger import log_event

from .state import InterviewSession


class SessionStore(Protocol):
    """Owner-keyed snapshot storage; ``save`` overwrites any prior snapshot."""

    def save(self, session: InterviewSession) -> None: ...

    def load(self, owner_id: str) -> Optional[InterviewSession]: ...

    def clear(self, owner_id: str) -> None: ...


class WarningCounter(Protocol):
    """Per-owner paste-warning count, independent of any session."""

    def get(self, owner_id: str) -> int: ...

    def increment(self, owner_id: str) -> int: ...


_SAFE_KEY = re.compile(r"[^A-Za-z0-9_.-]")


def _key(owner_id: str) -> str:
    return _SAFE_KEY.sub("_", owner_id)


def _atomic_write(path: str, payload: dict) -> None:
    tmp_path = path + ".tmp"
    with open(tmp_path, "w", encoding="utf-8") as handle:
        json.dump(payload, handle, ensure_ascii=False)
        handle.flush()
        os.fsync(handle.fileno())
    os.replace(tmp_path, path)


class FileSessionStore:
    """One JSON snapshot per owner under ``base_dir``, written atomically."""

    def __init__(self, base_dir: str) -> None:
        self.base_dir = base_dir

    def _path(self, owner_id: str) -> str:
        return os.path.join(self.base_dir, f"{_key(owner_id)}.session.json")

    def save(self, session: InterviewSession) -> None:
        os.makedirs(self.base_dir, exist_ok=True)
        _atomic_write(self._path(session.session_owner_id), session.model_dump(mode="json"))

    def load(self, owner_id: str) -> Optional[InterviewSession]:
        path = self._path(owner_id)
        if not os.path.exists(path):
            return None
        try:
            with open(path, "r", encoding="utf-8") as handle:
                return InterviewSession.model_validate(json.load(handle))
        except (json.JSONDecodeError, ValidationError) as exc:
            log_event("session.snapshot_corrupt", owner_id, error=type(exc).__name__)
            self.clear(owner_id)
            return None

    def clear(self, owner_id: str) -> None:
        try:
            os.remove(self._path(owner_id))
        except FileNotFoundError:
            pass


class FileWarningCounter:
    """Paste-warning counts kept in a single JSON document keyed by owner."""

    def __init__(self, path: str) -> None:
        self.path = path
        self._lock = threading.Lock()

    def _read(self) -> Dict[str, int]:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as handle:
                data = json.load(handle)
        except json.JSONDecodeError:
            log_event("integrity.counter_corrupt", "*", path=self.path)
            return {}
        return {str(key): int(value) for key, value in data.items()}

    def get(self, owner_id: str) -> int:
        with self._lock:
            return self._read().get(owner_id, 0)

    def increment(self, owner_id: str) -> int:
        with self._lock:
            counts = self._read()
            counts[owner_id] = counts.get(owner_id, 0) + 1
            directory = os.path.dirname(self.path) or "."
            os.makedirs(directory, exist_ok=True)
            _atomic_write(self.path, counts)
            return counts[owner_id]


__all__ = ["FileSessionStore", "FileWarningCounter", "SessionStore", "WarningCounter"]
