"""Background watchdog driving the interview clock."""
from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

from config.settings import settings

logger = logging.getLogger(__name__)


def timed_out(elapsed_seconds: int, max_seconds: Optional[int] = None) -> bool:
    return elapsed_seconds >= (max_seconds or settings.MAX_TIME_SECONDS)


class TimeoutWatchdog:
    """Single daemon thread calling ``on_tick`` once per interval until stopped.

    ``on_tick`` returns ``False`` to stop the loop (session terminated).
    """

    def __init__(self, on_tick: Callable[[], bool], interval: Optional[float] = None, name: str = "interview-watchdog") -> None:
        self.on_tick = on_tick
        self.interval = interval if interval is not None else settings.TICK_SECONDS
        self.name = name
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name=self.name, daemon=True)
        self._thread.start()

    def stop(self) -> None:
        self._stop.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=max(self.interval * 2, 1.0))
        self._thread = None

    def _run(self) -> None:
        while not self._stop.wait(self.interval):
            try:
                keep_going = self.on_tick()
            except Exception:  # noqa: BLE001
                logger.exception("watchdog tick failed")
                keep_going = True
            if not keep_going:
                break


__all__ = ["TimeoutWatchdog", "timed_out"]
