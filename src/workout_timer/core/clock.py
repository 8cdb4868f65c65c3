"""
1 Hz clock collaborator.

Ticker calls a callback at fixed monotonic deadlines on a daemon thread.
Deadlines are computed from the start time, so a slow callback delays one
tick but does not shift every later one.
"""

import logging
import threading
import time
from collections.abc import Callable

from .config import TICK_INTERVAL_SECONDS

logger = logging.getLogger(__name__)


class Ticker:
    """
    Periodic callback driver.

    Usage:
        with Ticker(session.tick):
            ...  # session advances once per second
    """

    def __init__(
        self,
        callback: Callable[[], None],
        interval: float = TICK_INTERVAL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        self._callback = callback
        self._interval = interval
        self._clock = clock
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None
        self.ticks = 0

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running and not self._stop.is_set():
            return
        # One event per thread: a thread left over from a timed-out stop()
        # stays stopped.
        self._stop = threading.Event()
        self._thread = threading.Thread(
            target=self._run, args=(self._stop,), name="workout-ticker", daemon=True
        )
        self._thread.start()

    def stop(self, timeout: float = 2.0) -> None:
        self._stop.set()
        thread = self._thread
        if thread is None or thread is threading.current_thread():
            return
        thread.join(timeout=timeout)
        if thread.is_alive():
            logger.warning("Ticker thread still running %.1fs after stop", timeout)
            return
        self._thread = None

    def __enter__(self) -> "Ticker":
        self.start()
        return self

    def __exit__(self, *exc_info) -> None:
        self.stop()

    def _run(self, stop: threading.Event) -> None:
        started = self._clock()
        count = 0
        while True:
            count += 1
            deadline = started + count * self._interval
            delay = deadline - self._clock()
            if delay > 0 and stop.wait(delay):
                return
            if stop.is_set():
                return
            try:
                self._callback()
            except Exception:
                logger.exception("Tick callback failed")
            self.ticks += 1
