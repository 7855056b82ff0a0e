"""Cancellable recurring task used for the background expiry sweep."""

import threading
from numbers import Real
from typing import Callable

from .logging_config import get_logger

logger = get_logger(__name__)

# Longest delay a timer accepts (signed 32-bit milliseconds)
MAX_DELAY_MS = 2_147_483_647


def is_schedulable(interval_ms: object) -> bool:
    """Whether an interval can drive a recurring task."""
    return (
        isinstance(interval_ms, Real)
        and not isinstance(interval_ms, bool)
        and 0 < interval_ms < MAX_DELAY_MS
    )


class SweepScheduler:
    """
    Runs a callback every ``interval_ms`` on a daemon thread.

    The handle is owned by whoever created it and must be cancelled
    explicitly. Once ``cancel()`` returns no new run starts; a run already in
    progress finishes first.

    Examples:
        >>> scheduler = SweepScheduler(cache.remove_expired, 60_000, name="users")
        >>> scheduler.start()
        >>> scheduler.cancel()
    """

    def __init__(self, callback: Callable[[], object], interval_ms: float, name: str = "sweep"):
        if not is_schedulable(interval_ms):
            raise ValueError(f"interval_ms must be in (0, {MAX_DELAY_MS}), got {interval_ms!r}")

        self.callback = callback
        self.interval_ms = interval_ms
        self.name = name
        self.runs = 0

        self._stop = threading.Event()
        self._run_lock = threading.RLock()
        self._thread: threading.Thread | None = None

    @property
    def active(self) -> bool:
        """Started and not cancelled."""
        return self._thread is not None and not self._stop.is_set()

    def start(self) -> None:
        """Start the timer thread (no-op if already started)."""
        if self._thread is not None:
            return

        self._thread = threading.Thread(target=self._loop, name=f"nscache-sweep-{self.name}", daemon=True)
        self._thread.start()
        logger.debug("sweep_scheduled", scheduler=self.name, interval_ms=self.interval_ms)

    def cancel(self) -> None:
        """Stop future runs. Safe to call more than once and from the callback itself."""
        with self._run_lock:
            if self._stop.is_set():
                return
            self._stop.set()
        logger.debug("sweep_cancelled", scheduler=self.name, runs=self.runs)

    def _loop(self) -> None:
        interval = float(self.interval_ms) / 1000
        while not self._stop.wait(interval):
            with self._run_lock:
                if self._stop.is_set():
                    break
                self.runs += 1
                try:
                    self.callback()
                except Exception:
                    logger.exception("sweep_failed", scheduler=self.name)


__all__ = ["MAX_DELAY_MS", "SweepScheduler", "is_schedulable"]
