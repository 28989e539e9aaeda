"""Session clocks.

A clock hands out one ClockHandle per start(); stopping the handle is the
only way to end the ticks and nothing is delivered after stop() returns.
"""
from __future__ import annotations

import threading
from typing import Callable, Protocol

import structlog

from motiontrack.core.constants import TICK_SECONDS

logger = structlog.get_logger(__name__)

TickCallback = Callable[[], None]


class ClockHandle(Protocol):
    def stop(self) -> None: ...


class SessionClock(Protocol):
    def start(self, callback: TickCallback) -> ClockHandle: ...


class _TickerThread(threading.Thread):
    """Background ticker: calls back every period until the stop event is set."""

    def __init__(self, period: float, callback: TickCallback):
        super().__init__(daemon=True, name="session-clock")
        self.period = period
        self.callback = callback
        self.stop_evt = threading.Event()

    def run(self):
        # wait() returns True as soon as stop is requested
        while not self.stop_evt.wait(self.period):
            try:
                self.callback()
            except Exception as exc:
                logger.error(
                    "Clock callback failed",
                    error=str(exc),
                    error_type=type(exc).__name__,
                )

    def stop(self) -> None:
        self.stop_evt.set()
        if threading.current_thread() is not self and self.is_alive():
            self.join()


class ThreadedClock:
    """Wall-clock ticker backed by a daemon thread."""

    def __init__(self, period: float = TICK_SECONDS):
        if period <= 0:
            raise ValueError("period must be > 0")
        self.period = period

    def start(self, callback: TickCallback) -> ClockHandle:
        ticker = _TickerThread(self.period, callback)
        ticker.start()
        return ticker


class _ManualHandle:
    def __init__(self, clock: "ManualClock", callback: TickCallback):
        self._clock = clock
        self.callback = callback
        self.stopped = False

    def stop(self) -> None:
        if self.stopped:
            return
        self.stopped = True
        self._clock.stop_count += 1
        if self._clock.active is self:
            self._clock.active = None


class ManualClock:
    """Clock driven explicitly with tick(); for tests and scripted replays."""

    def __init__(self):
        self.active: _ManualHandle | None = None
        self.start_count = 0
        self.stop_count = 0

    @property
    def running(self) -> bool:
        return self.active is not None

    def start(self, callback: TickCallback) -> ClockHandle:
        if self.active is not None:
            self.active.stop()
        self.active = _ManualHandle(self, callback)
        self.start_count += 1
        return self.active

    def tick(self, count: int = 1) -> None:
        for _ in range(count):
            if self.active is None:
                return
            self.active.callback()
