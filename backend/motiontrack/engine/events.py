"""Transition/milestone events and the announcer ports that consume them."""
from __future__ import annotations

import math
import threading
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

import structlog

from motiontrack.engine.metrics import MetricsSnapshot

logger = structlog.get_logger(__name__)


class EventKind(str, Enum):
    start = "start"
    pause = "pause"
    resume = "resume"
    reset = "reset"
    milestone = "milestone"


@dataclass(frozen=True)
class TrackerEvent:
    kind: EventKind
    title: str
    text: str
    metrics: MetricsSnapshot
    seq: int = 0


def _percent(snapshot: MetricsSnapshot) -> int:
    # halves round up, like the percentages shown on the tracking page
    return int(math.floor(snapshot.percent_of_goal + 0.5))


def build_event(kind: EventKind, snapshot: MetricsSnapshot, seq: int = 0) -> TrackerEvent:
    """Title and spoken text for a transition; a pure function of its inputs."""
    steps = f"{snapshot.steps:,}"
    if kind is EventKind.start:
        title = "Tracking Started"
        text = (
            "Fitness tracking started. Your steps, distance, and calories "
            "are now being tracked."
        )
    elif kind is EventKind.pause:
        title = "Tracking Paused"
        text = (
            f"Tracking paused. You've completed {steps} steps so far, "
            f"which is {_percent(snapshot)}% of your daily goal."
        )
    elif kind is EventKind.resume:
        title = "Tracking Resumed"
        text = f"Tracking resumed. You've completed {steps} steps so far."
    elif kind is EventKind.reset:
        title = "Tracking Reset"
        text = "Tracking has been reset. All stats have been reset to zero."
    else:
        title = f"{steps} Steps Reached!"
        text = (
            f"You've reached {steps} steps, which is "
            f"{_percent(snapshot)}% of your daily goal."
        )
    return TrackerEvent(kind=kind, title=title, text=text, metrics=snapshot, seq=seq)


class Announcer(Protocol):
    """Consumer of tracker events (speech, notifications, archiving...)."""

    def announce(self, event: TrackerEvent) -> None: ...


class LogAnnouncer:
    def announce(self, event: TrackerEvent) -> None:
        logger.info(
            "Announcement",
            kind=event.kind.value,
            text=event.text,
            steps=event.metrics.steps,
        )


class EventFeed:
    """Bounded buffer of recent events, polled by the HTTP layer."""

    def __init__(self, maxlen: int = 50):
        self._events: deque[TrackerEvent] = deque(maxlen=maxlen)
        self._lock = threading.Lock()

    def announce(self, event: TrackerEvent) -> None:
        with self._lock:
            self._events.append(event)

    def since(self, after: int = 0) -> list[TrackerEvent]:
        with self._lock:
            return [e for e in self._events if e.seq > after]
