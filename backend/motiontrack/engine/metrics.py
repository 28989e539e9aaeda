from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class SessionState(str, Enum):
    idle = "idle"
    tracking = "tracking"
    paused = "paused"


class InputSource(str, Enum):
    sensor = "sensor"
    simulated = "simulated"


@dataclass
class SessionMetrics:
    """Mutable counters of one session. Owned by the MetricsAccumulator."""

    steps: int = 0
    distance_m: float = 0.0
    calories: float = 0.0
    active_seconds: int = 0
    elapsed_seconds: int = 0
    heart_rate_bpm: int = 0


def percent_of_goal(steps: int, daily_goal: int) -> float:
    if daily_goal <= 0:
        return 0.0
    return steps / daily_goal * 100.0


def pace_kmh(distance_m: float, active_seconds: int) -> float:
    """Average speed over active time; 0.0 before the first step."""
    if active_seconds <= 0:
        return 0.0
    return (distance_m / 1000.0) / (active_seconds / 3600.0)


@dataclass(frozen=True)
class MetricsSnapshot:
    """Read-only view of a session handed to collaborators."""

    steps: int
    distance_m: float
    calories: float
    active_seconds: int
    elapsed_seconds: int
    heart_rate_bpm: int
    daily_goal: int
    state: SessionState = SessionState.idle
    source: InputSource = InputSource.sensor

    @property
    def percent_of_goal(self) -> float:
        return percent_of_goal(self.steps, self.daily_goal)

    @property
    def pace_kmh(self) -> float:
        return pace_kmh(self.distance_m, self.active_seconds)

    @property
    def is_empty(self) -> bool:
        return (
            self.steps == 0
            and self.active_seconds == 0
            and self.elapsed_seconds == 0
        )
