"""Session counters: steps, distance, calories, time and heart rate."""
from __future__ import annotations

import random
from dataclasses import replace

from motiontrack.core.constants import (
    CALORIES_PER_STEP,
    DAILY_GOAL_STEPS,
    DISTANCE_PER_STEP_M,
    HEART_RATE_FLOOR_SENSOR,
    HEART_RATE_SPAN,
)
from motiontrack.engine.metrics import (
    InputSource,
    MetricsSnapshot,
    SessionMetrics,
    SessionState,
)


class MetricsAccumulator:
    """Sole owner of a session's SessionMetrics.

    Callers submit step events and clock ticks; nobody else mutates the
    counters. Not thread-safe on its own, the tracker serializes access.
    """

    def __init__(
        self,
        daily_goal: int = DAILY_GOAL_STEPS,
        calories_per_step: float = CALORIES_PER_STEP,
        heart_rate_span: int = HEART_RATE_SPAN,
        rng: random.Random | None = None,
    ):
        self.daily_goal = daily_goal
        self.calories_per_step = calories_per_step
        self.heart_rate_span = heart_rate_span
        self.rng = rng or random.Random()
        self._metrics = SessionMetrics()

    @property
    def steps(self) -> int:
        return self._metrics.steps

    def on_step_event(self, distance_per_step_m: float = DISTANCE_PER_STEP_M) -> bool:
        """Apply one footfall. Returns True if the step counter moved.

        Steps stop at the daily goal; distance, calories and active time keep
        accumulating past it.
        """
        m = self._metrics
        counted = m.steps < self.daily_goal
        if counted:
            m.steps += 1
        m.distance_m += distance_per_step_m
        m.calories += self.calories_per_step
        m.active_seconds += 1
        return counted

    def on_clock_tick(self, heart_rate_floor: int = HEART_RATE_FLOOR_SENSOR) -> None:
        m = self._metrics
        m.elapsed_seconds += 1
        m.heart_rate_bpm = heart_rate_floor + self.rng.randrange(self.heart_rate_span)

    def reset(self) -> None:
        # one assignment, so readers never see a half-zeroed session
        self._metrics = SessionMetrics()

    def snapshot(
        self,
        state: SessionState = SessionState.idle,
        source: InputSource = InputSource.sensor,
    ) -> MetricsSnapshot:
        m = replace(self._metrics)
        return MetricsSnapshot(
            steps=m.steps,
            distance_m=m.distance_m,
            calories=m.calories,
            active_seconds=m.active_seconds,
            elapsed_seconds=m.elapsed_seconds,
            heart_rate_bpm=m.heart_rate_bpm,
            daily_goal=self.daily_goal,
            state=state,
            source=source,
        )
