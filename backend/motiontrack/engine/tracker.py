"""Session state machine tying the tracking pipeline together.

    idle --start--> tracking --pause--> paused --resume--> tracking
    (any) --reset--> idle   (metrics zeroed)

While tracking, the session clock ticks into the accumulator and either the
motion sensor or the simulation source produces steps. Leaving tracking
detaches the input and stops the clock before the call returns. Every
mutation happens under one lock; events queue up in seq order and reach the
announcers after it is released.
"""
from __future__ import annotations

import random
import threading
from collections import deque
from functools import partial
from typing import Iterable, Optional

import structlog

from motiontrack.core.config import EngineConfig
from motiontrack.engine.accumulator import MetricsAccumulator
from motiontrack.engine.clock import ClockHandle, SessionClock, ThreadedClock
from motiontrack.engine.detector import SampleStream, StepDetector
from motiontrack.engine.events import Announcer, EventKind, TrackerEvent, build_event
from motiontrack.engine.metrics import InputSource, MetricsSnapshot, SessionState
from motiontrack.engine.milestones import MilestoneEmitter
from motiontrack.engine.samples import AccelerationSample
from motiontrack.engine.sensors import MotionSensor, SensorUnavailable
from motiontrack.engine.simulation import SimulationSource

logger = structlog.get_logger(__name__)


class ActivityTracker:
    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        sensor: Optional[MotionSensor] = None,
        clock: Optional[SessionClock] = None,
        announcers: Iterable[Announcer] = (),
        rng: Optional[random.Random] = None,
    ):
        """
        sensor=None means the host has no motion signal and the session runs
        on the simulation source. Pass a seeded ``rng`` (or set
        ``config.random_seed``) for reproducible heart rate and simulation.
        """
        self.config = config or EngineConfig()
        cfg = self.config
        self.rng = rng or random.Random(cfg.random_seed)
        self.sensor = sensor
        self.clock = clock or ThreadedClock(cfg.tick_seconds)

        self.accumulator = MetricsAccumulator(
            daily_goal=cfg.daily_goal,
            calories_per_step=cfg.calories_per_step,
            heart_rate_span=cfg.heart_rate_span,
            rng=self.rng,
        )
        self.stream = SampleStream(
            StepDetector(cfg.step_threshold, cfg.min_step_interval_ms)
        )
        self.simulation = SimulationSource(cfg.simulation_step_probability, self.rng)
        self.milestones = MilestoneEmitter(cfg.milestone_interval)

        self._announcers: list[Announcer] = list(announcers)
        self._lock = threading.RLock()
        self._state = SessionState.idle
        self._source = InputSource.sensor if sensor is not None else InputSource.simulated
        self._clock_handle: Optional[ClockHandle] = None
        # bumped on every attach/detach so late callbacks can tell they are stale
        self._generation = 0
        self._seq = 0
        # events queued under _lock, delivered in seq order under _dispatch_lock
        self._pending: deque[TrackerEvent] = deque()
        self._dispatch_lock = threading.Lock()

    # --- read side -------------------------------------------------------

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def source(self) -> InputSource:
        return self._source

    def snapshot(self) -> MetricsSnapshot:
        with self._lock:
            return self.accumulator.snapshot(self._state, self._source)

    # --- commands --------------------------------------------------------

    def start(self) -> bool:
        """Idle -> tracking. From paused this is a resume."""
        with self._lock:
            changed = self._start_locked()
        self._drain()
        return changed

    def resume(self) -> bool:
        with self._lock:
            changed = self._state is SessionState.paused and self._start_locked()
        self._drain()
        return changed

    def pause(self) -> bool:
        with self._lock:
            changed, handle = self._pause_locked()
        self._stop(handle)
        self._drain()
        return changed

    def toggle(self) -> bool:
        """Start/pause button: pause when tracking, otherwise start or resume."""
        handle = None
        with self._lock:
            if self._state is SessionState.tracking:
                changed, handle = self._pause_locked()
            else:
                changed = self._start_locked()
        self._stop(handle)
        self._drain()
        return changed

    def reset(self) -> bool:
        """Back to idle with every counter zeroed, from any state.

        The emitted event carries the snapshot taken just before zeroing.
        """
        with self._lock:
            finished = self.accumulator.snapshot(self._state, self._source)
            handle = None
            if self._state is SessionState.tracking:
                handle = self._leave_tracking(SessionState.idle)
            self._state = SessionState.idle
            self.accumulator.reset()
            self.stream.reset()
            self.milestones.reset()
            self._seq += 1
            self._pending.append(build_event(EventKind.reset, finished, seq=self._seq))
        self._stop(handle)
        logger.info("Session reset", steps=finished.steps, elapsed_seconds=finished.elapsed_seconds)
        self._drain()
        return True

    def report_sensor_unavailable(self, reason: str = "sensor reported unavailable") -> None:
        """Switch to the simulation source for the rest of this tracker's life."""
        with self._lock:
            if self._source is InputSource.simulated:
                return
            if self._state is SessionState.tracking and self.sensor is not None:
                self.sensor.detach()
            # the running clock keeps going; from its next tick it drives the simulation
            self._fall_back(reason)

    # --- internals (lock held) -------------------------------------------

    def _event(self, kind: EventKind) -> None:
        self._seq += 1
        snap = self.accumulator.snapshot(self._state, self._source)
        logger.info("Session transition", kind=kind.value, state=self._state.value, steps=snap.steps)
        self._pending.append(build_event(kind, snap, seq=self._seq))

    def _start_locked(self) -> bool:
        if self._state is SessionState.tracking:
            return False
        kind = EventKind.resume if self._state is SessionState.paused else EventKind.start
        self._enter_tracking()
        self._event(kind)
        return True

    def _pause_locked(self) -> tuple[bool, Optional[ClockHandle]]:
        if self._state is not SessionState.tracking:
            return False, None
        handle = self._leave_tracking(SessionState.paused)
        self._event(EventKind.pause)
        return True, handle

    def _enter_tracking(self) -> None:
        self._state = SessionState.tracking
        self._generation += 1
        if self._source is InputSource.sensor and self.sensor is not None:
            try:
                self.sensor.attach(partial(self._on_sample, self._generation))
            except SensorUnavailable as exc:
                self._fall_back(str(exc))
        self._clock_handle = self.clock.start(partial(self._on_tick, self._generation))

    def _leave_tracking(self, new_state: SessionState) -> Optional[ClockHandle]:
        self._state = new_state
        self._generation += 1
        if self._source is InputSource.sensor and self.sensor is not None:
            self.sensor.detach()
        handle, self._clock_handle = self._clock_handle, None
        return handle

    def _fall_back(self, reason: str) -> None:
        self._source = InputSource.simulated
        logger.warning("Motion sensor unavailable, using simulated steps", reason=reason)

    def _apply_step(self) -> None:
        if self._source is InputSource.simulated:
            distance = self.config.simulated_distance_per_step_m
        else:
            distance = self.config.distance_per_step_m
        self.accumulator.on_step_event(distance)
        if self.milestones.check(self.accumulator.steps):
            self._event(EventKind.milestone)

    # --- callbacks from clock / sensor -----------------------------------

    def _on_tick(self, generation: int) -> None:
        with self._lock:
            if generation != self._generation or self._state is not SessionState.tracking:
                return
            if self._source is InputSource.simulated:
                floor = self.config.heart_rate_floor_simulated
            else:
                floor = self.config.heart_rate_floor_sensor
            self.accumulator.on_clock_tick(floor)
            if self._source is InputSource.simulated and self.simulation.on_tick():
                self._apply_step()
        self._drain()

    def _on_sample(self, generation: int, sample: AccelerationSample) -> bool:
        with self._lock:
            if (
                generation != self._generation
                or self._state is not SessionState.tracking
                or self._source is not InputSource.sensor
            ):
                return False
            stepped = self.stream.feed(sample)
            if stepped:
                self._apply_step()
        self._drain()
        return stepped

    # --- outside the lock ------------------------------------------------

    @staticmethod
    def _stop(handle: Optional[ClockHandle]) -> None:
        if handle is not None:
            handle.stop()

    def _drain(self) -> None:
        """Deliver queued events to every announcer in seq order.

        Only one thread delivers at a time. A caller that finds delivery
        already running leaves its events to that thread; the re-check after
        release picks up anything queued while the holder was finishing.
        """
        while True:
            if not self._dispatch_lock.acquire(blocking=False):
                return
            try:
                while True:
                    with self._lock:
                        if not self._pending:
                            break
                        event = self._pending.popleft()
                    self._announce(event)
            finally:
                self._dispatch_lock.release()
            with self._lock:
                if not self._pending:
                    return

    def _announce(self, event: TrackerEvent) -> None:
        for announcer in self._announcers:
            try:
                announcer.announce(event)
            except Exception as exc:
                logger.error(
                    "Announcer failed",
                    announcer=type(announcer).__name__,
                    kind=event.kind.value,
                    error=str(exc),
                    error_type=type(exc).__name__,
                )
