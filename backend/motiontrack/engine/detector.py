"""Threshold + refractory-period step detection."""
from __future__ import annotations

from typing import Optional

from motiontrack.core.constants import MIN_STEP_INTERVAL_MS, STEP_THRESHOLD
from motiontrack.engine.differencer import jerk_magnitude
from motiontrack.engine.samples import AccelerationSample


class StepDetector:
    """Emit a step when the jerk magnitude clears the threshold and the
    previous step is older than the refractory period.
    """

    def __init__(
        self,
        threshold: float = STEP_THRESHOLD,
        min_interval_ms: float = MIN_STEP_INTERVAL_MS,
    ):
        self.threshold = threshold
        self.min_interval_ms = min_interval_ms
        self.last_step_ms: Optional[float] = None

    def process(self, magnitude: float, timestamp_ms: float) -> bool:
        if magnitude <= self.threshold:
            return False
        if (
            self.last_step_ms is not None
            and timestamp_ms - self.last_step_ms <= self.min_interval_ms
        ):
            return False
        self.last_step_ms = timestamp_ms
        return True

    def reset(self) -> None:
        self.last_step_ms = None


class SampleStream:
    """Raw samples -> step decisions.

    Holds the one previous sample the differencer needs, so the differencer
    itself stays a pure function.
    """

    def __init__(self, detector: StepDetector):
        self.detector = detector
        self.previous: Optional[AccelerationSample] = None

    def feed(self, sample: AccelerationSample) -> bool:
        magnitude = jerk_magnitude(sample, self.previous)
        self.previous = sample
        return self.detector.process(magnitude, sample.timestamp_ms)

    def reset(self) -> None:
        self.previous = None
        self.detector.reset()
