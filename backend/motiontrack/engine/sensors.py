"""Motion input ports."""
from __future__ import annotations

import threading
from typing import Callable, Optional, Protocol

from motiontrack.engine.samples import AccelerationSample

# returns True when the sample produced a step
SampleCallback = Callable[[AccelerationSample], Optional[bool]]


class SensorUnavailable(Exception):
    """No motion signal on this host; the tracker falls back to simulation."""


class MotionSensor(Protocol):
    def attach(self, callback: SampleCallback) -> None:
        """Start delivering samples. May raise SensorUnavailable."""
        ...

    def detach(self) -> None: ...


class PushSensor:
    """In-process sensor: whoever owns the raw feed calls push().

    Samples pushed while nothing is attached are dropped.
    """

    def __init__(self):
        self._callback: Optional[SampleCallback] = None
        self._lock = threading.Lock()

    @property
    def attached(self) -> bool:
        return self._callback is not None

    def attach(self, callback: SampleCallback) -> None:
        with self._lock:
            self._callback = callback

    def detach(self) -> None:
        with self._lock:
            self._callback = None

    def push(self, sample: AccelerationSample) -> Optional[bool]:
        """Deliver one sample. None if dropped, else whether it was a step."""
        with self._lock:
            callback = self._callback
        if callback is None:
            return None
        return bool(callback(sample))


class UnavailableSensor:
    """Stand-in for platforms with no motion hardware."""

    def __init__(self, reason: str = "no motion sensor on this device"):
        self.reason = reason

    def attach(self, callback: SampleCallback) -> None:
        raise SensorUnavailable(self.reason)

    def detach(self) -> None:
        pass
