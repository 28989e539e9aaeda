from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class AccelerationSample:
    """One tri-axial accelerometer reading (m/s²) and its arrival time (ms).

    Axes reported as unavailable come in as ``None`` and read as zero.
    """

    x: Optional[float]
    y: Optional[float]
    z: Optional[float]
    timestamp_ms: float = 0.0

    @classmethod
    def from_axes(cls, x, y, z, timestamp_ms: float) -> "AccelerationSample":
        return cls(x=x, y=y, z=z, timestamp_ms=float(timestamp_ms))

    def axes(self) -> tuple[float, float, float]:
        return (
            float(self.x) if self.x is not None else 0.0,
            float(self.y) if self.y is not None else 0.0,
            float(self.z) if self.z is not None else 0.0,
        )
