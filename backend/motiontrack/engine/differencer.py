"""Frame-to-frame acceleration differencing.

The step signal is the jerk magnitude: the Euclidean norm of the change in
acceleration between two consecutive samples. No gravity removal or
orientation handling happens here; differencing alone cancels the constant
gravity component for a device that is not rotating.
"""
from __future__ import annotations

import math
from typing import Optional

from motiontrack.engine.samples import AccelerationSample


def jerk_magnitude(
    current: AccelerationSample, previous: Optional[AccelerationSample]
) -> float:
    """Norm of ``current - previous``.

    ``previous=None`` stands for the all-zero sample, so the first reading of
    a session returns its own norm. That one large value is expected; the
    detector's refractory period keeps it from cascading.
    """
    cx, cy, cz = current.axes()
    if previous is None:
        px = py = pz = 0.0
    else:
        px, py, pz = previous.axes()
    dx, dy, dz = cx - px, cy - py, cz - pz
    return math.sqrt(dx * dx + dy * dy + dz * dz)
