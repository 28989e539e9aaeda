from __future__ import annotations

from typing import Optional

from motiontrack.core.constants import MILESTONE_INTERVAL


class MilestoneEmitter:
    """Decides when a step count deserves a progress announcement."""

    def __init__(self, interval: int = MILESTONE_INTERVAL):
        self.interval = interval
        self.last_fired: Optional[int] = None

    def check(self, steps: int) -> bool:
        """Call after every applied step. True once per multiple of interval."""
        if steps <= 0 or steps % self.interval != 0:
            return False
        if self.last_fired is not None and steps <= self.last_fired:
            return False
        self.last_fired = steps
        return True

    def reset(self) -> None:
        self.last_fired = None
