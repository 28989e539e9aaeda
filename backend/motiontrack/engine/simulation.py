from __future__ import annotations

import random

from motiontrack.core.constants import SIMULATION_STEP_PROBABILITY


class SimulationSource:
    """Fallback step generator for hosts without a motion sensor.

    Each clock tick yields at most one step, with fixed probability. Seed
    the injected generator to get a reproducible sequence.
    """

    def __init__(
        self,
        probability: float = SIMULATION_STEP_PROBABILITY,
        rng: random.Random | None = None,
    ):
        self.probability = probability
        self.rng = rng or random.Random()

    def on_tick(self) -> bool:
        return self.rng.random() < self.probability
