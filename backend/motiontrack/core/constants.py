"""Shared engine constants.

Centralizes the tuning values used by step detection and the metrics
accumulator so we can document and adjust them in one place.
"""

# Jerk magnitude (m/s² per sample) a reading must exceed to count as a footfall
STEP_THRESHOLD = 10.0

# Refractory period after a detected step (ms)
MIN_STEP_INTERVAL_MS = 250

# Default daily step goal
DAILY_GOAL_STEPS = 10000

# Announce progress every N steps
MILESTONE_INTERVAL = 1000

# Distance credited per step (m). The sensor page and the simulated page
# disagree, so both are kept: ~0.8 m stride vs 2 m per simulated step.
DISTANCE_PER_STEP_M = 0.8
SIMULATED_DISTANCE_PER_STEP_M = 2.0

# Energy credited per step (kcal)
CALORIES_PER_STEP = 0.05

# Heart rate is resampled in [floor, floor + span) BPM on every tick
HEART_RATE_FLOOR_SENSOR = 70
HEART_RATE_FLOOR_SIMULATED = 75
HEART_RATE_SPAN = 15

# Chance that the simulation source produces one step per tick
SIMULATION_STEP_PROBABILITY = 0.3

# Session clock period (s)
TICK_SECONDS = 1.0
