from dataclasses import dataclass, fields

from pydantic_settings import BaseSettings
from pydantic import field_validator

from motiontrack.core import constants


class Settings(BaseSettings):
    database_url: str = "sqlite+pysqlite:///./motiontrack.db"
    # Timezone for grouping archived sessions by day.
    # Examples: "America/New_York", "Europe/London", or "local" to use system tz.
    timezone: str = "local"

    # Logging
    log_level: str = "INFO"
    log_format: str = "console"  # console | json

    # Step detection
    step_threshold: float = constants.STEP_THRESHOLD
    min_step_interval_ms: int = constants.MIN_STEP_INTERVAL_MS

    # Session metrics
    daily_goal: int = constants.DAILY_GOAL_STEPS
    milestone_interval: int = constants.MILESTONE_INTERVAL
    distance_per_step_m: float = constants.DISTANCE_PER_STEP_M
    simulated_distance_per_step_m: float = constants.SIMULATED_DISTANCE_PER_STEP_M
    calories_per_step: float = constants.CALORIES_PER_STEP
    heart_rate_floor_sensor: int = constants.HEART_RATE_FLOOR_SENSOR
    heart_rate_floor_simulated: int = constants.HEART_RATE_FLOOR_SIMULATED
    heart_rate_span: int = constants.HEART_RATE_SPAN

    # Simulation / clock
    simulation_step_probability: float = constants.SIMULATION_STEP_PROBABILITY
    tick_seconds: float = constants.TICK_SECONDS
    random_seed: int | None = None
    # False on hosts with no motion hardware: sessions start on the simulation source
    sensor_available: bool = True

    # How many announcement events the HTTP feed keeps around
    event_buffer_size: int = 50

    # Allow empty env strings for optional fields
    @field_validator("random_seed", mode="before")
    @classmethod
    def _empty_to_none(cls, v):
        if v in ("", None, "null", "None"):
            return None
        return v

    @field_validator("daily_goal", "milestone_interval", "heart_rate_span")
    @classmethod
    def _positive(cls, v):
        if v <= 0:
            raise ValueError("must be > 0")
        return v

    @field_validator("simulation_step_probability")
    @classmethod
    def _probability(cls, v):
        if not 0.0 <= v <= 1.0:
            raise ValueError("must be within [0, 1]")
        return v

    class Config:
        env_file = ".env"


settings = Settings()


@dataclass(frozen=True)
class EngineConfig:
    """The subset of settings the tracking engine consumes."""

    daily_goal: int = constants.DAILY_GOAL_STEPS
    step_threshold: float = constants.STEP_THRESHOLD
    min_step_interval_ms: float = constants.MIN_STEP_INTERVAL_MS
    milestone_interval: int = constants.MILESTONE_INTERVAL
    distance_per_step_m: float = constants.DISTANCE_PER_STEP_M
    simulated_distance_per_step_m: float = constants.SIMULATED_DISTANCE_PER_STEP_M
    calories_per_step: float = constants.CALORIES_PER_STEP
    heart_rate_floor_sensor: int = constants.HEART_RATE_FLOOR_SENSOR
    heart_rate_floor_simulated: int = constants.HEART_RATE_FLOOR_SIMULATED
    heart_rate_span: int = constants.HEART_RATE_SPAN
    simulation_step_probability: float = constants.SIMULATION_STEP_PROBABILITY
    tick_seconds: float = constants.TICK_SECONDS
    random_seed: int | None = None

    @classmethod
    def from_settings(cls, s: Settings) -> "EngineConfig":
        return cls(**{f.name: getattr(s, f.name) for f in fields(cls)})
