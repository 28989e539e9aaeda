from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from motiontrack.core.time_utils import format_pace_kmh, seconds_to_hhmmss
from motiontrack.engine.events import TrackerEvent
from motiontrack.engine.metrics import InputSource, MetricsSnapshot, SessionState


class SampleIn(BaseModel):
    """One accelerometer reading. A null axis means the sensor could not read it."""

    x: Optional[float] = None
    y: Optional[float] = None
    z: Optional[float] = None
    # Defaults to arrival time when the client does not stamp samples
    timestamp_ms: Optional[float] = None


class SampleBatch(BaseModel):
    samples: list[SampleIn] = Field(default_factory=list)


class MetricsRead(BaseModel):
    """Schema returned to the frontend when reading the live session."""

    state: SessionState
    source: InputSource
    steps: int
    daily_goal: int
    percent_of_goal: float
    distance_m: float
    calories: float
    active_seconds: int
    elapsed_seconds: int
    elapsed: str  # "HH:MM:SS"
    heart_rate_bpm: int
    pace_kmh: float
    pace: str  # e.g. "4.8 km/h"

    @classmethod
    def from_snapshot(cls, snap: MetricsSnapshot) -> "MetricsRead":
        return cls(
            state=snap.state,
            source=snap.source,
            steps=snap.steps,
            daily_goal=snap.daily_goal,
            percent_of_goal=round(snap.percent_of_goal, 1),
            distance_m=round(snap.distance_m, 2),
            calories=round(snap.calories, 2),
            active_seconds=snap.active_seconds,
            elapsed_seconds=snap.elapsed_seconds,
            elapsed=seconds_to_hhmmss(snap.elapsed_seconds),
            heart_rate_bpm=snap.heart_rate_bpm,
            pace_kmh=round(snap.pace_kmh, 2),
            pace=format_pace_kmh(snap.pace_kmh),
        )


class CommandResult(BaseModel):
    changed: bool
    metrics: MetricsRead


class SampleResult(BaseModel):
    accepted: int
    dropped: int
    steps_detected: int
    metrics: MetricsRead


class EventRead(BaseModel):
    seq: int
    kind: str
    title: str
    text: str
    metrics: MetricsRead

    @classmethod
    def from_event(cls, event: TrackerEvent) -> "EventRead":
        return cls(
            seq=event.seq,
            kind=event.kind.value,
            title=event.title,
            text=event.text,
            metrics=MetricsRead.from_snapshot(event.metrics),
        )


class SessionRecordRead(BaseModel):
    id: int
    day: date
    started_at: Optional[datetime] = None
    ended_at: datetime
    steps: int
    daily_goal: int
    distance_m: float
    calories: float
    active_seconds: int
    elapsed_seconds: int
    source: str

    model_config = ConfigDict(from_attributes=True)


class DailyTotal(BaseModel):
    day: date
    steps: int
    distance_m: float
    calories: float
    sessions: int
