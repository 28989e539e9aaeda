import time
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from motiontrack.engine.events import EventFeed
from motiontrack.engine.samples import AccelerationSample
from motiontrack.engine.sensors import PushSensor
from motiontrack.engine.tracker import ActivityTracker
from motiontrack.schemas.session import (
    CommandResult,
    EventRead,
    MetricsRead,
    SampleBatch,
    SampleResult,
)

router = APIRouter(prefix="/session", tags=["session"])


def get_tracker(request: Request) -> ActivityTracker:
    return request.app.state.tracker


def get_sensor(request: Request) -> Optional[PushSensor]:
    return request.app.state.sensor


def get_feed(request: Request) -> EventFeed:
    return request.app.state.feed


def _result(tracker: ActivityTracker, changed: bool) -> CommandResult:
    return CommandResult(changed=changed, metrics=MetricsRead.from_snapshot(tracker.snapshot()))


@router.get("", response_model=MetricsRead)
def read_session(tracker: ActivityTracker = Depends(get_tracker)):
    return MetricsRead.from_snapshot(tracker.snapshot())


@router.post("/start", response_model=CommandResult)
def start_session(tracker: ActivityTracker = Depends(get_tracker)):
    return _result(tracker, tracker.start())


@router.post("/pause", response_model=CommandResult)
def pause_session(tracker: ActivityTracker = Depends(get_tracker)):
    return _result(tracker, tracker.pause())


@router.post("/resume", response_model=CommandResult)
def resume_session(tracker: ActivityTracker = Depends(get_tracker)):
    return _result(tracker, tracker.resume())


@router.post("/toggle", response_model=CommandResult)
def toggle_session(tracker: ActivityTracker = Depends(get_tracker)):
    return _result(tracker, tracker.toggle())


@router.post("/reset", response_model=CommandResult)
def reset_session(tracker: ActivityTracker = Depends(get_tracker)):
    return _result(tracker, tracker.reset())


@router.post("/samples", response_model=SampleResult)
def push_samples(
    payload: SampleBatch,
    tracker: ActivityTracker = Depends(get_tracker),
    sensor: Optional[PushSensor] = Depends(get_sensor),
):
    """
    Feed raw accelerometer samples, in arrival order.

    Samples arriving while the session is not tracking (or on a host with no
    sensor) are dropped, not queued.
    """
    accepted = dropped = detected = 0
    for item in payload.samples:
        ts = item.timestamp_ms if item.timestamp_ms is not None else time.monotonic() * 1000.0
        sample = AccelerationSample.from_axes(item.x, item.y, item.z, ts)
        outcome = sensor.push(sample) if sensor is not None else None
        if outcome is None:
            dropped += 1
            continue
        accepted += 1
        if outcome:
            detected += 1

    return SampleResult(
        accepted=accepted,
        dropped=dropped,
        steps_detected=detected,
        metrics=MetricsRead.from_snapshot(tracker.snapshot()),
    )


@router.post("/sensor-unavailable", response_model=MetricsRead)
def sensor_unavailable(tracker: ActivityTracker = Depends(get_tracker)):
    tracker.report_sensor_unavailable("reported by client")
    return MetricsRead.from_snapshot(tracker.snapshot())


@router.get("/events", response_model=list[EventRead])
def list_events(
    after: int = Query(0, ge=0),
    feed: EventFeed = Depends(get_feed),
):
    """Announcements newer than `after` (a previously seen seq), oldest first."""
    return [EventRead.from_event(e) for e in feed.since(after)]
