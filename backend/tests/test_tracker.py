import logging
import random
import threading
import time

from motiontrack.core.config import EngineConfig
from motiontrack.engine.clock import ManualClock, ThreadedClock
from motiontrack.engine.events import EventFeed, EventKind
from motiontrack.engine.metrics import InputSource, SessionState
from motiontrack.engine.samples import AccelerationSample
from motiontrack.engine.sensors import PushSensor, UnavailableSensor
from motiontrack.engine.tracker import ActivityTracker


def make_tracker(sensor="push", daily_goal=10000, clock=None, announcers=(), milestone_interval=1000):
    feed = EventFeed(maxlen=100)
    clock = clock or ManualClock()
    if sensor == "push":
        sensor = PushSensor()
    tracker = ActivityTracker(
        config=EngineConfig(daily_goal=daily_goal, milestone_interval=milestone_interval),
        sensor=sensor,
        clock=clock,
        announcers=[*announcers, feed],
        rng=random.Random(99),
    )
    return tracker, sensor, clock, feed


def push_steps(sensor, count, start_ms=0.0, gap_ms=300.0):
    """Alternate 0 / 15 m/s² on z so every sample is a footfall."""
    for i in range(count):
        z = 15.0 if i % 2 == 0 else 0.0
        sensor.push(AccelerationSample.from_axes(0.0, 0.0, z, start_ms + i * gap_ms))


def kinds(feed):
    return [e.kind for e in feed.since(0)]


def test_starts_idle_and_ignores_samples():
    tracker, sensor, clock, feed = make_tracker()
    assert tracker.state is SessionState.idle
    assert sensor.push(AccelerationSample.from_axes(0, 0, 50, 0)) is None
    assert tracker.snapshot().steps == 0
    assert not clock.running


def test_start_attaches_input_and_clock():
    tracker, sensor, clock, feed = make_tracker()
    assert tracker.start() is True
    assert tracker.state is SessionState.tracking
    assert sensor.attached
    assert clock.running
    clock.tick(3)
    snap = tracker.snapshot()
    assert snap.elapsed_seconds == 3
    assert 70 <= snap.heart_rate_bpm < 85
    assert kinds(feed) == [EventKind.start]
    assert "started" in feed.since(0)[0].text


def test_thousand_steps_then_pause():
    tracker, sensor, clock, feed = make_tracker(daily_goal=10000)
    tracker.start()
    push_steps(sensor, 1000)
    assert tracker.pause() is True

    snap = tracker.snapshot()
    assert snap.steps == 1000
    assert snap.active_seconds == 1000
    assert snap.state is SessionState.paused
    assert kinds(feed) == [EventKind.start, EventKind.milestone, EventKind.pause]

    milestone = feed.since(0)[1]
    assert milestone.metrics.steps == 1000
    assert milestone.title == "1,000 Steps Reached!"
    assert "10%" in milestone.text

    pause = feed.since(0)[-1]
    assert "1,000" in pause.text
    assert "10%" in pause.text
    assert pause.text.startswith("Tracking paused.")


def test_pause_detaches_and_stops_clock():
    tracker, sensor, clock, feed = make_tracker()
    tracker.start()
    clock.tick()
    hr = tracker.snapshot().heart_rate_bpm
    tracker.pause()
    assert not sensor.attached
    assert not clock.running
    clock.tick(5)
    assert sensor.push(AccelerationSample.from_axes(0, 0, 50, 10_000)) is None
    snap = tracker.snapshot()
    assert snap.elapsed_seconds == 1
    assert snap.heart_rate_bpm == hr  # held while paused


def test_pause_is_idempotent():
    tracker, sensor, clock, feed = make_tracker()
    tracker.start()
    assert tracker.pause() is True
    assert tracker.pause() is False
    assert clock.stop_count == 1
    assert kinds(feed) == [EventKind.start, EventKind.pause]


def test_invalid_transitions_are_noops():
    tracker, sensor, clock, feed = make_tracker()
    assert tracker.pause() is False
    assert tracker.resume() is False
    tracker.start()
    assert tracker.start() is False
    assert tracker.resume() is False
    assert clock.start_count == 1
    assert kinds(feed) == [EventKind.start]


def test_resume_keeps_metrics():
    tracker, sensor, clock, feed = make_tracker()
    tracker.start()
    push_steps(sensor, 4)
    tracker.pause()
    assert tracker.resume() is True
    push_steps(sensor, 2, start_ms=10_000)
    assert tracker.snapshot().steps == 6
    assert kinds(feed)[-1] is EventKind.resume
    assert feed.since(0)[-1].text == "Tracking resumed. You've completed 4 steps so far."


def test_toggle_mirrors_start_pause_button():
    tracker, sensor, clock, feed = make_tracker()
    tracker.toggle()
    assert tracker.state is SessionState.tracking
    tracker.toggle()
    assert tracker.state is SessionState.paused
    tracker.toggle()
    assert tracker.state is SessionState.tracking
    assert kinds(feed) == [EventKind.start, EventKind.pause, EventKind.resume]


def test_reset_zeroes_from_any_state():
    for stop_in in ("tracking", "paused", "idle"):
        tracker, sensor, clock, feed = make_tracker()
        if stop_in != "idle":
            tracker.start()
            push_steps(sensor, 10)
            clock.tick(4)
            if stop_in == "paused":
                tracker.pause()

        assert tracker.reset() is True
        snap = tracker.snapshot()
        assert tracker.state is SessionState.idle
        assert (snap.steps, snap.distance_m, snap.calories) == (0, 0.0, 0.0)
        assert (snap.active_seconds, snap.elapsed_seconds, snap.heart_rate_bpm) == (0, 0, 0)
        assert not clock.running
        assert not sensor.attached


def test_reset_event_carries_finished_session():
    tracker, sensor, clock, feed = make_tracker()
    tracker.start()
    push_steps(sensor, 7)
    tracker.reset()
    event = feed.since(0)[-1]
    assert event.kind is EventKind.reset
    assert event.metrics.steps == 7
    assert event.text == "Tracking has been reset. All stats have been reset to zero."


def test_steps_never_exceed_goal():
    tracker, sensor, clock, feed = make_tracker(daily_goal=1000)
    tracker.start()
    seen = []
    for i in range(1500):
        z = 15.0 if i % 2 == 0 else 0.0
        sensor.push(AccelerationSample.from_axes(0.0, 0.0, z, i * 300.0))
        seen.append(tracker.snapshot().steps)
    assert seen == sorted(seen)
    assert max(seen) == 1000
    assert tracker.snapshot().active_seconds == 1500
    assert kinds(feed).count(EventKind.milestone) == 1


def test_milestones_at_1000_and_2000_only():
    tracker, sensor, clock, feed = make_tracker()
    tracker.start()
    push_steps(sensor, 2500)
    milestones = [e.metrics.steps for e in feed.since(0) if e.kind is EventKind.milestone]
    assert milestones == [1000, 2000]


def test_stale_clock_callback_is_ignored():
    tracker, sensor, clock, feed = make_tracker()
    tracker.start()
    stale = clock.active.callback
    tracker.pause()
    tracker.resume()
    stale()
    assert tracker.snapshot().elapsed_seconds == 0


def test_unavailable_sensor_falls_back_to_simulation():
    tracker, sensor, clock, feed = make_tracker(sensor=UnavailableSensor())
    tracker.start()
    assert tracker.source is InputSource.simulated
    assert tracker.state is SessionState.tracking
    clock.tick(100)
    snap = tracker.snapshot()
    assert snap.elapsed_seconds == 100
    assert 10 < snap.steps < 60
    assert 75 <= snap.heart_rate_bpm < 90
    # simulated steps use the simulated stride
    assert abs(snap.distance_m - snap.active_seconds * 2.0) < 1e-6


def test_no_sensor_is_simulated_from_the_start():
    tracker, _, clock, feed = make_tracker(sensor=None)
    assert tracker.source is InputSource.simulated


def test_simulated_sessions_reproducible_with_seed():
    def run():
        tracker = ActivityTracker(
            config=EngineConfig(random_seed=5), sensor=None, clock=ManualClock()
        )
        tracker.start()
        tracker.clock.tick(300)
        return tracker.snapshot()

    assert run() == run()


def test_report_sensor_unavailable_mid_session():
    tracker, sensor, clock, feed = make_tracker()
    tracker.start()
    push_steps(sensor, 3)
    tracker.report_sensor_unavailable()
    assert tracker.source is InputSource.simulated
    assert not sensor.attached
    assert clock.running
    clock.tick(10)
    snap = tracker.snapshot()
    assert snap.elapsed_seconds == 10
    assert snap.steps >= 3
    # second report is a no-op
    tracker.report_sensor_unavailable()
    assert tracker.source is InputSource.simulated


def test_failing_announcer_does_not_break_tracking():
    class Broken:
        def announce(self, event):
            raise RuntimeError("speaker unplugged")

    tracker, sensor, clock, feed = make_tracker(announcers=[Broken()])
    assert tracker.start() is True
    push_steps(sensor, 2)
    assert tracker.pause() is True
    assert tracker.snapshot().steps == 2


def test_threaded_clock_stops_before_pause_returns():
    tracker = ActivityTracker(
        config=EngineConfig(), sensor=PushSensor(), clock=ThreadedClock(0.01), rng=random.Random(1)
    )
    tracker.start()
    deadline = time.monotonic() + 2.0
    while tracker.snapshot().elapsed_seconds < 3 and time.monotonic() < deadline:
        time.sleep(0.01)
    tracker.pause()
    frozen = tracker.snapshot().elapsed_seconds
    assert frozen >= 3
    time.sleep(0.05)
    assert tracker.snapshot().elapsed_seconds == frozen
    tracker.reset()


def test_events_reach_feed_in_seq_order_across_threads():
    entered = threading.Event()
    release = threading.Event()

    class SlowSpeaker:
        def announce(self, event):
            if event.kind is EventKind.milestone:
                entered.set()
                release.wait(2.0)

    tracker, sensor, clock, feed = make_tracker(announcers=[SlowSpeaker()], milestone_interval=2)
    tracker.start()

    walker = threading.Thread(target=push_steps, args=(sensor, 2))
    walker.start()
    assert entered.wait(2.0)
    # the milestone is still being spoken on the walker thread
    assert tracker.pause() is True
    release.set()
    walker.join(2.0)
    assert not walker.is_alive()

    events = feed.since(0)
    assert [e.kind for e in events] == [EventKind.start, EventKind.milestone, EventKind.pause]
    assert [e.seq for e in events] == [1, 2, 3]
    assert [e.kind for e in feed.since(1)] == [EventKind.milestone, EventKind.pause]


def test_announcer_driving_the_tracker_keeps_order():
    class AutoPause:
        def __init__(self):
            self.tracker = None

        def announce(self, event):
            if event.kind is EventKind.milestone:
                self.tracker.pause()

    auto = AutoPause()
    tracker, sensor, clock, feed = make_tracker(announcers=[auto], milestone_interval=2)
    auto.tracker = tracker
    tracker.start()
    push_steps(sensor, 2)
    assert tracker.state is SessionState.paused
    assert kinds(feed) == [EventKind.start, EventKind.milestone, EventKind.pause]


def test_concurrent_toggles_never_both_start():
    for _ in range(20):
        tracker, sensor, clock, feed = make_tracker()
        barrier = threading.Barrier(2)
        results = []

        def press():
            barrier.wait()
            results.append(tracker.toggle())

        threads = [threading.Thread(target=press) for _ in range(2)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(2.0)

        assert results == [True, True]
        assert tracker.state is SessionState.paused
        assert kinds(feed) == [EventKind.start, EventKind.pause]


def test_sensor_fallback_logged_once(caplog):
    from motiontrack.core.logging import setup_logging

    setup_logging()
    caplog.set_level(logging.WARNING, logger="motiontrack.engine.tracker")

    tracker, sensor, clock, feed = make_tracker()
    tracker.start()
    tracker.report_sensor_unavailable("bluetooth dropped")
    push_steps(sensor, 10, start_ms=5_000)
    clock.tick(20)
    tracker.report_sensor_unavailable("bluetooth dropped")
    tracker.pause()
    tracker.resume()
    clock.tick(5)

    warnings = [
        r for r in caplog.records
        if r.levelno == logging.WARNING and "Motion sensor unavailable" in r.getMessage()
    ]
    assert len(warnings) == 1
    assert tracker.source is InputSource.simulated


def test_unavailable_sensor_not_retried_on_resume(caplog):
    from motiontrack.core.logging import setup_logging

    setup_logging()
    caplog.set_level(logging.WARNING, logger="motiontrack.engine.tracker")

    tracker, _, clock, feed = make_tracker(sensor=UnavailableSensor())
    tracker.start()
    tracker.pause()
    tracker.start()
    tracker.reset()
    tracker.start()
    clock.tick(3)

    warnings = [r for r in caplog.records if "Motion sensor unavailable" in r.getMessage()]
    assert len(warnings) == 1
