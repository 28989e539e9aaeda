"""Drive the tracking engine offline and print the resulting session.

Examples:
  python scripts/simulate_walk.py --seconds 120 --cadence 1.8
  python scripts/simulate_walk.py --seconds 600 --no-sensor --seed 7
"""
import argparse
import random

from motiontrack.core.config import EngineConfig
from motiontrack.core.logging import setup_logging
from motiontrack.core.time_utils import format_pace_kmh, seconds_to_hhmmss
from motiontrack.engine.clock import ManualClock
from motiontrack.engine.events import EventFeed
from motiontrack.engine.samples import AccelerationSample
from motiontrack.engine.sensors import PushSensor
from motiontrack.engine.tracker import ActivityTracker

G = 9.81


def synthetic_walk(seconds: int, cadence_hz: float, rate_hz: int, rng: random.Random):
    """Yield (t_ms, sample): gravity + noise with a sharp spike on every footfall."""
    period_ms = 1000.0 / cadence_hz
    next_step_ms = period_ms
    for i in range(int(seconds * rate_hz)):
        t_ms = i * 1000.0 / rate_hz
        z = G + rng.gauss(0.0, 0.3)
        if t_ms >= next_step_ms:
            z += 15.0
            next_step_ms += period_ms
        yield t_ms, AccelerationSample.from_axes(rng.gauss(0.0, 0.3), rng.gauss(0.0, 0.3), z, t_ms)


def main(argv=None) -> int:
    ap = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    ap.add_argument("--seconds", type=int, default=60, help="session length")
    ap.add_argument("--cadence", type=float, default=1.8, help="footfalls per second")
    ap.add_argument("--rate", type=int, default=50, help="sample rate (Hz)")
    ap.add_argument("--goal", type=int, default=10000, help="daily step goal")
    ap.add_argument("--seed", type=int, default=None)
    ap.add_argument("--no-sensor", action="store_true", help="use the simulation source")
    args = ap.parse_args(argv)

    setup_logging()
    rng = random.Random(args.seed)
    clock = ManualClock()
    feed = EventFeed(maxlen=1000)
    sensor = None if args.no_sensor else PushSensor()
    tracker = ActivityTracker(
        config=EngineConfig(daily_goal=args.goal, random_seed=args.seed),
        sensor=sensor,
        clock=clock,
        announcers=[feed],
    )

    tracker.start()
    if sensor is None:
        clock.tick(args.seconds)
    else:
        next_tick_ms = 1000.0
        for t_ms, sample in synthetic_walk(args.seconds, args.cadence, args.rate, rng):
            while t_ms >= next_tick_ms:
                clock.tick()
                next_tick_ms += 1000.0
            sensor.push(sample)
    tracker.pause()

    snap = tracker.snapshot()
    print(f"source:    {snap.source.value}")
    print(f"steps:     {snap.steps:,} ({snap.percent_of_goal:.1f}% of goal)")
    print(f"distance:  {snap.distance_m / 1000.0:.2f} km")
    print(f"calories:  {snap.calories:.0f}")
    print(f"elapsed:   {seconds_to_hhmmss(snap.elapsed_seconds)}")
    print(f"pace:      {format_pace_kmh(snap.pace_kmh)}")
    print(f"heart:     {snap.heart_rate_bpm} bpm")
    for event in feed.since(0):
        print(f"[{event.kind.value}] {event.text}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
