from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from motiontrack.api.session import router as session_router
from motiontrack.api.history import router as history_router
from motiontrack.archive import SessionArchiver
from motiontrack.db import Base, engine
from motiontrack.models.session_record import SessionRecord  # noqa: F401  (import ensures table is registered)
from motiontrack.core.config import EngineConfig, Settings, settings
from motiontrack.core.logging import setup_logging
from motiontrack.engine.clock import SessionClock
from motiontrack.engine.events import EventFeed, LogAnnouncer
from motiontrack.engine.sensors import PushSensor, UnavailableSensor
from motiontrack.engine.tracker import ActivityTracker


def build_tracker(s: Settings = settings, clock: SessionClock | None = None):
    """Wire the tracking engine for the service: tracker, push sensor, event feed."""
    sensor = PushSensor() if s.sensor_available else None
    feed = EventFeed(maxlen=s.event_buffer_size)
    tracker = ActivityTracker(
        config=EngineConfig.from_settings(s),
        sensor=sensor if sensor is not None else UnavailableSensor(),
        clock=clock,
        announcers=[LogAnnouncer(), feed, SessionArchiver(tz_name=s.timezone)],
    )
    return tracker, sensor, feed


setup_logging(settings)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    # pausing stops the clock thread; metrics survive until an explicit reset
    app.state.tracker.pause()


app = FastAPI(lifespan=lifespan)

# Allow CORS for local frontend
origins = ["*"]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Create DB tables on startup
Base.metadata.create_all(bind=engine)

app.state.tracker, app.state.sensor, app.state.feed = build_tracker(settings)

app.include_router(session_router)
app.include_router(history_router)


@app.get("/")
def root():
    return {"message": "Motion tracker backend is running"}
