"""Persist finished sessions when the tracker is reset."""
from datetime import datetime, timezone
from typing import Callable, Optional

import structlog
from sqlalchemy.orm import Session

from motiontrack.core.config import settings
from motiontrack.core.time_utils import to_local_datetime
from motiontrack.db import SessionLocal
from motiontrack.engine.events import EventKind, TrackerEvent
from motiontrack.models.session_record import SessionRecord

logger = structlog.get_logger(__name__)


class SessionArchiver:
    """Announcer that writes a SessionRecord for every non-empty reset."""

    def __init__(
        self,
        session_factory: Callable[[], Session] = SessionLocal,
        tz_name: Optional[str] = None,
        now: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self.session_factory = session_factory
        self.tz_name = tz_name if tz_name is not None else settings.timezone
        self.now = now
        self.started_at: Optional[datetime] = None

    def announce(self, event: TrackerEvent) -> None:
        if event.kind is EventKind.start:
            self.started_at = self.now()
            return
        if event.kind is not EventKind.reset:
            return

        started_at, self.started_at = self.started_at, None
        snap = event.metrics
        if snap.is_empty:
            return

        ended_at = self.now()
        record = SessionRecord(
            day=to_local_datetime(ended_at, self.tz_name).date(),
            started_at=started_at,
            ended_at=ended_at,
            steps=snap.steps,
            daily_goal=snap.daily_goal,
            distance_m=snap.distance_m,
            calories=snap.calories,
            active_seconds=snap.active_seconds,
            elapsed_seconds=snap.elapsed_seconds,
            source=snap.source.value,
        )
        db = self.session_factory()
        try:
            db.add(record)
            db.commit()
            db.refresh(record)
        finally:
            db.close()
        logger.info("Session archived", record_id=record.id, steps=record.steps)
