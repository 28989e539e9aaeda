from sqlalchemy import Column, Integer, String, Date, DateTime, Float
from sqlalchemy.sql import func
from motiontrack.db import Base


class SessionRecord(Base):
    """A finished tracking session, archived when the user resets it."""

    __tablename__ = "session_records"

    id = Column(Integer, primary_key=True, index=True)

    # Local calendar day the session ended on (used for weekly totals)
    day = Column(Date, nullable=False, index=True)

    started_at = Column(DateTime(timezone=True), nullable=True)
    ended_at = Column(DateTime(timezone=True), nullable=False)

    steps = Column(Integer, nullable=False, default=0)
    daily_goal = Column(Integer, nullable=False)
    distance_m = Column(Float, nullable=False, default=0.0)
    calories = Column(Float, nullable=False, default=0.0)
    active_seconds = Column(Integer, nullable=False, default=0)
    elapsed_seconds = Column(Integer, nullable=False, default=0)

    # sensor | simulated
    source = Column(String(20), nullable=False, server_default="sensor")

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    # Pace is NOT stored, it's computed on the fly from distance / active time
