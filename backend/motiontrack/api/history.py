from datetime import date, timedelta
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from motiontrack.core.time_utils import monday_of
from motiontrack.db import get_db
from motiontrack.models.session_record import SessionRecord
from motiontrack.schemas.session import DailyTotal, SessionRecordRead


router = APIRouter(prefix="/history", tags=["history"])


@router.get("/", response_model=list[SessionRecordRead])
def list_sessions(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    db: Session = Depends(get_db),
):
    """
    List archived sessions, optionally filtered by [start_date, end_date].

      GET /history?start_date=2025-01-06&end_date=2025-01-12
    """
    if start_date and end_date and start_date > end_date:
        raise HTTPException(status_code=422, detail="start_date must be <= end_date")

    query = db.query(SessionRecord)
    if start_date is not None:
        query = query.filter(SessionRecord.day >= start_date)
    if end_date is not None:
        query = query.filter(SessionRecord.day <= end_date)

    # Most recent first
    return query.order_by(SessionRecord.ended_at.desc()).all()


@router.get("/weekly", response_model=list[DailyTotal])
def weekly_totals(
    day: Optional[date] = Query(None),
    db: Session = Depends(get_db),
):
    """Per-day totals, Monday through Sunday, for the week containing `day`."""
    start = monday_of(day or date.today())
    end = start + timedelta(days=6)
    rows = (
        db.query(SessionRecord)
        .filter(SessionRecord.day >= start)
        .filter(SessionRecord.day <= end)
        .all()
    )

    totals = {
        start + timedelta(days=i): DailyTotal(
            day=start + timedelta(days=i), steps=0, distance_m=0.0, calories=0.0, sessions=0
        )
        for i in range(7)
    }
    for row in rows:
        t = totals[row.day]
        t.steps += row.steps
        t.distance_m = round(t.distance_m + row.distance_m, 2)
        t.calories = round(t.calories + row.calories, 2)
        t.sessions += 1
    return list(totals.values())


@router.get("/{record_id}", response_model=SessionRecordRead)
def get_session(record_id: int, db: Session = Depends(get_db)):
    row = db.query(SessionRecord).filter(SessionRecord.id == record_id).first()
    if not row:
        raise HTTPException(status_code=404, detail="Session not found")
    return row
