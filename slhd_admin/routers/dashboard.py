from datetime import datetime
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from slhd_admin.db import get_db
from slhd_admin.deps import get_settings
from slhd_admin.errors import StorageUnavailable
from slhd_admin.services.dashboard import get_stats, recent_activities
from slhd_admin.services.timeline import build_timeline
from slhd_admin.settings import Settings

router = APIRouter()


@router.get("/dashboard/stats")
def dashboard_stats(
    year: int | None = Query(default=None),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    year = year or datetime.utcnow().year
    try:
        return get_stats(db, year, settings)
    except StorageUnavailable as e:
        raise HTTPException(503, str(e))


@router.get("/dashboard/timeline")
def dashboard_timeline(year: int | None = Query(default=None), db: Session = Depends(get_db)):
    """Timeline penilaian, always computed fresh."""
    year = year or datetime.utcnow().year
    try:
        return build_timeline(db, year)
    except StorageUnavailable as e:
        raise HTTPException(503, str(e))


@router.get("/dashboard/recent-activities")
def dashboard_recent(limit: int = Query(10, ge=1, le=100), db: Session = Depends(get_db)):
    try:
        return recent_activities(db, limit=limit)
    except StorageUnavailable as e:
        raise HTTPException(503, str(e))
