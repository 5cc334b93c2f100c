from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from slhd_admin.db import get_db
from slhd_admin.errors import StorageUnavailable
from slhd_admin.services.activity import list_activity_logs, LOGS_PER_PAGE

router = APIRouter()


def _logs(db: Session, role: str, year: int | None, page: int, limit: int):
    try:
        return list_activity_logs(db, role=role, year=year, page=page, limit=limit)
    except StorageUnavailable as e:
        raise HTTPException(503, str(e))


@router.get("/logs")
def system_logs(
    role: str = Query("all"),
    year: int | None = Query(default=None),
    page: int = Query(1, ge=1),
    limit: int = Query(LOGS_PER_PAGE, ge=1, le=200),
    db: Session = Depends(get_db),
):
    return _logs(db, role, year, page, limit)


@router.get("/logs/admin")
def admin_logs(
    year: int | None = Query(default=None),
    page: int = Query(1, ge=1),
    limit: int = Query(LOGS_PER_PAGE, ge=1, le=200),
    db: Session = Depends(get_db),
):
    return _logs(db, "admin", year, page, limit)


@router.get("/logs/pusdatin")
def pusdatin_logs(
    year: int | None = Query(default=None),
    page: int = Query(1, ge=1),
    limit: int = Query(LOGS_PER_PAGE, ge=1, le=200),
    db: Session = Depends(get_db),
):
    return _logs(db, "pusdatin", year, page, limit)
