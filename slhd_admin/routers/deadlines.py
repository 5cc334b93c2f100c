from datetime import datetime
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session
from slhd_admin.db import get_db
from slhd_admin.deps import get_actor, client_ip
from slhd_admin.errors import StorageUnavailable
from slhd_admin.models import User
from slhd_admin.services.deadlines import get_deadline, set_deadline

router = APIRouter()


class DeadlineIn(BaseModel):
    year: int
    deadline_at: datetime
    note: str | None = None
    stage: str = Field(default="submission")


@router.get("/deadlines/{year}")
def read_deadline(year: int, stage: str = Query("submission"), db: Session = Depends(get_db)):
    try:
        return get_deadline(db, year, stage)
    except StorageUnavailable as e:
        raise HTTPException(503, str(e))


@router.post("/deadlines")
def write_deadline(
    req: DeadlineIn,
    request: Request,
    db: Session = Depends(get_db),
    actor: User | None = Depends(get_actor),
):
    try:
        d = set_deadline(
            db, actor, req.year, req.deadline_at,
            note=req.note, stage=req.stage, ip_address=client_ip(request),
        )
    except StorageUnavailable as e:
        raise HTTPException(503, str(e))
    return {
        "message": "Deadline berhasil disimpan",
        "data": {
            "id": d.id,
            "year": d.year,
            "stage": d.stage,
            "deadline_at": d.deadline_at.isoformat(),
            "note": d.note,
            "is_active": d.is_active,
        },
    }
