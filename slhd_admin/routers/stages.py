from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from slhd_admin.db import get_db
from slhd_admin.errors import StorageUnavailable
from slhd_admin.services.stage_ledger import STAGE_ORDER, stage_label
from slhd_admin.services.timeline import get_stage_status

router = APIRouter()


@router.get("/stages")
def list_stages():
    return {"items": [
        {"id": s, "order": r, "label": stage_label(s)} for s, r in STAGE_ORDER.items()
    ]}


@router.get("/stages/{year}")
def current_stage(year: int, db: Session = Depends(get_db)):
    try:
        return get_stage_status(db, year)
    except StorageUnavailable as e:
        raise HTTPException(503, str(e))
