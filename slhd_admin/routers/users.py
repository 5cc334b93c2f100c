from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session
from slhd_admin.db import get_db
from slhd_admin.deps import get_actor, client_ip
from slhd_admin.errors import ApprovalError, StorageUnavailable, UserNotFound
from slhd_admin.models import User
from slhd_admin.services.approvals import approve_user, reject_user

router = APIRouter()


@router.post("/users/{user_id}/approve")
def approve(user_id: int, request: Request, db: Session = Depends(get_db), actor: User | None = Depends(get_actor)):
    try:
        approve_user(db, user_id, actor=actor, ip_address=client_ip(request))
    except UserNotFound:
        raise HTTPException(404, "not found")
    except ApprovalError as e:
        raise HTTPException(400, str(e))
    except StorageUnavailable as e:
        raise HTTPException(503, str(e))
    return {"message": "Berhasil Aktivasi User"}


@router.post("/users/{user_id}/reject")
def reject(user_id: int, request: Request, db: Session = Depends(get_db), actor: User | None = Depends(get_actor)):
    try:
        reject_user(db, user_id, actor=actor, ip_address=client_ip(request))
    except UserNotFound:
        raise HTTPException(404, "not found")
    except ApprovalError as e:
        raise HTTPException(400, str(e))
    except StorageUnavailable as e:
        raise HTTPException(503, str(e))
    return {"message": "Pendaftaran user ditolak"}
