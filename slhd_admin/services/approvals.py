"""
Registration approval for dinas accounts.

Approving a user also registers its dinas; a dinas can be registered by one
account only. Rejection deletes the pending account.
"""
import logging
from sqlalchemy.orm import Session
from slhd_admin.errors import ApprovalError, UserNotFound, storage_errors
from slhd_admin.models import User
from slhd_admin.services.activity import SubjectRef, record_activity

log = logging.getLogger("approvals")


def _get_user(db: Session, user_id: int) -> User:
    with storage_errors("user store"):
        user = db.get(User, user_id)
    if user is None:
        raise UserNotFound(user_id)
    return user


def approve_user(db: Session, user_id: int, actor: User | None = None, ip_address: str | None = None) -> User:
    user = _get_user(db, user_id)
    target = user.email
    dinas = user.dinas
    if dinas is not None:
        if dinas.status == "terdaftar":
            raise ApprovalError("User tidak bisa diaktifkan, dinas sudah Terdaftar.")
        dinas.status = "terdaftar"
        target = dinas.nama_dinas

    user.is_active = True
    with storage_errors("user store"):
        try:
            db.commit()
        except Exception:
            db.rollback()
            raise
    log.info("approved user=%s dinas=%s", user.id, user.dinas_id)

    record_activity(
        db, actor, "approve_user", f"Menyetujui akun: {target}",
        subject=SubjectRef.of(user), ip_address=ip_address,
    )
    return user


def reject_user(db: Session, user_id: int, actor: User | None = None, ip_address: str | None = None) -> str:
    """Delete a pending registration; returns the rejected email."""
    user = _get_user(db, user_id)
    if user.is_active:
        raise ApprovalError("User sudah diaktifkan, tidak bisa ditolak")

    email = user.email
    record_activity(
        db, actor, "reject_user", f"Menolak pendaftaran user: {email}",
        properties={"deleted_email": email}, ip_address=ip_address,
    )
    with storage_errors("user store"):
        db.delete(user)
        db.commit()
    log.info("rejected user=%s email=%s", user_id, email)
    return email
