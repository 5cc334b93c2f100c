"""
Activity (audit) log.

The acting user is always passed in by the caller; nothing here reads
request state. Subjects are tagged references (user / dinas / none).
"""
import logging
import math
from dataclasses import dataclass
from typing import Literal, get_args
from datetime import datetime
from sqlalchemy import select, func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from slhd_admin.errors import storage_errors
from slhd_admin.models import ActivityLog, User, Dinas, DINAS_ROLES

log = logging.getLogger("activity")

LOGS_PER_PAGE = 25

SubjectKind = Literal["user", "dinas", "none"]
_SUBJECT_KINDS = get_args(SubjectKind)


@dataclass(frozen=True)
class SubjectRef:
    kind: SubjectKind
    id: int | None = None

    def __post_init__(self):
        if self.kind not in _SUBJECT_KINDS:
            raise ValueError(f"unknown subject kind: {self.kind!r}")

    @classmethod
    def of(cls, obj) -> "SubjectRef":
        if isinstance(obj, User):
            return cls("user", obj.id)
        if isinstance(obj, Dinas):
            return cls("dinas", obj.id)
        return NO_SUBJECT

    def as_dict(self) -> dict:
        return {"kind": self.kind, "id": self.id}


NO_SUBJECT = SubjectRef("none")


def context_type_for(actor: User | None) -> str:
    if actor is None:
        return "system"
    if actor.role in ("admin", "pusdatin"):
        return actor.role
    if actor.role in DINAS_ROLES:
        return "dinas"
    return "system"


def record_activity(
    db: Session,
    actor: User | None,
    action: str,
    description: str,
    subject: SubjectRef = NO_SUBJECT,
    properties: dict | None = None,
    ip_address: str | None = None,
    user_agent: str | None = None,
) -> ActivityLog | None:
    """
    Write one audit row and commit it.

    A failed write is rolled back and logged; the admin action that triggered
    it has already been committed and stays valid, so None is returned instead
    of raising.
    """
    props = dict(properties or {})
    entry = ActivityLog(
        user_id=actor.id if actor is not None else None,
        action=action,
        description=description,
        subject_kind=None if subject.kind == "none" else subject.kind,
        subject_id=subject.id,
        context_type=context_type_for(actor),
        year=props.get("year") or datetime.utcnow().year,
        stage=props.get("stage"),
        document_type=props.get("document_type"),
        properties=props or None,
        ip_address=ip_address,
        user_agent=user_agent,
    )
    try:
        db.add(entry)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        log.error("ACTIVITY LOG ERROR [%s]: %s", action, exc)
        return None
    return entry


def serialize_log(row: ActivityLog) -> dict:
    actor = row.user
    return {
        "id": row.id,
        "actor": {
            "id": actor.id,
            "email": actor.email,
            "role": actor.role,
        } if actor else None,
        "action": row.action,
        "description": row.description,
        "subject": SubjectRef(row.subject_kind or "none", row.subject_id).as_dict(),
        "context_type": row.context_type,
        "year": row.year,
        "stage": row.stage,
        "document_type": row.document_type,
        "properties": row.properties or {},
        "ip_address": row.ip_address,
        "created_at": row.created_at.isoformat(),
    }


def list_activity_logs(
    db: Session,
    role: str = "all",
    year: int | None = None,
    page: int = 1,
    limit: int = LOGS_PER_PAGE,
) -> dict:
    """Paginated audit log, newest first. `role` matches context or actor role."""
    stmt = select(ActivityLog)
    if role and role != "all":
        stmt = stmt.where(or_(
            ActivityLog.context_type == role,
            ActivityLog.user.has(User.role == role),
        ))
    if year:
        stmt = stmt.where(ActivityLog.year == year)

    page = max(1, page)
    with storage_errors("activity log"):
        total = db.execute(
            select(func.count()).select_from(stmt.subquery())
        ).scalar_one()
        rows = db.execute(
            stmt.order_by(ActivityLog.created_at.desc(), ActivityLog.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        ).scalars().all()

    return {
        "data": [serialize_log(r) for r in rows],
        "page": page,
        "limit": limit,
        "total": total,
        "last_page": max(1, math.ceil(total / limit)),
    }
