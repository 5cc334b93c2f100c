"""
Deadline lookup and management.

Several active rows for the same (year, stage) can exist in old data; the
most recently updated one wins, then the highest id.
"""
from datetime import datetime, timezone
from sqlalchemy import select, true
from sqlalchemy.orm import Session
from slhd_admin.errors import storage_errors
from slhd_admin.models import Deadline, User
from slhd_admin.services.activity import record_activity

BULAN = [
    "Januari", "Februari", "Maret", "April", "Mei", "Juni",
    "Juli", "Agustus", "September", "Oktober", "November", "Desember",
]
BULAN_SINGKAT = [b[:3] for b in BULAN]


def _naive_utc(ts: datetime) -> datetime:
    if ts.tzinfo is not None:
        return ts.astimezone(timezone.utc).replace(tzinfo=None)
    return ts


def format_tanggal(ts: datetime) -> str:
    """e.g. 01 Maret 2026"""
    return f"{ts.day:02d} {BULAN[ts.month - 1]} {ts.year}"


def is_passed(deadline_at: datetime, now: datetime | None = None) -> bool:
    now = now or datetime.utcnow()
    return _naive_utc(now) > _naive_utc(deadline_at)


def get_active_deadline(db: Session, year: int, stage: str) -> Deadline | None:
    with storage_errors("deadline store"):
        return db.execute(
            select(Deadline)
            .where(Deadline.year == year, Deadline.stage == stage, Deadline.is_active == true())
            .order_by(Deadline.updated_at.desc(), Deadline.id.desc())
            .limit(1)
        ).scalars().first()


def deadline_info(deadline: Deadline | None, now: datetime | None = None) -> dict | None:
    if deadline is None:
        return None
    at = deadline.deadline_at
    return {
        "deadline_at": at.isoformat(),
        "tanggal": at.strftime("%Y-%m-%d %H:%M:%S"),
        "tanggal_formatted": format_tanggal(at),
        "is_passed": is_passed(at, now),
    }


def get_deadline(db: Session, year: int, stage: str = "submission", now: datetime | None = None) -> dict:
    d = get_active_deadline(db, year, stage)
    if d is None:
        return {"year": year, "stage": stage, "deadline": None, "note": None, "is_passed": False}
    return {
        "year": d.year,
        "stage": d.stage,
        "deadline": d.deadline_at.isoformat(),
        "note": d.note,
        "is_passed": is_passed(d.deadline_at, now),
    }


def set_deadline(
    db: Session,
    actor: User | None,
    year: int,
    deadline_at: datetime,
    note: str | None = None,
    stage: str = "submission",
    ip_address: str | None = None,
) -> Deadline:
    """Upsert the active deadline of (year, stage) and write an audit entry."""
    deadline_at = _naive_utc(deadline_at)
    with storage_errors("deadline store"):
        d = get_active_deadline(db, year, stage)
        if d is None:
            d = Deadline(year=year, stage=stage, deadline_at=deadline_at, note=note, is_active=True)
            db.add(d)
        else:
            d.deadline_at = deadline_at
            d.note = note
            d.updated_at = datetime.utcnow()
        db.commit()
        db.refresh(d)

    formatted = (
        f"{deadline_at.day:02d} {BULAN_SINGKAT[deadline_at.month - 1]} "
        f"{deadline_at.year} {deadline_at:%H:%M}"
    )
    record_activity(
        db,
        actor,
        "update_deadline",
        f"Mengupdate deadline tahun {year} menjadi {formatted}",
        properties={"year": year, "stage": stage},
        ip_address=ip_address,
    )
    return d
