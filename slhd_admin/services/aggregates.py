"""
Aggregate reads for the dashboard: submission, evaluation, dinas and user
counts. Every query is a single SELECT with conditional sums.
"""
from dataclasses import dataclass, asdict
from sqlalchemy import select, func, case, true, false, or_
from sqlalchemy.orm import Session
from slhd_admin.errors import storage_errors
from slhd_admin.models import Submission, EvaluationRecap, Dinas, User, Region, DINAS_ROLES


def _count_if(cond):
    return func.coalesce(func.sum(case((cond, 1), else_=0)), 0)


@dataclass
class SubmissionAggregate:
    total: int = 0
    finalized: int = 0


@dataclass
class EvaluationAggregate:
    total: int = 0
    passed_screening: int = 0
    passed_shortlist: int = 0
    passed_validation_1: int = 0
    passed_validation_2: int = 0

    def as_dict(self) -> dict:
        return asdict(self)


def submission_aggregate(db: Session, year: int) -> SubmissionAggregate:
    with storage_errors("submission store"):
        total, finalized = db.execute(
            select(
                func.count(Submission.id),
                _count_if(Submission.status == "finalized"),
            ).where(Submission.tahun == year)
        ).one()
    return SubmissionAggregate(total=int(total or 0), finalized=int(finalized or 0))


def evaluation_aggregate(db: Session, year: int) -> EvaluationAggregate:
    r = EvaluationRecap
    with storage_errors("evaluation store"):
        row = db.execute(
            select(
                func.count(r.id),
                _count_if(r.lolos_slhd == true()),
                _count_if(r.masuk_penghargaan == true()),
                _count_if(r.lolos_validasi1 == true()),
                _count_if(r.lolos_validasi2 == true()),
            ).where(r.year == year)
        ).one()
    return EvaluationAggregate(*(int(v or 0) for v in row))


def count_dinas(db: Session) -> int:
    with storage_errors("agency store"):
        return int(db.execute(select(func.count(Dinas.id))).scalar_one() or 0)


def user_stats(db: Session) -> dict:
    with storage_errors("user store"):
        total, pending, active, admin, pusdatin, dinas = db.execute(
            select(
                func.count(User.id),
                _count_if(User.is_active == false()),
                _count_if(User.is_active == true()),
                _count_if(User.role == "admin"),
                _count_if(User.role == "pusdatin"),
                _count_if(User.role.in_(DINAS_ROLES)),
            )
        ).one()
    return {
        "total": int(total or 0),
        "pending_approval": int(pending or 0),
        "active": int(active or 0),
        "by_role": {
            "admin": int(admin or 0),
            "pusdatin": int(pusdatin or 0),
            "dinas": int(dinas or 0),
        },
    }


def dinas_by_region_type(db: Session) -> dict:
    with storage_errors("agency store"):
        provinsi, kabkota = db.execute(
            select(
                _count_if(Region.type == "provinsi"),
                _count_if(or_(Region.type == "kabupaten", Region.type == "kota")),
            )
            .select_from(User)
            .join(Dinas, User.dinas_id == Dinas.id)
            .join(Region, Dinas.region_id == Region.id)
            .where(User.role.in_(DINAS_ROLES))
        ).one()
    return {"provinsi": int(provinsi or 0), "kabupaten_kota": int(kabkota or 0)}


def submission_status_counts(db: Session, year: int) -> dict:
    with storage_errors("submission store"):
        total, draft, finalized, approved = db.execute(
            select(
                func.count(Submission.id),
                _count_if(Submission.status == "draft"),
                _count_if(Submission.status == "finalized"),
                _count_if(Submission.status == "approved"),
            ).where(Submission.tahun == year)
        ).one()
    return {
        "total": int(total or 0),
        "by_status": {
            "draft": int(draft or 0),
            "finalized": int(finalized or 0),
            "approved": int(approved or 0),
        },
    }
