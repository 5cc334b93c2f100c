"""
Timeline penilaian (assessment timeline) projector.

Reads the active stage from the stage ledger plus the submission/evaluation
aggregates and lays out the fixed 7-stage pipeline:

    submission → penilaian SLHD → penilaian penghargaan → validasi 1
    → validasi 2 → wawancara → selesai

Each stage's participant count is the previous stage's pass count, and the
"tidak lolos" figure is the difference between the two, never below zero.
"""
import logging
import math
from datetime import datetime
from sqlalchemy.orm import Session
from slhd_admin.services.aggregates import (
    submission_aggregate,
    evaluation_aggregate,
    count_dinas,
)
from slhd_admin.services.deadlines import get_active_deadline, deadline_info
from slhd_admin.services.stage_ledger import (
    STAGE_ORDER,
    FINAL_RANK,
    DEFAULT_NOTE,
    get_current_stage,
    stage_rank,
    stage_label,
)

log = logging.getLogger("timeline")


def stage_state(rank: int, current_rank: int) -> str:
    """completed / active / pending; the final stage is never 'active'."""
    if rank == FINAL_RANK:
        return "completed" if current_rank >= FINAL_RANK else "pending"
    if current_rank > rank:
        return "completed"
    if current_rank == rank:
        return "active"
    return "pending"


def progress_percentage(current_rank: int) -> int:
    # half-up, rank 4 → 57
    return math.floor(current_rank / FINAL_RANK * 100 + 0.5)


def not_passed(total: int, passed: int, stage: str, year: int) -> int:
    diff = total - passed
    if diff < 0:
        log.warning(
            "data inconsistency year=%s stage=%s: passed=%s exceeds total=%s, clamped to 0",
            year, stage, passed, total,
        )
        return 0
    return diff


def _stage_statistics(stage: str, year: int, subs, ev) -> dict | None:
    if stage == "submission":
        return {"total_submission": subs.total, "finalized": subs.finalized}
    if stage == "scoring_environmental_report":
        return {
            "total_dinilai": ev.total,
            "lolos": ev.passed_screening,
            "tidak_lolos": not_passed(ev.total, ev.passed_screening, stage, year),
        }
    if stage == "scoring_award":
        return {
            "total_peserta": ev.passed_screening,
            "masuk_penghargaan": ev.passed_shortlist,
        }
    if stage == "validation_1":
        return {
            "total_peserta": ev.passed_shortlist,
            "lolos": ev.passed_validation_1,
            "tidak_lolos": not_passed(ev.passed_shortlist, ev.passed_validation_1, stage, year),
        }
    if stage == "validation_2":
        return {
            "total_peserta": ev.passed_validation_1,
            "lolos": ev.passed_validation_2,
            "tidak_lolos": not_passed(ev.passed_validation_1, ev.passed_validation_2, stage, year),
        }
    if stage == "interview":
        return {"total_peserta": ev.passed_validation_2}
    return None


def build_timeline(db: Session, year: int, now: datetime | None = None) -> dict:
    """
    Timeline penilaian for one program year.

    Args:
        db: DB session
        year: program year
        now: clock used for the deadline's is_passed (server UTC by default)

    Returns:
        JSON-ready dict: active stage, progress, 7 timeline entries, summary

    Raises:
        StorageUnavailable: any of the underlying reads failed
    """
    ledger = get_current_stage(db, year)
    submission_deadline = get_active_deadline(db, year, "submission")
    subs = submission_aggregate(db, year)
    ev = evaluation_aggregate(db, year)
    total_dinas = count_dinas(db)

    current = ledger.active_stage or "submission"
    current_rank = stage_rank(current)

    timeline = []
    for stage, rank in STAGE_ORDER.items():
        entry = {
            "stage_id": stage,
            "label": stage_label(stage),
            "order": rank,
            "status": stage_state(rank, current_rank),
        }
        if stage == "submission":
            entry["deadline"] = deadline_info(submission_deadline, now)
        stats = _stage_statistics(stage, year, subs, ev)
        if stats is not None:
            entry["statistics"] = stats
        timeline.append(entry)

    return {
        "year": year,
        "active_stage": current,
        "active_stage_label": stage_label(current),
        "announcement_open": bool(ledger.announcement_open),
        "note": ledger.note or DEFAULT_NOTE,
        "stage_started_at": ledger.stage_started_at.isoformat() if ledger.stage_started_at else None,
        "progress_percentage": progress_percentage(current_rank),
        "timeline": timeline,
        "summary": {
            "total_dinas_terdaftar": total_dinas,
            "total_submission": subs.total,
            "lolos_slhd": ev.passed_screening,
            "masuk_penghargaan": ev.passed_shortlist,
            "lolos_validasi_1": ev.passed_validation_1,
            "lolos_validasi_2": ev.passed_validation_2,
        },
    }


def get_stage_status(db: Session, year: int, now: datetime | None = None) -> dict:
    """Current stage for polling, with the stage deadline checked against the server clock."""
    ledger = get_current_stage(db, year)
    current = ledger.active_stage or "submission"
    deadline = get_active_deadline(db, year, current)
    info = deadline_info(deadline, now)
    return {
        "year": year,
        "active_stage": current,
        "active_stage_label": stage_label(current),
        "rank": stage_rank(current),
        "announcement_open": bool(ledger.announcement_open),
        "note": ledger.note or DEFAULT_NOTE,
        "stage_started_at": ledger.stage_started_at.isoformat() if ledger.stage_started_at else None,
        "deadline": info,
        "is_passed": info["is_passed"] if info else False,
    }
