"""
Stage Ledger: which assessment stage is active for a program year.

Stage transitions are written by the workflow elsewhere; this module only
reads. A year without a record is a valid state and gets a default.
"""
from sqlalchemy import select
from sqlalchemy.orm import Session
from slhd_admin.errors import storage_errors
from slhd_admin.models import StageStatus

STAGE_ORDER = {
    "submission": 1,
    "scoring_environmental_report": 2,
    "scoring_award": 3,
    "validation_1": 4,
    "validation_2": 5,
    "interview": 6,
    "completed": 7,
}
FINAL_RANK = STAGE_ORDER["completed"]

STAGE_LABELS = {
    "submission": "Submission DLH",
    "scoring_environmental_report": "Penilaian SLHD",
    "scoring_award": "Penilaian Penghargaan",
    "validation_1": "Validasi Tahap 1",
    "validation_2": "Validasi Tahap 2",
    "interview": "Wawancara",
    "completed": "Penilaian Selesai",
}

DEFAULT_STAGE = "submission"
DEFAULT_NOTE = "Menunggu proses dimulai"


def stage_rank(stage: str | None) -> int:
    """Rank 1..7; unknown ids count as the first stage."""
    return STAGE_ORDER.get(stage or "", 1)


def stage_label(stage: str) -> str:
    return STAGE_LABELS.get(stage, stage)


def get_current_stage(db: Session, year: int) -> StageStatus:
    """StageStatus for the year, or an unsaved default record."""
    with storage_errors("stage ledger"):
        row = db.execute(
            select(StageStatus).where(StageStatus.year == year)
        ).scalars().first()
    if row is not None:
        return row
    return StageStatus(
        year=year,
        active_stage=DEFAULT_STAGE,
        announcement_open=False,
        note=DEFAULT_NOTE,
        stage_started_at=None,
    )
