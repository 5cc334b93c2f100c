from datetime import datetime
from sqlalchemy import String, Integer, DateTime, Text, Float, Boolean, ForeignKey, JSON, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship
from slhd_admin.db import Base

DINAS_ROLES = ("provinsi", "kabupaten/kota")


# ===== Wilayah & Dinas =====
class Region(Base):
    __tablename__ = "regions"
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    nama_region: Mapped[str] = mapped_column(String(128))
    # provinsi / kabupaten / kota
    type: Mapped[str] = mapped_column(String(16), default="provinsi")
    kategori: Mapped[str | None] = mapped_column(String(32), nullable=True)
    parent_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("regions.id"), nullable=True)

    parent: Mapped["Region | None"] = relationship(remote_side="Region.id")


class Dinas(Base):
    __tablename__ = "dinas"
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    nama_dinas: Mapped[str] = mapped_column(String(255))
    kode_dinas: Mapped[str | None] = mapped_column(String(32), nullable=True)
    region_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("regions.id"), nullable=True)
    # belum_terdaftar → terdaftar (on user approval)
    status: Mapped[str] = mapped_column(String(32), default="belum_terdaftar")
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    region: Mapped[Region | None] = relationship()


class User(Base):
    __tablename__ = "users"
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(255), unique=True)
    password: Mapped[str] = mapped_column(String(255), default="")
    # admin / pusdatin / provinsi / kabupaten/kota
    role: Mapped[str] = mapped_column(String(32), default="provinsi")
    dinas_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("dinas.id"), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    dinas: Mapped[Dinas | None] = relationship()


# ===== Submission SLHD =====
class Submission(Base):
    __tablename__ = "submissions"
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    dinas_id: Mapped[int] = mapped_column(Integer, ForeignKey("dinas.id"), index=True)
    tahun: Mapped[int] = mapped_column(Integer, index=True)
    # draft → finalized → approved
    status: Mapped[str] = mapped_column(String(16), default="draft")
    # IKLH (indeks kualitas lingkungan hidup) recorded with the submission
    iklh: Mapped[float | None] = mapped_column(Float, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    dinas: Mapped[Dinas] = relationship()


# ===== Tahapan penilaian (Stage Ledger) =====
class StageStatus(Base):
    __tablename__ = "tahapan_penilaian_status"
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    year: Mapped[int] = mapped_column(Integer, unique=True)
    # submission → scoring_environmental_report → scoring_award → validation_1
    # → validation_2 → interview → completed
    active_stage: Mapped[str] = mapped_column(String(48), default="submission")
    announcement_open: Mapped[bool] = mapped_column(Boolean, default=False)
    note: Mapped[str | None] = mapped_column(Text, nullable=True)
    stage_started_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class Deadline(Base):
    __tablename__ = "deadlines"
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    year: Mapped[int] = mapped_column(Integer)
    stage: Mapped[str] = mapped_column(String(48), default="submission")
    deadline_at: Mapped[datetime] = mapped_column(DateTime)
    note: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (Index("ix_deadlines_year_stage", "year", "stage"),)


class EvaluationRecap(Base):
    """Rekap penilaian: one row per dinas per year, pass flags per stage."""
    __tablename__ = "rekap_penilaian"
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    year: Mapped[int] = mapped_column(Integer, index=True)
    dinas_id: Mapped[int] = mapped_column(Integer, ForeignKey("dinas.id"))
    lolos_slhd: Mapped[bool] = mapped_column(Boolean, default=False)
    masuk_penghargaan: Mapped[bool] = mapped_column(Boolean, default=False)
    lolos_validasi1: Mapped[bool] = mapped_column(Boolean, default=False)
    lolos_validasi2: Mapped[bool] = mapped_column(Boolean, default=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


# ===== Audit log =====
class ActivityLog(Base):
    __tablename__ = "activity_logs"
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    action: Mapped[str] = mapped_column(String(64))
    description: Mapped[str] = mapped_column(Text, default="")
    # tagged subject: user / dinas (None when the action has no target row)
    subject_kind: Mapped[str | None] = mapped_column(String(16), nullable=True)
    subject_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    context_type: Mapped[str] = mapped_column(String(16), default="system")
    year: Mapped[int | None] = mapped_column(Integer, nullable=True)
    stage: Mapped[str | None] = mapped_column(String(48), nullable=True)
    document_type: Mapped[str | None] = mapped_column(String(64), nullable=True)
    properties: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    ip_address: Mapped[str | None] = mapped_column(String(45), nullable=True)
    user_agent: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, index=True)

    user: Mapped[User | None] = relationship()

    __table_args__ = (
        Index("ix_activity_logs_context_created", "context_type", "created_at"),
        Index("ix_activity_logs_year_created", "year", "created_at"),
    )
