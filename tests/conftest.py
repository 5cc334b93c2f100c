"""
pytest fixtures shared by the service and API tests
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")

import pytest
from datetime import datetime
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from slhd_admin.db import Base, get_db
from slhd_admin.models import (
    Region,
    Dinas,
    User,
    Submission,
    StageStatus,
    Deadline,
    EvaluationRecap,
)
from slhd_admin.services.dashboard import clear_cache


SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db_session():
    """Test DB session; tables are recreated per test."""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def _fresh_dashboard_cache():
    clear_cache()
    yield
    clear_cache()


@pytest.fixture
def client(db_session):
    """API client bound to the test session."""
    from fastapi.testclient import TestClient
    from slhd_admin.main import app

    def _override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def regions(db_session):
    jabar = Region(nama_region="Jawa Barat", type="provinsi")
    db_session.add(jabar)
    db_session.flush()
    bandung = Region(nama_region="Kota Bandung", type="kota", parent_id=jabar.id)
    bogor = Region(nama_region="Kabupaten Bogor", type="kabupaten", parent_id=jabar.id)
    db_session.add_all([bandung, bogor])
    db_session.commit()
    return {"provinsi": jabar, "kota": bandung, "kabupaten": bogor}


@pytest.fixture
def dinas(db_session, regions):
    """Three dinas, none registered yet."""
    rows = [
        Dinas(nama_dinas="DLH Provinsi Jawa Barat", kode_dinas="001", region_id=regions["provinsi"].id),
        Dinas(nama_dinas="DLH Kota Bandung", kode_dinas="002", region_id=regions["kota"].id),
        Dinas(nama_dinas="DLH Kabupaten Bogor", kode_dinas="003", region_id=regions["kabupaten"].id),
    ]
    db_session.add_all(rows)
    db_session.commit()
    return rows


@pytest.fixture
def admin_user(db_session):
    u = User(email="admin@test.com", role="admin", is_active=True)
    db_session.add(u)
    db_session.commit()
    return u


@pytest.fixture
def pusdatin_user(db_session):
    u = User(email="pusdatin@test.com", role="pusdatin", is_active=True)
    db_session.add(u)
    db_session.commit()
    return u


@pytest.fixture
def pending_dinas_user(db_session, dinas):
    u = User(email="dlh002@test.com", role="kabupaten/kota", dinas_id=dinas[1].id, is_active=False)
    db_session.add(u)
    db_session.commit()
    return u


@pytest.fixture
def stage_2026(db_session):
    row = StageStatus(
        year=2026,
        active_stage="validation_1",
        announcement_open=False,
        note="Validasi tahap 1 berjalan",
        stage_started_at=datetime(2026, 5, 2, 8, 0, 0),
    )
    db_session.add(row)
    db_session.commit()
    return row


@pytest.fixture
def submission_deadline_2026(db_session):
    d = Deadline(year=2026, stage="submission", deadline_at=datetime(2026, 3, 1, 0, 0, 0), is_active=True)
    db_session.add(d)
    db_session.commit()
    return d


@pytest.fixture
def add_recaps(db_session, dinas):
    """Insert rekap rows from (lolos_slhd, masuk_penghargaan, lolos_validasi1, lolos_validasi2)."""
    def _add(year: int, flags: list[tuple[bool, bool, bool, bool]]):
        for slhd, award, v1, v2 in flags:
            db_session.add(EvaluationRecap(
                year=year,
                dinas_id=dinas[0].id,
                lolos_slhd=slhd,
                masuk_penghargaan=award,
                lolos_validasi1=v1,
                lolos_validasi2=v2,
            ))
        db_session.commit()
    return _add


@pytest.fixture
def add_submissions(db_session, dinas):
    def _add(year: int, statuses: list[str], dinas_idx: int = 0):
        for st in statuses:
            db_session.add(Submission(dinas_id=dinas[dinas_idx].id, tahun=year, status=st))
        db_session.commit()
    return _add
