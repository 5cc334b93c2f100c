"""
HTTP endpoint tests
"""
from datetime import datetime
from sqlalchemy.exc import OperationalError

from slhd_admin.deps import get_settings
from slhd_admin.models import ActivityLog, User
from slhd_admin.settings import Settings


def test_root_and_health(client):
    """Root reports the service and health pings the database"""
    assert client.get("/").json()["service"] == "slhd-admin-api"
    assert client.get("/health").json() == {"ok": True, "db": True}


def test_app_imports():
    """Application module imports with every router mounted"""
    from slhd_admin.main import app
    assert app.title == "slhd-admin-api"
    paths = {r.path for r in app.routes}
    assert {"/api/logs", "/api/logs/admin", "/api/dashboard/timeline", "/api/stages/{year}"} <= paths


class TestTimelineEndpoints:

    def test_timeline(self, client, stage_2026, add_recaps):
        """Timeline endpoint projects the stored stage"""
        add_recaps(2026, [(True, i < 30, False, False) for i in range(50)])
        r = client.get("/api/dashboard/timeline", params={"year": 2026})
        assert r.status_code == 200
        body = r.json()
        assert body["progress_percentage"] == 57
        v1 = next(e for e in body["timeline"] if e["stage_id"] == "validation_1")
        assert v1["statistics"]["total_peserta"] == 30

    def test_stage_polling_default(self, client):
        """Year without a record polls as submission"""
        r = client.get("/api/stages/2031")
        assert r.status_code == 200
        body = r.json()
        assert body["active_stage"] == "submission"
        assert body["rank"] == 1
        assert body["announcement_open"] is False
        assert body["is_passed"] is False

    def test_stage_list(self, client):
        """Stage list is the fixed seven-stage order"""
        items = client.get("/api/stages").json()["items"]
        assert [i["order"] for i in items] == list(range(1, 8))

    def test_storage_unavailable_is_503(self, client, db_session, monkeypatch):
        """Database outage maps to 503"""
        def boom(*args, **kwargs):
            raise OperationalError("SELECT", {}, Exception("server has gone away"))

        monkeypatch.setattr(db_session, "execute", boom)
        r = client.get("/api/dashboard/timeline", params={"year": 2026})
        assert r.status_code == 503


class TestDashboardEndpoints:

    def test_stats(self, client, tmp_path, admin_user):
        """Stats endpoint reads storage from the configured path"""
        from slhd_admin.main import app
        app.dependency_overrides[get_settings] = lambda: Settings(STORAGE_PATH=str(tmp_path))

        r = client.get("/api/dashboard/stats", params={"year": 2026})
        assert r.status_code == 200
        body = r.json()
        assert body["users"]["total"] == 1
        assert body["timeline_penilaian"]["active_stage"] == "submission"

    def test_recent_activities(self, client, pending_dinas_user):
        """Pending registration shows up in the feed"""
        body = client.get("/api/dashboard/recent-activities", params={"limit": 5}).json()
        assert body["total"] == 1
        assert body["activities"][0]["status"] == "pending"


class TestDeadlineEndpoints:

    def test_set_then_get(self, client, db_session, admin_user):
        """POST stores the deadline, GET reads it back, the actor is logged"""
        r = client.post(
            "/api/deadlines",
            json={"year": 2026, "deadline_at": "2026-03-01T00:00:00Z", "note": "Batas submission"},
            headers={"X-Actor-Id": str(admin_user.id)},
        )
        assert r.status_code == 200
        assert r.json()["data"]["deadline_at"] == "2026-03-01T00:00:00"

        body = client.get("/api/deadlines/2026").json()
        assert body["deadline"] == "2026-03-01T00:00:00"
        assert body["note"] == "Batas submission"
        # server clock is well past March 2026
        assert body["is_passed"] is (datetime.utcnow() > datetime(2026, 3, 1))

        entry = db_session.query(ActivityLog).one()
        assert entry.user_id == admin_user.id
        assert entry.ip_address == "testclient"

    def test_get_absent(self, client):
        """No deadline row gives a null deadline"""
        assert client.get("/api/deadlines/2030").json()["deadline"] is None

    def test_validation(self, client):
        """Missing deadline_at is rejected"""
        assert client.post("/api/deadlines", json={"year": 2026}).status_code == 422


class TestUserEndpoints:

    def test_approve(self, client, db_session, admin_user, pending_dinas_user):
        """Approve activates the user"""
        r = client.post(f"/api/users/{pending_dinas_user.id}/approve", headers={"X-Actor-Id": str(admin_user.id)})
        assert r.status_code == 200
        db_session.expire_all()
        assert db_session.get(User, pending_dinas_user.id).is_active is True

    def test_approve_twice_for_same_dinas(self, client, db_session, pending_dinas_user):
        """Second account for a registered dinas is refused"""
        other = User(email="dlh002b@test.com", role="kabupaten/kota", dinas_id=pending_dinas_user.dinas_id)
        db_session.add(other)
        db_session.commit()
        assert client.post(f"/api/users/{pending_dinas_user.id}/approve").status_code == 200
        r = client.post(f"/api/users/{other.id}/approve")
        assert r.status_code == 400

    def test_approve_missing(self, client):
        """Unknown user id is 404"""
        assert client.post("/api/users/404/approve").status_code == 404

    def test_reject_active(self, client, admin_user):
        """Active accounts cannot be rejected"""
        assert client.post(f"/api/users/{admin_user.id}/reject").status_code == 400

    def test_reject_pending(self, client, pending_dinas_user):
        """Rejecting a pending registration succeeds"""
        r = client.post(f"/api/users/{pending_dinas_user.id}/reject")
        assert r.status_code == 200
        assert r.json()["message"] == "Pendaftaran user ditolak"


class TestLogEndpoints:

    def test_role_shortcuts(self, client, db_session, admin_user, pusdatin_user):
        """/logs/admin and /logs/pusdatin filter by role"""
        db_session.add_all([
            ActivityLog(user_id=admin_user.id, action="approve_user", context_type="admin", year=2026),
            ActivityLog(user_id=pusdatin_user.id, action="review", context_type="pusdatin", year=2026),
        ])
        db_session.commit()

        assert client.get("/api/logs").json()["total"] == 2
        admin = client.get("/api/logs/admin").json()
        assert [r["action"] for r in admin["data"]] == ["approve_user"]
        pusdatin = client.get("/api/logs/pusdatin", params={"year": 2026}).json()
        assert [r["action"] for r in pusdatin["data"]] == ["review"]


class TestApiKey:

    def test_required_when_configured(self, client):
        """API key guards /api only when one is set"""
        from slhd_admin.main import app
        app.dependency_overrides[get_settings] = lambda: Settings(API_KEY="rahasia")

        assert client.get("/api/stages").status_code == 401
        assert client.get("/api/stages", headers={"X-API-Key": "rahasia"}).status_code == 200
        # health stays open
        assert client.get("/health").status_code == 200
