"""
User approval workflow tests
"""
import pytest

from slhd_admin.errors import ApprovalError, UserNotFound
from slhd_admin.models import ActivityLog, User, Dinas
from slhd_admin.services.approvals import approve_user, reject_user


class TestApprove:

    def test_approve_registers_dinas(self, db_session, admin_user, pending_dinas_user):
        """Approval activates the user, registers the dinas and logs it"""
        approve_user(db_session, pending_dinas_user.id, actor=admin_user, ip_address="127.0.0.1")

        user = db_session.get(User, pending_dinas_user.id)
        assert user.is_active is True
        assert db_session.get(Dinas, user.dinas_id).status == "terdaftar"

        entry = db_session.query(ActivityLog).one()
        assert entry.action == "approve_user"
        assert entry.description == "Menyetujui akun: DLH Kota Bandung"
        assert entry.subject_kind == "user"
        assert entry.subject_id == user.id
        assert entry.context_type == "admin"

    def test_dinas_already_registered(self, db_session, admin_user, pending_dinas_user):
        """Registered dinas blocks approval without side effects"""
        pending_dinas_user.dinas.status = "terdaftar"
        db_session.commit()

        with pytest.raises(ApprovalError):
            approve_user(db_session, pending_dinas_user.id, actor=admin_user)
        assert db_session.get(User, pending_dinas_user.id).is_active is False
        assert db_session.query(ActivityLog).count() == 0

    def test_user_without_dinas(self, db_session):
        """Non-dinas users are described by email"""
        u = User(email="pusdatin2@test.com", role="pusdatin", is_active=False)
        db_session.add(u)
        db_session.commit()
        approve_user(db_session, u.id)
        assert db_session.query(ActivityLog).one().description == "Menyetujui akun: pusdatin2@test.com"

    def test_missing_user(self, db_session):
        """Unknown id raises UserNotFound"""
        with pytest.raises(UserNotFound):
            approve_user(db_session, 999)


class TestReject:

    def test_reject_deletes_pending(self, db_session, admin_user, pending_dinas_user):
        """Reject deletes the account and keeps the email in the log"""
        user_id = pending_dinas_user.id
        email = reject_user(db_session, user_id, actor=admin_user)

        assert email == "dlh002@test.com"
        assert db_session.get(User, user_id) is None
        entry = db_session.query(ActivityLog).one()
        assert entry.action == "reject_user"
        assert entry.properties == {"deleted_email": "dlh002@test.com"}
        assert entry.subject_kind is None

    def test_active_user_cannot_be_rejected(self, db_session, admin_user):
        """Active users are kept"""
        with pytest.raises(ApprovalError):
            reject_user(db_session, admin_user.id)
        assert db_session.get(User, admin_user.id) is not None
