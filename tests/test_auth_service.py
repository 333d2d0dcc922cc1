"""
Tests for tenant-admin credential verification and lockout policy.
"""
from datetime import timedelta

import pytest

from eduflow.core.errors import AccountLocked, InvalidCredentials, InvalidSession, ValidationError
from eduflow.core.jwt_auth import DeveloperPrincipal, TenantAdminPrincipal
from eduflow.models.base import utc_now
from eduflow.services.auth_service import (
    authenticate,
    authenticate_developer,
    resolve_developer,
    resolve_tenant_admin,
)

from conftest import load_superuser, make_center, make_developer, make_superuser, update_superuser


@pytest.fixture
def center_id(crm_db):
    return make_center(crm_db, center_id=7)


def _authenticate(crm_db, login, password):
    session = crm_db.SessionLocal()
    try:
        return authenticate(session, login, password)
    finally:
        session.close()


class TestAuthenticate:

    def test_success_resets_attempts_and_records_login(self, crm_db, center_id):
        user_id = make_superuser(crm_db, center_id, login_attempts=3)

        user = _authenticate(crm_db, "admin", "admin123")

        assert user.superuser_id == user_id
        stored = load_superuser(crm_db, user_id)
        assert stored.login_attempts == 0
        assert stored.last_login is not None

    def test_login_name_is_trimmed_but_password_is_not(self, crm_db, center_id):
        make_superuser(crm_db, center_id)

        assert _authenticate(crm_db, "  admin  ", "admin123").username == "admin"
        with pytest.raises(InvalidCredentials):
            _authenticate(crm_db, "admin", " admin123 ")

    @pytest.mark.parametrize("login,password", [("", "x"), ("   ", "x"), ("admin", ""), (None, None)])
    def test_missing_fields(self, crm_db, center_id, login, password):
        with pytest.raises(ValidationError) as exc_info:
            _authenticate(crm_db, login, password)
        assert exc_info.value.message == "Login and password are required."

    def test_unknown_login_looks_like_wrong_password(self, crm_db, center_id):
        make_superuser(crm_db, center_id)

        with pytest.raises(InvalidCredentials) as unknown:
            _authenticate(crm_db, "nobody", "admin123")
        with pytest.raises(InvalidCredentials) as wrong:
            _authenticate(crm_db, "admin", "wrong")

        assert type(unknown.value) is type(wrong.value)
        assert unknown.value.message == wrong.value.message == "Invalid login or password."

    def test_inactive_account_looks_like_wrong_password(self, crm_db, center_id):
        make_superuser(crm_db, center_id, status="Inactive")

        with pytest.raises(InvalidCredentials) as exc_info:
            _authenticate(crm_db, "admin", "admin123")
        assert exc_info.value.message == "Invalid login or password."

    def test_wrong_password_counts_attempts_without_locking(self, crm_db, center_id):
        user_id = make_superuser(crm_db, center_id)

        for _ in range(7):
            with pytest.raises(InvalidCredentials):
                _authenticate(crm_db, "admin", "wrong")

        stored = load_superuser(crm_db, user_id)
        assert stored.login_attempts == 7
        assert stored.is_locked is False
        # Still usable with the right password
        assert _authenticate(crm_db, "admin", "admin123").superuser_id == user_id


class TestLockout:

    def test_lock_in_future_rejects_correct_password(self, crm_db, center_id):
        user_id = make_superuser(
            crm_db, center_id,
            is_locked=True, locked_until=utc_now() + timedelta(hours=1), login_attempts=5,
        )

        with pytest.raises(AccountLocked) as exc_info:
            _authenticate(crm_db, "admin", "admin123")

        assert exc_info.value.message == "Account is locked. Please contact your administrator."
        stored = load_superuser(crm_db, user_id)
        assert stored.is_locked is True
        assert stored.login_attempts == 5

    def test_lock_without_expiry_is_indefinite(self, crm_db, center_id):
        make_superuser(crm_db, center_id, is_locked=True, locked_until=None)

        with pytest.raises(AccountLocked):
            _authenticate(crm_db, "admin", "admin123")

    def test_expired_lock_unlocks_and_succeeds(self, crm_db, center_id):
        user_id = make_superuser(
            crm_db, center_id,
            is_locked=True, locked_until=utc_now() - timedelta(minutes=1), login_attempts=5,
        )

        user = _authenticate(crm_db, "admin", "admin123")

        assert user.superuser_id == user_id
        stored = load_superuser(crm_db, user_id)
        assert stored.is_locked is False
        assert stored.locked_until is None
        assert stored.login_attempts == 0

    def test_expired_lock_with_wrong_password_unlocks_then_counts(self, crm_db, center_id):
        user_id = make_superuser(
            crm_db, center_id,
            is_locked=True, locked_until=utc_now() - timedelta(minutes=1), login_attempts=5,
        )

        with pytest.raises(InvalidCredentials):
            _authenticate(crm_db, "admin", "wrong")

        stored = load_superuser(crm_db, user_id)
        assert stored.is_locked is False
        assert stored.login_attempts == 1


class TestResolve:

    def test_resolves_live_account(self, crm_db, center_id):
        user_id = make_superuser(
            crm_db, center_id,
            first_name="Sarah", last_name="Mitchell",
            permissions={"crm": True, "cdi": False, "plan": "Basic"},
        )
        principal = TenantAdminPrincipal(subject_id=user_id, login="admin", role="superadmin", center_id=center_id)

        session = crm_db.SessionLocal()
        try:
            identity = resolve_tenant_admin(session, principal)
        finally:
            session.close()

        assert identity.center_id == center_id
        assert identity.to_user() == {
            "id": user_id,
            "login": "admin",
            "role": "superadmin",
            "displayName": "Sarah Mitchell",
            "centerId": center_id,
            "platformAccess": {"crm": True, "cdi": False, "cefr_speaking": False},
        }

    @pytest.mark.parametrize("change", [{"status": "Inactive"}, {"status": "Suspended"}, {"is_locked": True}])
    def test_revoked_account_is_rejected(self, crm_db, center_id, change):
        user_id = make_superuser(crm_db, center_id)
        update_superuser(crm_db, user_id, **change)
        principal = TenantAdminPrincipal(subject_id=user_id, login="admin", role="superadmin", center_id=center_id)

        session = crm_db.SessionLocal()
        try:
            with pytest.raises(InvalidSession):
                resolve_tenant_admin(session, principal)
        finally:
            session.close()

    def test_deleted_account_is_rejected(self, crm_db, center_id):
        principal = TenantAdminPrincipal(subject_id=999, login="ghost", role="superadmin", center_id=center_id)
        session = crm_db.SessionLocal()
        try:
            with pytest.raises(InvalidSession):
                resolve_tenant_admin(session, principal)
        finally:
            session.close()


class TestDeveloper:

    def test_bcrypt_login(self, app_db):
        dev_id = make_developer(app_db)
        session = app_db.SessionLocal()
        try:
            dev_user = authenticate_developer(session, "devuser", "devpass")
            assert dev_user.id == dev_id
            assert dev_user.last_login is not None
        finally:
            session.close()

    def test_wrong_password_and_inactive(self, app_db):
        make_developer(app_db)
        make_developer(app_db, username="retired", is_active=False)
        session = app_db.SessionLocal()
        try:
            with pytest.raises(InvalidCredentials):
                authenticate_developer(session, "devuser", "nope")
            with pytest.raises(InvalidCredentials):
                authenticate_developer(session, "retired", "devpass")
        finally:
            session.close()

    def test_inactive_developer_session(self, app_db):
        dev_id = make_developer(app_db, is_active=False)
        session = app_db.SessionLocal()
        try:
            with pytest.raises(InvalidSession):
                resolve_developer(session, DeveloperPrincipal(subject_id=dev_id, username="devuser"))
        finally:
            session.close()
