# eduflow/services/auth_service.py
"""
Credential verification, lockout policy and session re-validation.

Login:
    ``authenticate`` decides a tenant-admin login attempt and maintains the
    lock / attempt-counter state. ``authenticate_developer`` does the same
    for developer-portal accounts (no lockout policy).

Sessions:
    A valid token is necessary but not sufficient. ``resolve_tenant_admin``
    and ``resolve_developer`` re-read the account on every request, so
    deactivating or locking an account takes effect on the next request even
    though already-issued tokens stay cryptographically valid.

Failed attempts only increment ``login_attempts``; nothing here sets the lock
flag. Locking is done by an administrator (developer portal) or an external
process.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from eduflow.core.errors import AccountLocked, InvalidCredentials, InvalidSession, ValidationError
from eduflow.core.jwt_auth import DeveloperPrincipal, TenantAdminPrincipal, DEVELOPER_ROLE
from eduflow.core.logging_config import get_auth_logger
from eduflow.core.permissions import PlatformAccess, derive_permissions
from eduflow.core.security import verify_password, verify_superuser_password
from eduflow.models.base import as_naive_utc, utc_now
from eduflow.models.dev_user import DevUser
from eduflow.models.superuser import Superuser

log = get_auth_logger()

LOGIN_REQUIRED_MESSAGE = "Login and password are required."
DEV_LOGIN_REQUIRED_MESSAGE = "Username and password are required."
DEV_INVALID_MESSAGE = "Invalid username or password."


@dataclass
class ResolvedIdentity:
    """Identity attached to a request after live re-validation."""
    id: int
    login: str
    role: str
    center_id: Optional[int] = None
    display_name: Optional[str] = None
    platform_access: Optional[PlatformAccess] = None

    def to_user(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "login": self.login,
            "role": self.role,
            "displayName": self.display_name or self.login,
            "centerId": self.center_id,
            "platformAccess": (self.platform_access or PlatformAccess()).model_dump(),
        }

    def to_dev_user(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "username": self.login,
            "displayName": self.display_name or self.login,
            "role": self.role,
        }


def identity_for_superuser(user: Superuser) -> ResolvedIdentity:
    return ResolvedIdentity(
        id=user.superuser_id,
        login=user.username,
        role=user.role,
        center_id=user.center_id,
        display_name=user.display_name,
        platform_access=derive_permissions(user.permissions),
    )


def identity_for_developer(dev_user: DevUser) -> ResolvedIdentity:
    return ResolvedIdentity(
        id=dev_user.id,
        login=dev_user.username,
        role=DEVELOPER_ROLE,
        display_name=dev_user.display_name or dev_user.username,
    )


# ────────────────────────────────────────────
# Tenant admin login
# ────────────────────────────────────────────

def _lock_expired(user: Superuser, now: datetime) -> bool:
    if user.locked_until is None:
        return False
    return as_naive_utc(user.locked_until) <= now


def authenticate(db: Session, login: Optional[str], password: Optional[str], now: Optional[datetime] = None) -> Superuser:
    """
    Verify a tenant-admin login attempt.

    Args:
        db: CRM database session
        login: Login name (surrounding whitespace is ignored)
        password: Password, used exactly as given
        now: Current naive-UTC time (injectable for tests)

    Returns:
        The authenticated Superuser

    Raises:
        ValidationError: login or password empty
        InvalidCredentials: unknown login, inactive account or wrong password
            (same message in every case)
        AccountLocked: lock flag set and not yet expired
    """
    login = login.strip() if isinstance(login, str) else ""
    password = password if isinstance(password, str) else ""
    if not login or not password:
        raise ValidationError(LOGIN_REQUIRED_MESSAGE)

    now = now or utc_now()

    user = db.query(Superuser).filter(Superuser.username == login).first()
    if not user:
        log.info(f"Login failed: unknown login '{login}'")
        raise InvalidCredentials()

    if user.is_locked:
        if not _lock_expired(user, now):
            log.warning(f"Login refused: account {user.superuser_id} is locked")
            raise AccountLocked()

        db.query(Superuser).filter(Superuser.superuser_id == user.superuser_id).update(
            {"is_locked": False, "locked_until": None, "login_attempts": 0, "updated_at": now},
            synchronize_session="fetch",
        )
        db.commit()
        log.info(f"Lock expired for account {user.superuser_id}; unlocked")

    if not user.is_active:
        log.info(f"Login failed: account {user.superuser_id} status is {user.status}")
        raise InvalidCredentials()

    if not verify_superuser_password(password, user.password_hash):
        db.query(Superuser).filter(Superuser.superuser_id == user.superuser_id).update(
            {"login_attempts": Superuser.login_attempts + 1, "updated_at": now},
            synchronize_session=False,
        )
        db.commit()
        db.refresh(user)
        log.info(f"Login failed: wrong password for account {user.superuser_id} (attempts={user.login_attempts})")
        raise InvalidCredentials()

    db.query(Superuser).filter(Superuser.superuser_id == user.superuser_id).update(
        {"login_attempts": 0, "last_login": now, "updated_at": now},
        synchronize_session="fetch",
    )
    db.commit()
    db.refresh(user)
    log.info(f"Login succeeded for account {user.superuser_id} (center={user.center_id})")
    return user


def resolve_tenant_admin(db: Session, principal: TenantAdminPrincipal) -> ResolvedIdentity:
    """
    Re-read the token subject from the CRM store.

    Raises:
        InvalidSession: account missing, not active or locked
    """
    user = db.get(Superuser, principal.subject_id)
    if not user or not user.is_active or user.is_locked:
        log.info(f"Session rejected for superuser {principal.subject_id}")
        raise InvalidSession()
    return identity_for_superuser(user)


# ────────────────────────────────────────────
# Developer login
# ────────────────────────────────────────────

def authenticate_developer(db: Session, username: Optional[str], password: Optional[str], now: Optional[datetime] = None) -> DevUser:
    """
    Verify a developer-portal login (bcrypt).

    Raises:
        ValidationError: username or password empty
        InvalidCredentials: unknown, inactive or wrong password
    """
    username = username.strip() if isinstance(username, str) else ""
    password = password if isinstance(password, str) else ""
    if not username or not password:
        raise ValidationError(DEV_LOGIN_REQUIRED_MESSAGE)

    dev_user = db.query(DevUser).filter(DevUser.username == username).first()
    if not dev_user or not dev_user.is_active:
        log.info(f"Developer login failed for '{username}'")
        raise InvalidCredentials(DEV_INVALID_MESSAGE)

    if not verify_password(password, dev_user.password_hash):
        log.info(f"Developer login failed: wrong password for {dev_user.id}")
        raise InvalidCredentials(DEV_INVALID_MESSAGE)

    dev_user.last_login = now or utc_now()
    db.commit()
    db.refresh(dev_user)
    log.info(f"Developer login succeeded for {dev_user.id}")
    return dev_user


def resolve_developer(db: Session, principal: DeveloperPrincipal) -> ResolvedIdentity:
    """
    Re-read the developer account from the app store.

    Raises:
        InvalidSession: account missing or inactive
    """
    dev_user = db.get(DevUser, principal.subject_id)
    if not dev_user or not dev_user.is_active:
        log.info(f"Developer session rejected for {principal.subject_id}")
        raise InvalidSession()
    return identity_for_developer(dev_user)
