# eduflow/services/superadmin_service.py
"""
Developer-portal lifecycle for tenant admin accounts.

Create inserts the center and its first admin in one transaction. Update
merges permission flags into the stored document instead of replacing it.
Delete is a hard delete of the account row only.
"""
import logging
import secrets
import string
from typing import Any, Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from eduflow.core.errors import DuplicateAccount, NotFound, ValidationError
from eduflow.core.permissions import build_permissions, derive_permissions, get_plan, merge_permissions
from eduflow.core.security import hash_superuser_password
from eduflow.models.base import utc_now
from eduflow.models.edu_center import EduCenter
from eduflow.models.superuser import Superuser, ACCOUNT_STATUSES, DEFAULT_ROLE, STATUS_ACTIVE

log = logging.getLogger("eduflow.superadmins")


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def generate_center_code(company_name: str) -> str:
    """Initials of the company name (max 3) plus a random 4-character suffix."""
    words = [w for w in company_name.split() if w and w[0].isalnum()]
    initials = "".join(w[0] for w in words[:3]).upper() or "EC"
    suffix = "".join(secrets.choice(string.ascii_uppercase + string.digits) for _ in range(4))
    return f"{initials}{suffix}"


def serialize_superadmin(user: Superuser) -> Dict[str, Any]:
    center = user.center
    return {
        "id": user.superuser_id,
        "username": user.username,
        "email": user.email,
        "firstName": user.first_name,
        "lastName": user.last_name,
        "role": user.role,
        "status": user.status,
        "isLocked": bool(user.is_locked),
        "lastLogin": user.last_login.isoformat() if user.last_login else None,
        "createdAt": user.created_at.isoformat() if user.created_at else None,
        "centerName": center.center_name if center else None,
        "centerId": user.center_id,
        "city": center.city if center else None,
        "plan": get_plan(user.permissions),
        "platformAccess": derive_permissions(user.permissions).model_dump(),
    }


def list_superadmins(db: Session) -> List[Superuser]:
    return (
        db.query(Superuser)
        .options(joinedload(Superuser.center))
        .order_by(Superuser.created_at.desc(), Superuser.superuser_id.desc())
        .all()
    )


def get_superadmin(db: Session, superuser_id: int) -> Superuser:
    user = db.get(Superuser, superuser_id)
    if not user:
        raise NotFound("Superadmin not found.")
    return user


def create_superadmin(db: Session, data) -> Superuser:
    """
    Create a center and its first admin atomically.

    Raises:
        ValidationError: required field missing
        DuplicateAccount: username or email already taken (nothing is kept)
    """
    username = (data.username or "").strip()
    company_name = (data.companyName or "").strip()
    if not username or not data.password or not company_name:
        raise ValidationError("Username, password and company name are required.")

    email = _blank_to_none(data.email)
    access = data.platformAccess.model_dump() if data.platformAccess else {}

    try:
        center = EduCenter(
            center_name=company_name,
            center_code=generate_center_code(company_name),
            email=email,
            phone=_blank_to_none(data.phone),
            city=_blank_to_none(data.city),
        )
        db.add(center)
        db.flush()

        user = Superuser(
            center_id=center.center_id,
            username=username,
            email=email,
            password_hash=hash_superuser_password(data.password),
            first_name=_blank_to_none(data.firstName),
            last_name=_blank_to_none(data.lastName),
            phone=_blank_to_none(data.phone),
            role=DEFAULT_ROLE,
            status=STATUS_ACTIVE,
            is_locked=False,
            login_attempts=0,
            permissions=build_permissions(access, _blank_to_none(data.plan)),
        )
        db.add(user)
        db.flush()
        db.commit()
    except IntegrityError as e:
        db.rollback()
        log.info(f"Superadmin create conflict for '{username}': {e.orig}")
        raise DuplicateAccount()
    except Exception:
        db.rollback()
        raise

    db.refresh(user)
    log.info(f"Created superadmin {user.superuser_id} for center {user.center_id}")
    return user


def update_superadmin(db: Session, superuser_id: int, data) -> Superuser:
    """
    Apply a partial update.

    Only keys present in ``platformAccess`` are written into the permission
    document; status, plan and lock state change only when supplied.
    """
    user = get_superadmin(db, superuser_id)
    fields = data.model_dump(exclude_unset=True)

    status = fields.get("status")
    if status is not None and status not in ACCOUNT_STATUSES:
        raise ValidationError(f"Status must be one of: {', '.join(ACCOUNT_STATUSES)}.")

    access = fields.get("platformAccess")
    plan = _blank_to_none(fields.get("plan"))
    if access is not None or plan:
        # Re-assign a new dict so the JSON column is flagged dirty
        user.permissions = merge_permissions(user.permissions, access, plan)

    if status is not None:
        user.status = status

    if "isLocked" in fields and fields["isLocked"] is not None:
        if fields["isLocked"]:
            user.is_locked = True
            user.locked_until = None
        else:
            user.is_locked = False
            user.locked_until = None
            user.login_attempts = 0

    user.updated_at = utc_now()
    db.commit()
    db.refresh(user)
    log.info(f"Updated superadmin {superuser_id}: fields={sorted(fields)}")
    return user


def delete_superadmin(db: Session, superuser_id: int) -> None:
    """Hard delete; the owning center row is left in place."""
    # TODO: decide whether deleting a center's last admin should also remove the center
    user = get_superadmin(db, superuser_id)
    db.delete(user)
    db.commit()
    log.info(f"Deleted superadmin {superuser_id}")


def get_stats(db: Session) -> Dict[str, int]:
    total_admins = db.query(func.count(Superuser.superuser_id)).scalar() or 0
    active_admins = (
        db.query(func.count(Superuser.superuser_id))
        .filter(Superuser.status == STATUS_ACTIVE, Superuser.is_locked.is_(False))
        .scalar()
        or 0
    )
    locked_admins = (
        db.query(func.count(Superuser.superuser_id))
        .filter(Superuser.is_locked.is_(True))
        .scalar()
        or 0
    )
    total_centers = db.query(func.count(EduCenter.center_id)).scalar() or 0
    return {
        "totalAdmins": int(total_admins),
        "activeAdmins": int(active_admins),
        "lockedAdmins": int(locked_admins),
        "totalCenters": int(total_centers),
    }
