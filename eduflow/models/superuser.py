# eduflow/models/superuser.py
"""
Tenant admin account ("superuser") in the CRM database.

Lifecycle: created by the developer portal together with its center,
mutated on every login attempt (attempt counter, lock state, last login)
and by developer-portal edits, hard-deleted by the developer portal.
"""
from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from eduflow.models.base import CrmBase, JSONDocument, utc_now

STATUS_ACTIVE = "Active"
STATUS_INACTIVE = "Inactive"
STATUS_SUSPENDED = "Suspended"
ACCOUNT_STATUSES = (STATUS_ACTIVE, STATUS_INACTIVE, STATUS_SUSPENDED)

DEFAULT_ROLE = "superadmin"


class Superuser(CrmBase):
    __tablename__ = "superusers"

    superuser_id = Column(Integer, primary_key=True, index=True)
    center_id = Column(Integer, ForeignKey("edu_centers.center_id"), index=True, nullable=False)

    # Login name is unique across all tenants
    username = Column(String(100), unique=True, index=True, nullable=False)
    email = Column(String(255), unique=True, nullable=True)
    password_hash = Column(String(255), nullable=False)

    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)
    phone = Column(String(50), nullable=True)
    role = Column(String(50), default=DEFAULT_ROLE, nullable=False)
    status = Column(String(20), default=STATUS_ACTIVE, nullable=False)

    # Lockout state
    is_locked = Column(Boolean, default=False, nullable=False)
    locked_until = Column(DateTime, nullable=True)
    login_attempts = Column(Integer, default=0, nullable=False)
    last_login = Column(DateTime, nullable=True)

    # {"crm": bool, "cdi": bool, "cefr_speaking": bool, "plan": str}
    permissions = Column(JSONDocument, nullable=True)

    created_at = Column(DateTime, default=utc_now, nullable=False)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now, nullable=False)

    center = relationship("EduCenter", back_populates="superusers")

    @property
    def display_name(self) -> str:
        parts = [p for p in (self.first_name, self.last_name) if p]
        return " ".join(parts) or self.username

    @property
    def is_active(self) -> bool:
        return self.status == STATUS_ACTIVE

    def __repr__(self):
        return f"<Superuser {self.username} center={self.center_id}>"
