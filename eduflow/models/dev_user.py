# eduflow/models/dev_user.py
"""
Developer-portal account.
System-wide principal (no tenant, no lockout policy).
"""
from sqlalchemy import Column, Integer, String, Boolean, DateTime
from eduflow.models.base import AppBase, utc_now


class DevUser(AppBase):
    __tablename__ = "dev_users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(100), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    display_name = Column(String(200), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    last_login = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utc_now, nullable=False)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now, nullable=False)

    def __repr__(self):
        return f"<DevUser {self.username}>"
