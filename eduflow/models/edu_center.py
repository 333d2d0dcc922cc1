# eduflow/models/edu_center.py
"""Tenant ("edu center") - root of CRM multi-tenancy."""
from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.orm import relationship
from eduflow.models.base import CrmBase, utc_now


class EduCenter(CrmBase):
    __tablename__ = "edu_centers"

    center_id = Column(Integer, primary_key=True, index=True)
    center_name = Column(String(200), nullable=False)
    center_code = Column(String(50), unique=True, nullable=False)
    email = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    address = Column(String(255), nullable=True)
    city = Column(String(100), nullable=True)
    principal_name = Column(String(200), nullable=True)
    created_at = Column(DateTime, default=utc_now, nullable=False)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now, nullable=False)

    superusers = relationship("Superuser", back_populates="center")

    def __repr__(self):
        return f"<EduCenter {self.center_code}>"
