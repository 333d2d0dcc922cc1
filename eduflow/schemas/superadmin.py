# eduflow/schemas/superadmin.py
from typing import Optional
from pydantic import BaseModel

from eduflow.core.permissions import PlatformAccess


class PlatformAccessPatch(BaseModel):
    """Partial flag update - only supplied keys are written."""
    crm: Optional[bool] = None
    cdi: Optional[bool] = None
    cefr_speaking: Optional[bool] = None


class SuperadminCreate(BaseModel):
    firstName: Optional[str] = None
    lastName: Optional[str] = None
    username: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    companyName: Optional[str] = None
    city: Optional[str] = None
    phone: Optional[str] = None
    plan: Optional[str] = None
    platformAccess: Optional[PlatformAccess] = None


class SuperadminUpdate(BaseModel):
    platformAccess: Optional[PlatformAccessPatch] = None
    status: Optional[str] = None
    plan: Optional[str] = None
    isLocked: Optional[bool] = None


class SuperadminOut(BaseModel):
    id: int
    username: str
    email: Optional[str] = None
    firstName: Optional[str] = None
    lastName: Optional[str] = None
    role: str
    status: str
    isLocked: bool
    lastLogin: Optional[str] = None
    createdAt: Optional[str] = None
    centerName: Optional[str] = None
    centerId: int
    city: Optional[str] = None
    plan: Optional[str] = None
    platformAccess: PlatformAccess


class DevStats(BaseModel):
    totalAdmins: int
    activeAdmins: int
    lockedAdmins: int
    totalCenters: int
