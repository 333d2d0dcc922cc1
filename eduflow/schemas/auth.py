# eduflow/schemas/auth.py
"""
Login request/response bodies.

Request fields accept any JSON value and the body itself is optional, so a
missing body, a missing field or a non-string value all reach the login
handler and produce the 400 message the client expects, rather than a
generic validation error.
"""
from typing import Any, Optional
from pydantic import BaseModel

from eduflow.core.permissions import PlatformAccess


class LoginRequest(BaseModel):
    login: Any = None
    password: Any = None


class AuthUser(BaseModel):
    id: int
    login: str
    role: str
    displayName: str
    centerId: Optional[int] = None
    platformAccess: PlatformAccess = PlatformAccess()


class LoginResponse(BaseModel):
    token: str
    user: AuthUser


class MeResponse(BaseModel):
    user: AuthUser


class DevLoginRequest(BaseModel):
    username: Any = None
    password: Any = None


class DevUserOut(BaseModel):
    id: int
    username: str
    displayName: str
    role: str


class DevLoginResponse(BaseModel):
    token: str
    devUser: DevUserOut


class DevMeResponse(BaseModel):
    devUser: DevUserOut
