# eduflow/core/jwt_auth.py
"""
JWT issuance and decoding for both principal types.

Tenant admins and developer accounts share one signing secret. Which kind of
principal a token belongs to is carried in its claims (``typ`` and ``role``)
and decided by ``principal_kind``; callers never infer it from other fields.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional, Union

import jwt

from eduflow.core.errors import InvalidOrExpiredToken
from eduflow.core.logging_config import mask_secret

log = logging.getLogger("eduflow.auth")

TENANT_ADMIN = "tenant_admin"
DEVELOPER = "developer"
DEVELOPER_ROLE = "developer"


@dataclass(frozen=True)
class TenantAdminPrincipal:
    subject_id: int
    login: str
    role: str
    center_id: Optional[int]
    kind: str = TENANT_ADMIN


@dataclass(frozen=True)
class DeveloperPrincipal:
    subject_id: int
    username: str
    role: str = DEVELOPER_ROLE
    kind: str = DEVELOPER


Principal = Union[TenantAdminPrincipal, DeveloperPrincipal]


def principal_kind(payload: Dict[str, Any]) -> Optional[str]:
    """
    Discriminate a decoded payload into a principal kind.

    A developer token must carry both ``typ=developer`` and
    ``role=developer``. A ``typ=tenant_admin`` token is a tenant admin whatever
    its role claim says. Anything else is not a recognised principal.
    """
    typ = payload.get("typ")
    role = payload.get("role")
    if typ == DEVELOPER and role == DEVELOPER_ROLE:
        return DEVELOPER
    if typ == TENANT_ADMIN:
        return TENANT_ADMIN
    return None


class TokenService:
    """Signs and verifies bearer tokens with the server-held secret."""

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        admin_lifetime_hours: int = 8,
        dev_lifetime_hours: int = 12,
    ):
        self.secret = secret
        self.algorithm = algorithm
        self.admin_lifetime = timedelta(hours=admin_lifetime_hours)
        self.dev_lifetime = timedelta(hours=dev_lifetime_hours)

    @classmethod
    def from_settings(cls, settings) -> "TokenService":
        return cls(
            secret=settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
            admin_lifetime_hours=settings.admin_token_lifetime_hours,
            dev_lifetime_hours=settings.dev_token_lifetime_hours,
        )

    def _encode(self, claims: Dict[str, Any], lifetime: timedelta) -> str:
        now = datetime.now(timezone.utc)
        payload = dict(claims)
        payload["iat"] = int(now.timestamp())
        payload["exp"] = int((now + lifetime).timestamp())
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def issue_tenant_admin_token(self, superuser) -> str:
        """Token for a CRM superuser, valid for the admin lifetime."""
        return self._encode(
            {
                "sub": str(superuser.superuser_id),
                "login": superuser.username,
                "role": superuser.role,
                "centerId": superuser.center_id,
                "typ": TENANT_ADMIN,
            },
            self.admin_lifetime,
        )

    def issue_developer_token(self, dev_user) -> str:
        """Token for a developer-portal account; carries no tenant."""
        return self._encode(
            {
                "sub": str(dev_user.id),
                "login": dev_user.username,
                "role": DEVELOPER_ROLE,
                "typ": DEVELOPER,
            },
            self.dev_lifetime,
        )

    def decode(self, token: str) -> Dict[str, Any]:
        """
        Verify signature and expiry.

        Raises:
            InvalidOrExpiredToken: on any signature, expiry or format problem
        """
        try:
            return jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                options={"require": ["exp", "sub"]},
            )
        except jwt.ExpiredSignatureError:
            log.info("Rejected expired token")
            raise InvalidOrExpiredToken()
        except jwt.InvalidTokenError as e:
            log.info(f"Rejected invalid token {mask_secret(token)}: {type(e).__name__}")
            raise InvalidOrExpiredToken()

    def parse_principal(self, payload: Dict[str, Any]) -> Optional[Principal]:
        """Turn a verified payload into a typed principal, or None if unrecognised."""
        kind = principal_kind(payload)
        try:
            subject_id = int(payload["sub"])
        except (KeyError, TypeError, ValueError):
            return None

        if kind == DEVELOPER:
            return DeveloperPrincipal(subject_id=subject_id, username=str(payload.get("login") or ""))
        if kind == TENANT_ADMIN:
            center_id = payload.get("centerId")
            return TenantAdminPrincipal(
                subject_id=subject_id,
                login=str(payload.get("login") or ""),
                role=str(payload.get("role") or ""),
                center_id=int(center_id) if center_id is not None else None,
            )
        return None
