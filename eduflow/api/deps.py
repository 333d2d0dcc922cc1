# eduflow/api/deps.py
"""
API dependencies for authentication and tenant scoping.

Resolving an identity is an explicit pipeline step:
    bearer header -> signature/expiry -> principal kind -> live account check

The resolved identity is stored on ``request.state.identity`` and returned to
the handler. Reporting handlers take the tenant id only from
``get_current_center_id``.
"""
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from eduflow.core.errors import Forbidden, InvalidOrExpiredToken, InvalidSession, MissingToken
from eduflow.core.jwt_auth import DeveloperPrincipal, Principal, TenantAdminPrincipal, TokenService
from eduflow.db.session import get_app_db, get_crm_db
from eduflow.services.auth_service import ResolvedIdentity, resolve_developer, resolve_tenant_admin

# Security scheme (auto_error off so missing tokens get our own message)
security = HTTPBearer(auto_error=False)


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


def get_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    tokens: TokenService = Depends(get_token_service),
) -> Principal:
    """Verify the bearer token and discriminate the principal kind."""
    if not credentials or not credentials.credentials:
        raise MissingToken()

    payload = tokens.decode(credentials.credentials)
    principal = tokens.parse_principal(payload)
    if principal is None:
        raise InvalidOrExpiredToken()
    return principal


# ────────────────────────────────────────────
# Tenant admins
# ────────────────────────────────────────────

def require_tenant_admin(
    request: Request,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_crm_db),
) -> ResolvedIdentity:
    """Tenant-admin endpoints: reject developer tokens, then re-check the account."""
    if not isinstance(principal, TenantAdminPrincipal):
        raise Forbidden("This endpoint requires a tenant admin session.")

    identity = resolve_tenant_admin(db, principal)
    request.state.identity = identity
    return identity


def get_current_center_id(identity: ResolvedIdentity = Depends(require_tenant_admin)) -> int:
    """Tenant scope for reporting queries, taken from the live account."""
    if identity.center_id is None:
        raise InvalidSession()
    return identity.center_id


# ────────────────────────────────────────────
# Developer portal
# ────────────────────────────────────────────

def require_developer(
    request: Request,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_app_db),
) -> ResolvedIdentity:
    """Developer endpoints: only ``role=developer`` tokens, then re-check the account."""
    if not isinstance(principal, DeveloperPrincipal):
        raise Forbidden("Developer access required.")

    identity = resolve_developer(db, principal)
    request.state.identity = identity
    return identity
