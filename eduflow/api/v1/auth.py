# eduflow/api/v1/auth.py
"""Tenant-admin session endpoints."""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from eduflow.api.deps import get_token_service, require_tenant_admin
from eduflow.core.errors import InternalError
from eduflow.core.jwt_auth import TokenService
from eduflow.db.session import get_crm_db
from eduflow.schemas.auth import LoginRequest, LoginResponse, MeResponse
from eduflow.services.auth_service import ResolvedIdentity, authenticate, identity_for_superuser

router = APIRouter()
log = logging.getLogger("eduflow.auth")

NO_CACHE_HEADERS = {
    "Cache-Control": "no-store, no-cache, must-revalidate, private",
    "Pragma": "no-cache",
    "Expires": "0",
}


def disable_caching(response: Response) -> None:
    for name, value in NO_CACHE_HEADERS.items():
        response.headers[name] = value


@router.post("/login", response_model=LoginResponse)
def login(
    data: Optional[LoginRequest] = None,
    db: Session = Depends(get_crm_db),
    tokens: TokenService = Depends(get_token_service),
):
    """Authenticate a tenant admin and issue an 8-hour bearer token"""
    data = data or LoginRequest()
    try:
        user = authenticate(db, data.login, data.password)
    except SQLAlchemyError as e:
        log.error(f"Login error: {e}", exc_info=True)
        raise InternalError("Server error during login.")

    token = tokens.issue_tenant_admin_token(user)
    return {"token": token, "user": identity_for_superuser(user).to_user()}


@router.get("/me", response_model=MeResponse)
def me(
    response: Response,
    identity: ResolvedIdentity = Depends(require_tenant_admin),
):
    """Current admin, re-read from the CRM database"""
    disable_caching(response)
    return {"user": identity.to_user()}


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
def logout():
    """Stateless: the client discards its token"""
    return Response(status_code=status.HTTP_204_NO_CONTENT)
