# eduflow/api/v1/dev_auth.py
"""Developer-portal session endpoints."""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Response
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from eduflow.api.deps import get_token_service, require_developer
from eduflow.api.v1.auth import disable_caching
from eduflow.core.errors import InternalError
from eduflow.core.jwt_auth import TokenService
from eduflow.db.session import get_app_db
from eduflow.schemas.auth import DevLoginRequest, DevLoginResponse, DevMeResponse
from eduflow.services.auth_service import ResolvedIdentity, authenticate_developer, identity_for_developer

router = APIRouter()
log = logging.getLogger("eduflow.auth")


@router.post("/login", response_model=DevLoginResponse)
def dev_login(
    data: Optional[DevLoginRequest] = None,
    db: Session = Depends(get_app_db),
    tokens: TokenService = Depends(get_token_service),
):
    """Authenticate a developer account and issue a 12-hour token"""
    data = data or DevLoginRequest()
    try:
        dev_user = authenticate_developer(db, data.username, data.password)
    except SQLAlchemyError as e:
        log.error(f"Developer login error: {e}", exc_info=True)
        raise InternalError("Server error during login.")

    token = tokens.issue_developer_token(dev_user)
    return {"token": token, "devUser": identity_for_developer(dev_user).to_dev_user()}


@router.get("/me", response_model=DevMeResponse)
def dev_me(
    response: Response,
    identity: ResolvedIdentity = Depends(require_developer),
):
    """Current developer account"""
    disable_caching(response)
    return {"devUser": identity.to_dev_user()}
