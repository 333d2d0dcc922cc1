# eduflow/api/v1/superadmins.py
"""Developer-portal management of tenant admin accounts."""
import logging
from typing import List
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from eduflow.api.deps import require_developer
from eduflow.db.session import get_crm_db
from eduflow.schemas.superadmin import DevStats, SuperadminCreate, SuperadminOut, SuperadminUpdate
from eduflow.services import superadmin_service
from eduflow.services.auth_service import ResolvedIdentity

router = APIRouter()
log = logging.getLogger("eduflow.superadmins")


@router.get("/superadmins", response_model=List[SuperadminOut])
def list_superadmins(
    db: Session = Depends(get_crm_db),
    developer: ResolvedIdentity = Depends(require_developer),
):
    """List all tenant admins, newest first"""
    users = superadmin_service.list_superadmins(db)
    return [superadmin_service.serialize_superadmin(u) for u in users]


@router.post("/superadmins", response_model=SuperadminOut, status_code=status.HTTP_201_CREATED)
def create_superadmin(
    data: SuperadminCreate,
    db: Session = Depends(get_crm_db),
    developer: ResolvedIdentity = Depends(require_developer),
):
    """Create a center and its first admin in one transaction"""
    log.info(f"Developer {developer.id} creating superadmin '{data.username}'")
    user = superadmin_service.create_superadmin(db, data)
    return superadmin_service.serialize_superadmin(user)


@router.patch("/superadmins/{superuser_id}", response_model=SuperadminOut)
def update_superadmin(
    superuser_id: int,
    data: SuperadminUpdate,
    db: Session = Depends(get_crm_db),
    developer: ResolvedIdentity = Depends(require_developer),
):
    """Merge platform access and update status / plan / lock"""
    log.info(f"Developer {developer.id} updating superadmin {superuser_id}")
    user = superadmin_service.update_superadmin(db, superuser_id, data)
    return superadmin_service.serialize_superadmin(user)


@router.delete("/superadmins/{superuser_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_superadmin(
    superuser_id: int,
    db: Session = Depends(get_crm_db),
    developer: ResolvedIdentity = Depends(require_developer),
):
    """Hard delete a tenant admin"""
    log.info(f"Developer {developer.id} deleting superadmin {superuser_id}")
    superadmin_service.delete_superadmin(db, superuser_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/stats", response_model=DevStats)
def get_stats(
    db: Session = Depends(get_crm_db),
    developer: ResolvedIdentity = Depends(require_developer),
):
    """Counts for the developer overview cards"""
    return superadmin_service.get_stats(db)
