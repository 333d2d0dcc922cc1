# eduflow/api/v1/dashboard.py
"""
Read-only dashboard endpoints.

All queries are scoped to the center of the authenticated admin; no request
parameter can change the scope.
"""
import logging
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from eduflow.api.deps import get_current_center_id
from eduflow.core.errors import InternalError
from eduflow.db.session import get_crm_db
from eduflow.services import dashboard_service

router = APIRouter()
log = logging.getLogger("eduflow.dashboard")


@router.get("/stats")
def get_stats(
    db: Session = Depends(get_crm_db),
    center_id: int = Depends(get_current_center_id),
):
    """The four KPI stat cards"""
    try:
        return dashboard_service.get_stats(db, center_id)
    except Exception as e:
        log.error(f"Dashboard stats error (center={center_id}): {e}", exc_info=True)
        raise InternalError("Failed to fetch dashboard stats.")


@router.get("/enrollment-trend")
def get_enrollment_trend(
    db: Session = Depends(get_crm_db),
    center_id: int = Depends(get_current_center_id),
):
    """Monthly new student registrations for the last 6 months"""
    try:
        return dashboard_service.get_enrollment_trend(db, center_id)
    except Exception as e:
        log.error(f"Enrollment trend error (center={center_id}): {e}", exc_info=True)
        raise InternalError("Failed to fetch enrollment trend.")


@router.get("/payments-trend")
def get_payments_trend(
    db: Session = Depends(get_crm_db),
    center_id: int = Depends(get_current_center_id),
):
    """Monthly completed payment totals for the last 8 months"""
    try:
        return dashboard_service.get_payments_trend(db, center_id)
    except Exception as e:
        log.error(f"Payments trend error (center={center_id}): {e}", exc_info=True)
        raise InternalError("Failed to fetch payments trend.")


@router.get("/student-status")
def get_student_status(
    db: Session = Depends(get_crm_db),
    center_id: int = Depends(get_current_center_id),
):
    """Student count grouped by enrollment status"""
    try:
        return dashboard_service.get_student_status(db, center_id)
    except Exception as e:
        log.error(f"Student status error (center={center_id}): {e}", exc_info=True)
        raise InternalError("Failed to fetch student status distribution.")


@router.get("/student-overview")
def get_student_overview(
    db: Session = Depends(get_crm_db),
    center_id: int = Depends(get_current_center_id),
):
    """Total -> Active -> Paid -> With debts"""
    try:
        return dashboard_service.get_student_overview(db, center_id)
    except Exception as e:
        log.error(f"Student overview error (center={center_id}): {e}", exc_info=True)
        raise InternalError("Failed to fetch student overview.")


@router.get("/upcoming")
def get_upcoming(
    db: Session = Depends(get_crm_db),
    center_id: int = Depends(get_current_center_id),
):
    """Upcoming tests, or pending assignments when none are scheduled"""
    try:
        return dashboard_service.get_upcoming(db, center_id)
    except Exception as e:
        log.error(f"Upcoming events error (center={center_id}): {e}", exc_info=True)
        raise InternalError("Failed to fetch upcoming events.")


@router.get("/recent-activity")
def get_recent_activity(
    db: Session = Depends(get_crm_db),
    center_id: int = Depends(get_current_center_id),
):
    """Latest 5 enrollments and payments"""
    try:
        return dashboard_service.get_recent_activity(db, center_id)
    except Exception as e:
        log.error(f"Recent activity error (center={center_id}): {e}", exc_info=True)
        raise InternalError("Failed to fetch recent activity.")
