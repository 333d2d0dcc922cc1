# eduflow/services/dashboard_service.py
"""
Tenant-scoped reporting queries for the admin dashboard.

Every function takes the center id of the resolved identity and filters on
it. The center id never comes from the request.
"""
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from eduflow.models.base import utc_now
from eduflow.models.reporting import Assignment, CrmClass, CrmTest, Debt, Payment, Student

STUDENT_STATUS_COLORS = {
    "Active": "#00F0FF",
    "Inactive": "#eab308",
    "Graduated": "#3b82f6",
    "Removed": "#6b7280",
}
DEFAULT_STATUS_COLOR = "#94a3b8"

ENROLLMENT_TREND_MONTHS = 6
PAYMENTS_TREND_MONTHS = 8
UPCOMING_LIMIT = 4
RECENT_ACTIVITY_LIMIT = 5


def _number(value: Any) -> float:
    if value is None:
        return 0
    if isinstance(value, Decimal):
        value = float(value)
    return int(value) if float(value).is_integer() else float(value)


def month_start(day: date, months_back: int = 0) -> date:
    """First day of the month ``months_back`` months before ``day``."""
    index = day.year * 12 + (day.month - 1) - months_back
    return date(index // 12, index % 12 + 1, 1)


def _month_key(value) -> date:
    return date(value.year, value.month, 1)


def format_day_label(moment: datetime, now: datetime) -> str:
    if moment.date() == now.date():
        return "Today"
    if moment.date() == (now + timedelta(days=1)).date():
        return "Tomorrow"
    return f"{moment.strftime('%b')} {moment.day}"


def format_time_label(moment: datetime) -> str:
    return moment.strftime("%I:%M %p")


def format_relative(moment: datetime, now: datetime) -> str:
    diff = max(int((now - moment).total_seconds()), 0)
    if diff < 60:
        return f"{diff}s ago"
    if diff < 3600:
        return f"{diff // 60} min ago"
    if diff < 86400:
        return f"{diff // 3600} hr ago"
    days = diff // 86400
    return f"{days} day{'s' if days != 1 else ''} ago"


# ────────────────────────────────────────────
# KPI cards
# ────────────────────────────────────────────

def get_stats(db: Session, center_id: int, today: Optional[date] = None) -> Dict[str, Any]:
    today = today or utc_now().date()
    this_month = month_start(today)
    next_month = month_start(this_month, -1)

    total_students = db.query(func.count(Student.student_id)).filter(
        Student.center_id == center_id,
        Student.status == "Active",
    ).scalar()

    active_classes = db.query(func.count(CrmClass.class_id)).filter(
        CrmClass.center_id == center_id
    ).scalar()

    monthly_revenue = db.query(func.coalesce(func.sum(Payment.amount), 0)).filter(
        Payment.center_id == center_id,
        Payment.payment_status == "Completed",
        Payment.payment_date >= this_month,
        Payment.payment_date < next_month,
    ).scalar()

    outstanding_debt = db.query(func.coalesce(func.sum(Debt.balance), 0)).filter(
        Debt.center_id == center_id,
        Debt.balance > 0,
    ).scalar()

    return {
        "totalStudents": int(total_students or 0),
        "activeClasses": int(active_classes or 0),
        "monthlyRevenue": _number(monthly_revenue),
        "outstandingDebt": _number(outstanding_debt),
    }


# ────────────────────────────────────────────
# Trends
# ────────────────────────────────────────────

def get_enrollment_trend(db: Session, center_id: int, now: Optional[datetime] = None) -> List[Dict[str, Any]]:
    """New students per month over the last six months (months with data only)."""
    now = now or utc_now()
    start = month_start(now.date(), ENROLLMENT_TREND_MONTHS - 1)

    rows = db.query(Student.created_at).filter(
        Student.center_id == center_id,
        Student.created_at >= datetime(start.year, start.month, 1),
    ).all()

    counts: Dict[date, int] = {}
    for (created_at,) in rows:
        key = _month_key(created_at)
        counts[key] = counts.get(key, 0) + 1

    return [
        {"month": key.strftime("%b"), "students": counts[key]}
        for key in sorted(counts)
    ]


def get_payments_trend(db: Session, center_id: int, now: Optional[datetime] = None) -> List[Dict[str, Any]]:
    """Completed payment totals per month over the last eight months."""
    now = now or utc_now()
    start = month_start(now.date(), PAYMENTS_TREND_MONTHS - 1)

    rows = db.query(Payment.payment_date, Payment.amount).filter(
        Payment.center_id == center_id,
        Payment.payment_status == "Completed",
        Payment.payment_date >= start,
    ).all()

    totals: Dict[date, Decimal] = {}
    for payment_date, amount in rows:
        key = _month_key(payment_date)
        totals[key] = totals.get(key, Decimal("0")) + Decimal(str(amount or 0))

    return [
        {"month": key.strftime("%b"), "total": round(float(totals[key]), 2)}
        for key in sorted(totals)
    ]


# ────────────────────────────────────────────
# Student breakdowns
# ────────────────────────────────────────────

def get_student_status(db: Session, center_id: int) -> List[Dict[str, Any]]:
    rows = (
        db.query(Student.status, func.count(Student.student_id))
        .filter(Student.center_id == center_id)
        .group_by(Student.status)
        .order_by(Student.status)
        .all()
    )
    return [
        {
            "name": status,
            "value": int(count),
            "color": STUDENT_STATUS_COLORS.get(status, DEFAULT_STATUS_COLOR),
        }
        for status, count in rows
    ]


def get_student_overview(db: Session, center_id: int) -> List[Dict[str, Any]]:
    total = db.query(func.count(Student.student_id)).filter(Student.center_id == center_id).scalar()
    active = db.query(func.count(Student.student_id)).filter(
        Student.center_id == center_id,
        Student.status == "Active",
    ).scalar()
    paid = db.query(func.count(func.distinct(Payment.student_id))).filter(
        Payment.center_id == center_id,
        Payment.payment_status == "Completed",
    ).scalar()
    with_debts = db.query(func.count(func.distinct(Debt.student_id))).filter(
        Debt.center_id == center_id,
        Debt.balance > 0,
    ).scalar()

    return [
        {"label": "Total Students", "value": int(total or 0)},
        {"label": "Active", "value": int(active or 0)},
        {"label": "Paid Fees", "value": int(paid or 0)},
        {"label": "With Debts", "value": int(with_debts or 0)},
    ]


# ────────────────────────────────────────────
# Upcoming events / recent activity
# ────────────────────────────────────────────

def get_upcoming(db: Session, center_id: int, now: Optional[datetime] = None) -> List[Dict[str, Any]]:
    """
    Up to four upcoming active tests; falls back to pending assignments
    when no test is scheduled.
    """
    now = now or utc_now()

    tests = (
        db.query(CrmTest)
        .filter(
            CrmTest.center_id == center_id,
            CrmTest.is_active.is_(True),
            CrmTest.start_date >= now,
        )
        .order_by(CrmTest.start_date)
        .limit(UPCOMING_LIMIT)
        .all()
    )
    if tests:
        return [
            {
                "id": i + 1,
                "title": test.test_name,
                "subtitle": test.test_type,
                "time": format_time_label(test.start_date),
                "date": format_day_label(test.start_date, now),
                "durationMin": test.duration_minutes,
            }
            for i, test in enumerate(tests)
        ]

    active_students = (
        db.query(func.count(Student.student_id))
        .filter(Student.class_id == Assignment.class_id, Student.status == "Active")
        .correlate(Assignment)
        .scalar_subquery()
    )
    rows = (
        db.query(Assignment.assignment_title, Assignment.due_date, CrmClass.class_name, active_students)
        .join(CrmClass, CrmClass.class_id == Assignment.class_id)
        .filter(
            CrmClass.center_id == center_id,
            Assignment.due_date >= now,
            Assignment.status == "Pending",
        )
        .order_by(Assignment.due_date)
        .limit(UPCOMING_LIMIT)
        .all()
    )
    return [
        {
            "id": i + 1,
            "title": title,
            "subtitle": class_name or "Assignment",
            "time": format_time_label(due_date),
            "date": format_day_label(due_date, now),
            "students": int(students or 0),
        }
        for i, (title, due_date, class_name, students) in enumerate(rows)
    ]


def get_recent_activity(db: Session, center_id: int, now: Optional[datetime] = None) -> List[Dict[str, Any]]:
    """Latest enrollments and completed payments, merged newest first."""
    now = now or utc_now()

    enrollments = (
        db.query(Student)
        .filter(Student.center_id == center_id)
        .order_by(Student.created_at.desc())
        .limit(RECENT_ACTIVITY_LIMIT)
        .all()
    )
    payments = (
        db.query(Payment, Student)
        .join(Student, Student.student_id == Payment.student_id)
        .filter(
            Payment.center_id == center_id,
            Payment.payment_status == "Completed",
        )
        .order_by(Payment.created_at.desc())
        .limit(RECENT_ACTIVITY_LIMIT)
        .all()
    )

    events = [
        {
            "type": "enrollment",
            "name": f"{s.first_name} {s.last_name}",
            "ref": s.enrollment_number,
            "amount": None,
            "created_at": s.created_at,
        }
        for s in enrollments
    ]
    events.extend(
        {
            "type": "payment",
            "name": f"{s.first_name} {s.last_name}",
            "ref": p.receipt_number,
            "amount": _number(p.amount) if p.amount else None,
            "created_at": p.created_at,
        }
        for p, s in payments
    )
    events.sort(key=lambda e: e["created_at"], reverse=True)

    return [
        {
            "type": e["type"],
            "name": e["name"],
            "ref": e["ref"],
            "amount": e["amount"],
            "time": format_relative(e["created_at"], now),
        }
        for e in events[:RECENT_ACTIVITY_LIMIT]
    ]
