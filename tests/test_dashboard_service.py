"""
Reporting query tests against a seeded in-memory CRM store.
"""
from datetime import date, datetime, timedelta
from decimal import Decimal

import pytest

from eduflow.models import Assignment, CrmClass, CrmTest, Debt, Payment, Student
from eduflow.services import dashboard_service
from eduflow.services.dashboard_service import format_day_label, format_relative, format_time_label, month_start

from conftest import make_center

NOW = datetime(2026, 3, 15, 12, 0, 0)


@pytest.fixture
def centers(crm_db):
    return make_center(crm_db, 7, name="North Campus", code="NORTH"), make_center(crm_db, 3, name="South Campus", code="SOUTH")


@pytest.fixture
def db(crm_db, centers):
    with crm_db.session() as session:
        yield session


def add_student(db, center_id, status="Active", created_at=NOW, class_id=None, first="Ada", last="Lovelace", ref=None):
    student = Student(
        center_id=center_id,
        class_id=class_id,
        first_name=first,
        last_name=last,
        status=status,
        enrollment_number=ref,
        created_at=created_at,
    )
    db.add(student)
    db.flush()
    return student


def add_payment(db, student, amount, payment_date=NOW.date(), status="Completed", created_at=NOW, ref=None):
    payment = Payment(
        student_id=student.student_id,
        center_id=student.center_id,
        payment_date=payment_date,
        amount=Decimal(str(amount)),
        payment_status=status,
        receipt_number=ref,
        created_at=created_at,
    )
    db.add(payment)
    db.flush()
    return payment


class TestHelpers:

    def test_month_start(self):
        assert month_start(date(2026, 3, 15)) == date(2026, 3, 1)
        assert month_start(date(2026, 3, 15), 5) == date(2025, 10, 1)
        assert month_start(date(2026, 12, 31), -1) == date(2027, 1, 1)

    def test_day_label(self):
        assert format_day_label(NOW + timedelta(hours=2), NOW) == "Today"
        assert format_day_label(NOW + timedelta(days=1), NOW) == "Tomorrow"
        assert format_day_label(datetime(2026, 4, 2, 9, 0), NOW) == "Apr 2"

    def test_time_label(self):
        assert format_time_label(datetime(2026, 3, 10, 9, 5)) == "09:05 AM"
        assert format_time_label(datetime(2026, 3, 10, 14, 30)) == "02:30 PM"

    def test_relative_time(self):
        assert format_relative(NOW - timedelta(seconds=30), NOW) == "30s ago"
        assert format_relative(NOW - timedelta(seconds=90), NOW) == "1 min ago"
        assert format_relative(NOW - timedelta(hours=3), NOW) == "3 hr ago"
        assert format_relative(NOW - timedelta(days=1), NOW) == "1 day ago"
        assert format_relative(NOW - timedelta(days=4), NOW) == "4 days ago"
        # Clock skew never yields a negative age
        assert format_relative(NOW + timedelta(seconds=5), NOW) == "0s ago"


class TestStats:

    def test_scoped_to_center(self, db):
        north = add_student(db, 7)
        add_student(db, 7, status="Inactive")
        south = add_student(db, 3)
        db.add(CrmClass(center_id=7, class_name="IELTS A"))
        db.add(CrmClass(center_id=3, class_name="IELTS B"))
        add_payment(db, north, 150.50)
        add_payment(db, north, 99.50, payment_date=date(2026, 2, 28))
        add_payment(db, north, 40, status="Pending")
        add_payment(db, south, 1000)
        db.add(Debt(student_id=north.student_id, center_id=7, debt_amount=300, amount_paid=100, balance=200))
        db.add(Debt(student_id=south.student_id, center_id=3, debt_amount=500, amount_paid=0, balance=500))
        db.flush()

        stats = dashboard_service.get_stats(db, 7, today=NOW.date())

        assert stats == {
            "totalStudents": 1,
            "activeClasses": 1,
            "monthlyRevenue": 150.5,
            "outstandingDebt": 200,
        }

    def test_empty_center(self, db):
        assert dashboard_service.get_stats(db, 7, today=NOW.date()) == {
            "totalStudents": 0,
            "activeClasses": 0,
            "monthlyRevenue": 0,
            "outstandingDebt": 0,
        }


class TestTrends:

    def test_enrollment_trend(self, db):
        add_student(db, 7, created_at=datetime(2026, 3, 1, 8, 0))
        add_student(db, 7, created_at=datetime(2026, 3, 10, 8, 0))
        add_student(db, 7, created_at=datetime(2025, 10, 5, 8, 0))
        add_student(db, 7, created_at=datetime(2025, 9, 30, 8, 0))  # outside the window
        add_student(db, 3, created_at=datetime(2026, 3, 2, 8, 0))

        trend = dashboard_service.get_enrollment_trend(db, 7, now=NOW)

        assert trend == [{"month": "Oct", "students": 1}, {"month": "Mar", "students": 2}]

    def test_payments_trend(self, db):
        student = add_student(db, 7)
        add_payment(db, student, 10.25, payment_date=date(2026, 1, 3))
        add_payment(db, student, 20.5, payment_date=date(2026, 1, 20))
        add_payment(db, student, 50, payment_date=date(2025, 8, 1))
        add_payment(db, student, 75, payment_date=date(2025, 7, 31))  # outside the window
        add_payment(db, student, 500, payment_date=date(2026, 1, 4), status="Refunded")

        trend = dashboard_service.get_payments_trend(db, 7, now=NOW)

        assert trend == [{"month": "Aug", "total": 50.0}, {"month": "Jan", "total": 30.75}]


class TestStudents:

    def test_status_colors(self, db):
        add_student(db, 7)
        add_student(db, 7)
        add_student(db, 7, status="Graduated")
        add_student(db, 7, status="OnHold")
        add_student(db, 3, status="Removed")

        rows = dashboard_service.get_student_status(db, 7)

        assert rows == [
            {"name": "Active", "value": 2, "color": "#00F0FF"},
            {"name": "Graduated", "value": 1, "color": "#3b82f6"},
            {"name": "OnHold", "value": 1, "color": "#94a3b8"},
        ]

    def test_overview(self, db):
        paid = add_student(db, 7)
        owing = add_student(db, 7)
        add_student(db, 7, status="Inactive")
        add_payment(db, paid, 100)
        add_payment(db, paid, 50)
        db.add(Debt(student_id=owing.student_id, center_id=7, debt_amount=80, amount_paid=0, balance=80))
        db.add(Debt(student_id=paid.student_id, center_id=7, debt_amount=80, amount_paid=80, balance=0))
        db.flush()

        rows = dashboard_service.get_student_overview(db, 7)

        assert rows == [
            {"label": "Total Students", "value": 3},
            {"label": "Active", "value": 2},
            {"label": "Paid Fees", "value": 1},
            {"label": "With Debts", "value": 1},
        ]


class TestUpcoming:

    def test_falls_back_to_assignments(self, db):
        klass = CrmClass(center_id=7, class_name="Speaking Club")
        other = CrmClass(center_id=3, class_name="Other Center")
        db.add_all([klass, other])
        db.flush()
        add_student(db, 7, class_id=klass.class_id)
        add_student(db, 7, class_id=klass.class_id)
        add_student(db, 7, class_id=klass.class_id, status="Inactive")
        db.add_all([
            Assignment(class_id=klass.class_id, assignment_title="Essay", due_date=NOW + timedelta(days=1, hours=-3)),
            Assignment(class_id=klass.class_id, assignment_title="Done", due_date=NOW + timedelta(days=2), status="Graded"),
            Assignment(class_id=klass.class_id, assignment_title="Late", due_date=NOW - timedelta(days=1)),
            Assignment(class_id=other.class_id, assignment_title="Foreign", due_date=NOW + timedelta(hours=1)),
        ])
        db.flush()

        events = dashboard_service.get_upcoming(db, 7, now=NOW)

        assert events == [{
            "id": 1,
            "title": "Essay",
            "subtitle": "Speaking Club",
            "time": "09:00 AM",
            "date": "Tomorrow",
            "students": 2,
        }]

    def test_prefers_tests(self, db):
        klass = CrmClass(center_id=7, class_name="Speaking Club")
        db.add(klass)
        db.flush()
        db.add(Assignment(class_id=klass.class_id, assignment_title="Essay", due_date=NOW + timedelta(hours=1)))
        for i in range(5):
            db.add(CrmTest(
                center_id=7,
                test_name=f"Mock {i}",
                test_type="CEFR",
                duration_minutes=90,
                start_date=NOW + timedelta(days=i, hours=1),
            ))
        db.add(CrmTest(center_id=7, test_name="Disabled", start_date=NOW + timedelta(minutes=5), is_active=False))
        db.add(CrmTest(center_id=3, test_name="Foreign", start_date=NOW + timedelta(minutes=5)))
        db.flush()

        events = dashboard_service.get_upcoming(db, 7, now=NOW)

        assert [e["title"] for e in events] == ["Mock 0", "Mock 1", "Mock 2", "Mock 3"]
        assert events[0] == {
            "id": 1,
            "title": "Mock 0",
            "subtitle": "CEFR",
            "time": "01:00 PM",
            "date": "Today",
            "durationMin": 90,
        }

    def test_nothing_scheduled(self, db):
        assert dashboard_service.get_upcoming(db, 7, now=NOW) == []


class TestRecentActivity:

    def test_merged_newest_first(self, db):
        for i in range(6):
            add_student(db, 7, first=f"Student{i}", last="Seven", ref=f"ENR-{i}", created_at=NOW - timedelta(hours=6 - i))
        payer = db.query(Student).filter(Student.enrollment_number == "ENR-0").one()
        add_payment(db, payer, 120, ref="RCP-1", created_at=NOW - timedelta(seconds=90))
        add_payment(db, payer, 60, ref="RCP-2", status="Pending", created_at=NOW - timedelta(seconds=10))
        add_student(db, 3, first="Foreign", last="Student", ref="ENR-X", created_at=NOW - timedelta(seconds=5))

        activity = dashboard_service.get_recent_activity(db, 7, now=NOW)

        assert len(activity) == 5
        assert activity[0] == {
            "type": "payment",
            "name": "Student0 Seven",
            "ref": "RCP-1",
            "amount": 120,
            "time": "1 min ago",
        }
        assert [a["ref"] for a in activity[1:]] == ["ENR-5", "ENR-4", "ENR-3", "ENR-2"]
        assert activity[1]["time"] == "1 hr ago"
        assert all(a["amount"] is None for a in activity[1:])
