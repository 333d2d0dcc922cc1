# eduflow/models/reporting.py
"""
CRM reporting tables read by the dashboard.

Only the columns the dashboard queries touch are mapped. Every table carries
``center_id`` except assignments, which belong to a tenant through their class.
"""
from sqlalchemy import Column, Integer, String, Boolean, DateTime, Date, Numeric, ForeignKey
from eduflow.models.base import CrmBase, utc_now


class CrmClass(CrmBase):
    __tablename__ = "classes"

    class_id = Column(Integer, primary_key=True)
    center_id = Column(Integer, ForeignKey("edu_centers.center_id"), index=True, nullable=False)
    class_name = Column(String(200), nullable=False)
    class_code = Column(String(50), unique=True, nullable=True)
    created_at = Column(DateTime, default=utc_now, nullable=False)


class Student(CrmBase):
    __tablename__ = "students"

    student_id = Column(Integer, primary_key=True)
    center_id = Column(Integer, ForeignKey("edu_centers.center_id"), index=True, nullable=False)
    class_id = Column(Integer, ForeignKey("classes.class_id"), nullable=True)
    enrollment_number = Column(String(50), unique=True, nullable=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    status = Column(String(20), default="Active", nullable=False)  # Active, Inactive, Graduated, Removed
    created_at = Column(DateTime, default=utc_now, nullable=False)


class Payment(CrmBase):
    __tablename__ = "payments"

    payment_id = Column(Integer, primary_key=True)
    student_id = Column(Integer, ForeignKey("students.student_id"), nullable=False)
    center_id = Column(Integer, ForeignKey("edu_centers.center_id"), index=True, nullable=False)
    payment_date = Column(Date, nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    receipt_number = Column(String(50), unique=True, nullable=True)
    payment_status = Column(String(20), default="Completed", nullable=False)
    created_at = Column(DateTime, default=utc_now, nullable=False)


class Debt(CrmBase):
    __tablename__ = "debts"

    debt_id = Column(Integer, primary_key=True)
    student_id = Column(Integer, ForeignKey("students.student_id"), nullable=False)
    center_id = Column(Integer, ForeignKey("edu_centers.center_id"), index=True, nullable=False)
    debt_amount = Column(Numeric(12, 2), nullable=False, default=0)
    amount_paid = Column(Numeric(12, 2), nullable=False, default=0)
    balance = Column(Numeric(12, 2), nullable=False, default=0)


class CrmTest(CrmBase):
    __tablename__ = "tests"

    test_id = Column(Integer, primary_key=True)
    center_id = Column(Integer, ForeignKey("edu_centers.center_id"), index=True, nullable=False)
    test_name = Column(String(200), nullable=False)
    test_type = Column(String(50), nullable=True)
    duration_minutes = Column(Integer, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    start_date = Column(DateTime, nullable=False)
    end_date = Column(DateTime, nullable=True)


class Assignment(CrmBase):
    __tablename__ = "assignments"

    assignment_id = Column(Integer, primary_key=True)
    class_id = Column(Integer, ForeignKey("classes.class_id"), index=True, nullable=False)
    assignment_title = Column(String(200), nullable=False)
    due_date = Column(DateTime, nullable=False)
    status = Column(String(20), default="Pending", nullable=False)
