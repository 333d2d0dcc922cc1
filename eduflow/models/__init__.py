from eduflow.models.base import AppBase, CrmBase
from eduflow.models.dev_user import DevUser
from eduflow.models.edu_center import EduCenter
from eduflow.models.superuser import Superuser
from eduflow.models.reporting import CrmClass, Student, Payment, Debt, CrmTest, Assignment

__all__ = [
    "AppBase", "CrmBase", "DevUser", "EduCenter", "Superuser",
    "CrmClass", "Student", "Payment", "Debt", "CrmTest", "Assignment",
]
