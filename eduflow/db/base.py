"""Import all models so both metadata objects are complete"""
from eduflow.models import AppBase, CrmBase  # noqa: F401

app_metadata = AppBase.metadata
crm_metadata = CrmBase.metadata

__all__ = ["app_metadata", "crm_metadata"]
