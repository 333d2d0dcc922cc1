# eduflow/core/permissions.py
"""
Platform access (per-product feature flags) for tenant admins.

The flags live in the ``superusers.permissions`` JSON document next to the
``plan`` label used by the developer portal. The document is semi-structured,
so reads decode it defensively and writes merge into it key by key.
"""
import json
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel

PLATFORM_KEYS = ("crm", "cdi", "cefr_speaking")
PLAN_KEY = "plan"
DEFAULT_PLAN = "Basic"


class PlatformAccess(BaseModel):
    """Boolean capability flags, false unless explicitly granted."""
    crm: bool = False
    cdi: bool = False
    cefr_speaking: bool = False


def _as_document(raw: Any) -> Dict[str, Any]:
    if isinstance(raw, Mapping):
        return dict(raw)
    if isinstance(raw, (str, bytes)):
        try:
            decoded = json.loads(raw)
        except ValueError:
            return {}
        return dict(decoded) if isinstance(decoded, Mapping) else {}
    return {}


def derive_permissions(raw: Any) -> PlatformAccess:
    """
    Build the flag set from a stored permissions document.

    Only the known keys are read; a key counts as granted only when its value
    is exactly ``True``. Unknown keys, missing keys and non-dict documents are
    tolerated.
    """
    document = _as_document(raw)
    return PlatformAccess(**{key: document.get(key) is True for key in PLATFORM_KEYS})


def get_plan(raw: Any) -> Optional[str]:
    plan = _as_document(raw).get(PLAN_KEY)
    return plan if isinstance(plan, str) else None


def build_permissions(access: Optional[Mapping[str, Any]] = None, plan: Optional[str] = None) -> Dict[str, Any]:
    """Initial document for a new account."""
    flags = derive_permissions(access or {})
    document: Dict[str, Any] = flags.model_dump()
    document[PLAN_KEY] = plan or DEFAULT_PLAN
    return document


def merge_permissions(
    raw: Any,
    access: Optional[Mapping[str, Any]] = None,
    plan: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Merge a partial update into a stored document.

    Only keys present in ``access`` (with a boolean value) are written;
    everything else in the stored document, including unknown keys and the
    plan label, keeps its previous value.
    """
    document = _as_document(raw)
    for key in PLATFORM_KEYS:
        if access and key in access and isinstance(access[key], bool):
            document[key] = access[key]
    if plan:
        document[PLAN_KEY] = plan
    return document
