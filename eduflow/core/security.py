# eduflow/core/security.py
"""
Password hashing for the two principal types.

Tenant admins (CRM ``superusers``) are stored as an unsalted SHA-256 hex
digest because that is how the CRM writes them. This is weak: it is a fast,
unsalted hash. It is kept only for compatibility with existing CRM rows and
should be migrated to bcrypt together with the CRM.

Developer accounts use bcrypt.
"""
import hashlib
import hmac

import bcrypt

BCRYPT_ROUNDS = 10


# ────────────────────────────────────────────
# Tenant admins (CRM superusers)
# ────────────────────────────────────────────

def hash_superuser_password(password: str) -> str:
    return hashlib.sha256(password.encode("utf-8")).hexdigest()


def verify_superuser_password(password: str, password_hash: str) -> bool:
    if not password_hash:
        return False
    return hmac.compare_digest(hash_superuser_password(password), password_hash)


# ────────────────────────────────────────────
# Developer accounts
# ────────────────────────────────────────────

def hash_password(password: str) -> str:
    """Hash a developer password with bcrypt."""
    return bcrypt.hashpw(
        password.encode("utf-8"),
        bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
    ).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Check a developer password against its bcrypt hash."""
    if not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash
        return False
