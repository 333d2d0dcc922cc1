"""
Shared fixtures: in-memory SQLite stores injected into the app.
"""
from datetime import datetime
from typing import Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from eduflow.core.config import Settings
from eduflow.core.jwt_auth import TokenService
from eduflow.core.security import hash_password, hash_superuser_password
from eduflow.db.base import app_metadata, crm_metadata
from eduflow.db.session import Database
from eduflow.main import create_app
from eduflow.models import DevUser, EduCenter, Superuser

JWT_SECRET = "test-secret"
ALLOWED_ORIGIN = "http://localhost:5173"


def memory_database(name: str) -> Database:
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    return Database(engine, name=name)


@pytest.fixture
def settings(tmp_path):
    return Settings(
        database_url="sqlite://",
        crm_database_url="sqlite://",
        jwt_secret=JWT_SECRET,
        cors_origins=[ALLOWED_ORIGIN],
        log_dir=tmp_path,
    )


@pytest.fixture
def app_db():
    db = memory_database("app database")
    db.create_all(app_metadata)
    yield db
    db.dispose()


@pytest.fixture
def crm_db():
    db = memory_database("CRM database")
    db.create_all(crm_metadata)
    yield db
    db.dispose()


@pytest.fixture
def client(settings, app_db, crm_db):
    app = create_app(settings, app_db=app_db, crm_db=crm_db, configure_logging=False)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def tokens():
    return TokenService(secret=JWT_SECRET)


# ────────────────────────────────────────────
# Data helpers
# ────────────────────────────────────────────

def make_center(crm_db: Database, center_id: Optional[int] = None, name: str = "EduFlow Academy", code: Optional[str] = None) -> int:
    with crm_db.session() as session:
        center = EduCenter(
            center_id=center_id,
            center_name=name,
            center_code=code or f"C{center_id or name[:3].upper()}",
            city="New York",
        )
        session.add(center)
        session.flush()
        return center.center_id


def make_superuser(
    crm_db: Database,
    center_id: int,
    username: str = "admin",
    password: str = "admin123",
    status: str = "Active",
    is_locked: bool = False,
    locked_until: Optional[datetime] = None,
    login_attempts: int = 0,
    permissions: Optional[dict] = None,
    role: str = "superadmin",
    **extra,
) -> int:
    with crm_db.session() as session:
        user = Superuser(
            center_id=center_id,
            username=username,
            password_hash=hash_superuser_password(password),
            role=role,
            status=status,
            is_locked=is_locked,
            locked_until=locked_until,
            login_attempts=login_attempts,
            permissions=permissions,
            **extra,
        )
        session.add(user)
        session.flush()
        return user.superuser_id


def make_developer(app_db: Database, username: str = "devuser", password: str = "devpass", is_active: bool = True) -> int:
    with app_db.session() as session:
        dev_user = DevUser(
            username=username,
            password_hash=hash_password(password),
            display_name="Dev User",
            is_active=is_active,
        )
        session.add(dev_user)
        session.flush()
        return dev_user.id


def load_superuser(crm_db: Database, superuser_id: int) -> Optional[Superuser]:
    with crm_db.session() as session:
        user = session.get(Superuser, superuser_id)
        if user is not None:
            session.expunge(user)
        return user


def update_superuser(crm_db: Database, superuser_id: int, **values) -> None:
    with crm_db.session() as session:
        user = session.get(Superuser, superuser_id)
        for key, value in values.items():
            setattr(user, key, value)


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}
