# eduflow/db/session.py
"""
Database session management.

One ``Database`` per logical store (app database and CRM database). Both are
built once in the application lifespan, kept on ``app.state`` and disposed on
shutdown. Handlers reach them only through the dependencies below.
"""
import logging
from contextlib import contextmanager
from typing import Iterator

from fastapi import Request
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import QueuePool

log = logging.getLogger("eduflow.database")


class Database:
    """Engine + session factory for one store."""

    def __init__(self, engine: Engine, name: str = "database"):
        self.name = name
        self.engine = engine
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    @classmethod
    def from_url(
        cls,
        url: str,
        name: str = "database",
        pool_size: int = 10,
        pool_timeout: int = 5,
        pool_recycle: int = 30,
    ) -> "Database":
        engine = create_engine(
            url,
            poolclass=QueuePool,
            pool_size=pool_size,
            max_overflow=0,
            pool_timeout=pool_timeout,  # Connection acquisition timeout (seconds)
            pool_recycle=pool_recycle,  # Drop connections idle past this age
            pool_pre_ping=True,  # Verify connections before using
            echo=False
        )
        return cls(engine, name=name)

    @contextmanager
    def session(self) -> Iterator[Session]:
        """
        Context manager for database sessions.

        Usage:
            with db.session() as session:
                session.add(obj)
        """
        session = self.SessionLocal()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def ping(self) -> bool:
        """Run ``SELECT 1``; False if the database is unreachable."""
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except Exception as e:
            log.error(f"❌ {self.name} connection failed: {e}")
            return False

    def create_all(self, metadata) -> None:
        metadata.create_all(bind=self.engine)
        log.info(f"✅ {self.name} tables initialized")

    def dispose(self) -> None:
        self.engine.dispose()
        log.info(f"{self.name} pool closed")


def _session_for(db: Database) -> Iterator[Session]:
    session = db.SessionLocal()
    try:
        yield session
    finally:
        session.close()


# ────────────────────────────────────────────
# FastAPI Dependencies
# ────────────────────────────────────────────

def get_app_database(request: Request) -> Database:
    return request.app.state.app_db


def get_app_db(request: Request) -> Iterator[Session]:
    """Session on the app database (developer accounts)."""
    yield from _session_for(request.app.state.app_db)


def get_crm_db(request: Request) -> Iterator[Session]:
    """Session on the CRM database (tenants, superusers, reporting)."""
    yield from _session_for(request.app.state.crm_db)
