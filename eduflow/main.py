# eduflow/main.py
"""
FastAPI application for the EduFlow admin backend.

Tenant admins log in against the CRM ``superusers`` table and read
tenant-scoped dashboard data; developer accounts manage tenant admins through
the /api/dev endpoints. Every protected request re-validates its token
subject against the live database.

Run with:
    uvicorn eduflow.main:app --host 0.0.0.0 --port 4000
"""
import asyncio
import logging
import sys
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from eduflow.api.v1.router import api_router
from eduflow.core.config import Settings
from eduflow.core.errors import EduFlowError
from eduflow.core.jwt_auth import TokenService
from eduflow.core.logging_config import setup_logging
from eduflow.db.base import app_metadata, crm_metadata
from eduflow.db.session import Database

log = logging.getLogger("eduflow")


# ────────────────────────────────────────────
# Last-resort hooks (never used for control flow)
# ────────────────────────────────────────────

def _log_uncaught(exc_type, exc, tb):
    log.critical("Uncaught exception (server kept running)", exc_info=(exc_type, exc, tb))


def _log_loop_exception(loop, context):
    log.error(f"Unhandled event loop error: {context.get('message')}", exc_info=context.get("exception"))


def install_last_resort_hooks() -> None:
    sys.excepthook = _log_uncaught
    asyncio.get_running_loop().set_exception_handler(_log_loop_exception)


# ────────────────────────────────────────────
# Lifespan: build resources once, close on shutdown
# ────────────────────────────────────────────

@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings

    if app.state.configure_logging:
        setup_logging("eduflow", settings.log_level, settings.log_dir)
        install_last_resort_hooks()

    owned = []
    if app.state.app_db is None:
        app.state.app_db = Database.from_url(
            settings.database_url, "app database",
            settings.pool_size, settings.pool_timeout, settings.pool_recycle,
        )
        owned.append(app.state.app_db)
    if app.state.crm_db is None:
        app.state.crm_db = Database.from_url(
            settings.crm_database_url, "CRM database",
            settings.pool_size, settings.pool_timeout, settings.pool_recycle,
        )
        owned.append(app.state.crm_db)

    if settings.create_tables:
        try:
            app.state.app_db.create_all(app_metadata)
            app.state.crm_db.create_all(crm_metadata)
        except Exception as e:
            log.error(f"❌ Database initialization failed: {e}")
            raise

    log.info(f"🚀 EduFlow backend ready (port {settings.port})")
    try:
        yield
    finally:
        for db in owned:
            db.dispose()
        log.info("EduFlow backend stopped")


# ────────────────────────────────────────────
# Error handlers - every error body is {"message": ...}
# ────────────────────────────────────────────

async def eduflow_error_handler(request: Request, exc: EduFlowError):
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    message = exc.detail if isinstance(exc.detail, str) else "Request failed."
    return JSONResponse(status_code=exc.status_code, content={"message": message}, headers=exc.headers)


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = "Invalid request."
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"Invalid request: {location + ': ' if location else ''}{first.get('msg', 'invalid value')}"
    return JSONResponse(status_code=400, content={"message": message})


async def unhandled_exception_handler(request: Request, exc: Exception):
    # Full error stays in the server log only
    log.error(f"Unhandled request error on {request.method} {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(status_code=500, content={"message": "Internal server error."})


def create_app(
    settings: Optional[Settings] = None,
    app_db: Optional[Database] = None,
    crm_db: Optional[Database] = None,
    configure_logging: bool = True,
) -> FastAPI:
    """
    Build the application.

    Databases passed in are used as-is and left open on shutdown; otherwise
    the lifespan creates them from ``settings`` and disposes them.
    """
    settings = settings or Settings.from_env()

    app = FastAPI(
        title="EduFlow Admin API",
        description="Multi-tenant CRM admin backend and developer portal",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.token_service = TokenService.from_settings(settings)
    app.state.app_db = app_db
    app.state.crm_db = crm_db
    app.state.configure_logging = configure_logging

    # ────────────────────────────────────────────
    # CORS: allow-list only
    # ────────────────────────────────────────────
    allowed_origins = list(settings.cors_origins)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type"],
        max_age=86400,
    )

    @app.middleware("http")
    async def reject_unknown_origins(request: Request, call_next):
        """Requests without an Origin header (curl, server-to-server) pass"""
        origin = request.headers.get("origin")
        if origin and origin not in allowed_origins:
            log.warning(f"CORS blocked for origin: {origin}")
            return JSONResponse(status_code=403, content={"message": "Origin not allowed."})
        return await call_next(request)

    app.add_exception_handler(EduFlowError, eduflow_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    app.include_router(api_router, prefix="/api")
    return app


app = create_app()
