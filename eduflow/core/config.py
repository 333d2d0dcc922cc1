# eduflow/core/config.py
"""
Application configuration - loads from environment variables.
Single source of truth for all settings.

Settings are built once at startup (``Settings.from_env()``) and handed to
``create_app``; nothing else reads the environment afterwards.
"""
import os
import warnings
from typing import List, Optional
from urllib.parse import quote_plus
from pathlib import Path
from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent.parent

DEFAULT_JWT_SECRET = "change-me-in-production"
DEFAULT_CORS_ORIGINS = "http://localhost:5173,http://127.0.0.1:5173"


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() not in ("0", "false", "no")


def _build_url(user: str, password: str, host: str, port: str, name: str) -> str:
    encoded_password = quote_plus(password)
    return f"postgresql://{user}:{encoded_password}@{host}:{port}/{name}"


def parse_origins(raw: str) -> List[str]:
    """Split a comma-separated origin list, dropping blanks."""
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


class Settings:
    """Runtime settings for one application instance."""

    def __init__(
        self,
        database_url: str,
        crm_database_url: str,
        jwt_secret: str = DEFAULT_JWT_SECRET,
        jwt_algorithm: str = "HS256",
        admin_token_lifetime_hours: int = 8,
        dev_token_lifetime_hours: int = 12,
        cors_origins: Optional[List[str]] = None,
        pool_size: int = 10,
        pool_timeout: int = 5,
        pool_recycle: int = 30,
        create_tables: bool = True,
        port: int = 4000,
        log_level: str = "INFO",
        log_dir: Optional[Path] = None,
    ):
        self.database_url = database_url
        self.crm_database_url = crm_database_url
        self.jwt_secret = jwt_secret
        self.jwt_algorithm = jwt_algorithm
        self.admin_token_lifetime_hours = admin_token_lifetime_hours
        self.dev_token_lifetime_hours = dev_token_lifetime_hours
        self.cors_origins = cors_origins if cors_origins is not None else parse_origins(DEFAULT_CORS_ORIGINS)
        self.pool_size = pool_size
        self.pool_timeout = pool_timeout
        self.pool_recycle = pool_recycle
        self.create_tables = create_tables
        self.port = port
        self.log_level = log_level
        self.log_dir = log_dir

    @classmethod
    def from_env(cls, env_file: Optional[Path] = None) -> "Settings":
        """Load ``.env`` (if present) and build settings from the environment."""
        load_dotenv(dotenv_path=env_file or BASE_DIR / ".env")

        # ────────────────────────────────────────────
        # App database (developer accounts)
        # ────────────────────────────────────────────
        db_user = os.getenv("DB_USER", "postgres")
        db_password = os.getenv("DB_PASSWORD", "")
        db_host = os.getenv("DB_HOST", "localhost")
        db_port = os.getenv("DB_PORT", "5432")
        db_name = os.getenv("DB_NAME", "edu_flow")
        database_url = os.getenv("DATABASE_URL") or _build_url(
            db_user, db_password, db_host, db_port, db_name
        )

        # ────────────────────────────────────────────
        # CRM database (tenants, superusers, reporting)
        # ────────────────────────────────────────────
        crm_database_url = os.getenv("CRM_DATABASE_URL") or _build_url(
            os.getenv("CRM_DB_USER", db_user),
            os.getenv("CRM_DB_PASSWORD", db_password),
            os.getenv("CRM_DB_HOST", db_host),
            os.getenv("CRM_DB_PORT", db_port),
            os.getenv("CRM_DB_NAME", "crm_db"),
        )

        # ────────────────────────────────────────────
        # JWT
        # ────────────────────────────────────────────
        jwt_secret = os.getenv("JWT_SECRET", DEFAULT_JWT_SECRET)
        if jwt_secret == DEFAULT_JWT_SECRET:
            warnings.warn("JWT_SECRET not set! Using the insecure default secret.")

        log_dir = os.getenv("LOG_DIR")

        return cls(
            database_url=database_url,
            crm_database_url=crm_database_url,
            jwt_secret=jwt_secret,
            jwt_algorithm=os.getenv("JWT_ALGORITHM", "HS256"),
            admin_token_lifetime_hours=int(os.getenv("ADMIN_TOKEN_LIFETIME_HOURS", "8")),
            dev_token_lifetime_hours=int(os.getenv("DEV_TOKEN_LIFETIME_HOURS", "12")),
            cors_origins=parse_origins(os.getenv("CORS_ORIGIN", DEFAULT_CORS_ORIGINS)),
            pool_size=int(os.getenv("DB_POOL_SIZE", "10")),
            pool_timeout=int(os.getenv("DB_POOL_TIMEOUT", "5")),
            pool_recycle=int(os.getenv("DB_POOL_RECYCLE", "30")),
            create_tables=_env_bool("CREATE_TABLES", "true"),
            port=int(os.getenv("PORT", "4000")),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_dir=Path(log_dir) if log_dir else BASE_DIR / "logs",
        )
